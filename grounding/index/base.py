"""
Corpus data model and shared result types.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import numpy as np

CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True)
class Chunk:
    index: int
    text: str
    start: int = 0

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def end(self) -> int:
        return self.start + len(self.text)


@dataclass(frozen=True, eq=False)
class Corpus:
    """Chunks and their embedding rows, index-aligned. Never mutated after creation."""

    chunks: Tuple[Chunk, ...]
    embeddings: np.ndarray
    version: int = 0
    source: str | None = None

    def __post_init__(self) -> None:
        matrix = np.array(self.embeddings, dtype=np.float32)
        if matrix.size == 0:
            matrix = matrix.reshape(0, 0)
        if matrix.ndim != 2:
            raise ValueError(f"Embeddings must be a 2-D matrix, got shape {matrix.shape}")
        if len(self.chunks) != matrix.shape[0]:
            raise ValueError(
                f"Corpus misaligned: {len(self.chunks)} chunks vs {matrix.shape[0]} embeddings"
            )
        matrix.flags.writeable = False
        object.__setattr__(self, "chunks", tuple(self.chunks))
        object.__setattr__(self, "embeddings", matrix)

    def __len__(self) -> int:
        return len(self.chunks)

    @property
    def dimension(self) -> int:
        return int(self.embeddings.shape[1]) if len(self.chunks) else 0


@dataclass(frozen=True)
class SearchResult:
    chunk: Chunk
    similarity: float
    relevance: float

    @property
    def content(self) -> str:
        return self.chunk.text

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "similarity": self.similarity, "relevance": self.relevance}


class Provenance(str, enum.Enum):
    INDEXED = "indexed"
    KEYWORD_FALLBACK = "keyword_fallback"
    STATIC_DEFAULT = "static_default"
    NO_MATCH = "no_match"
    NO_CORPUS = "no_corpus"


@dataclass(frozen=True)
class GroundingResult:
    """Retrieval output of one fallback tier, tagged with the tier that produced it."""

    provenance: Provenance
    results: Tuple[SearchResult, ...] = ()
    error: str | None = None

    @property
    def context(self) -> str:
        return CONTEXT_SEPARATOR.join(r.content for r in self.results)

    @property
    def chunks_used(self) -> int:
        return len(self.results)

    @property
    def context_length(self) -> int:
        return len(self.context)

    @property
    def top_similarity(self) -> float:
        return self.results[0].similarity if self.results else 0.0

    @property
    def low_confidence(self) -> bool:
        return self.provenance is not Provenance.INDEXED


class IngestionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionStatus:
    state: IngestionState = IngestionState.NOT_STARTED
    chunk_count: int = 0
    embedding_count: int = 0
    source_length: int = 0
    source: str | None = None
    error: str | None = None
    reason: str | None = None
    last_processed: Optional[datetime] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.state.value,
            "chunks": self.chunk_count,
            "embeddings": self.embedding_count,
            "total_text_length": self.source_length,
            "source": self.source,
            "error": self.error,
            "reason": self.reason,
            "last_processed": self.last_processed.isoformat() if self.last_processed else None,
        }


__all__ = [
    "CONTEXT_SEPARATOR",
    "Chunk",
    "Corpus",
    "SearchResult",
    "Provenance",
    "GroundingResult",
    "IngestionState",
    "IngestionStatus",
]
