from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


# Admin
class IngestRequest(BaseModel):
    """Request to ingest the reference document."""

    document_path: str | None = Field(default=None, description="Document to ingest; defaults to DOCUMENT_PATH")
    force: bool = Field(default=False, description="Re-ingest even if a corpus is ready")


class IngestResponse(BaseModel):
    result: Literal["processed", "already_processed"]
    status: str
    chunks: int = Field(..., ge=0)
    embeddings: int = Field(..., ge=0)
    total_text_length: int = Field(..., ge=0)
    elapsed_sec: float | None = Field(None, ge=0)


class CacheClearResponse(BaseModel):
    cleared: int = Field(..., ge=0, description="Number of cache entries removed")


# Retrieval
class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    top_k: int | None = Field(default=None, gt=0)


class SearchHit(BaseModel):
    content: str
    similarity: float = Field(..., ge=-1.0, le=1.0)
    relevance: float = Field(..., ge=0.0, le=1.0)


class SearchResponse(BaseModel):
    source: str
    low_confidence: bool
    results: List[SearchHit]
    error: str | None = None


# Readings
class ReadingRequest(BaseModel):
    question: str = Field(..., min_length=1, description="User question")
    subject_data: Dict[str, Any] = Field(
        default_factory=dict,
        alias="kundliData",
        description="Structured birth-chart data of the subject",
    )

    model_config = {"populate_by_name": True}


class ReadingMetadataModel(BaseModel):
    source: str
    chunks_used: int
    context_length: int
    top_similarity: float
    model: str
    timestamp: str


class ReadingResponse(BaseModel):
    answer: str
    metadata: ReadingMetadataModel


# Status
class IngestionStatusModel(BaseModel):
    status: str
    chunks: int
    embeddings: int
    total_text_length: int
    source: str | None = None
    error: str | None = None
    reason: str | None = None
    last_processed: str | None = None


class StatusResponse(BaseModel):
    corpus_loaded: bool
    corpus_version: int
    chunks_loaded: int
    embeddings_loaded: int
    keyword_buffer: int
    cache_size: int
    embedding_model: str
    embedding_ready: bool
    ingestion: IngestionStatusModel


__all__ = [
    "IngestRequest",
    "IngestResponse",
    "CacheClearResponse",
    "SearchRequest",
    "SearchHit",
    "SearchResponse",
    "ReadingRequest",
    "ReadingMetadataModel",
    "ReadingResponse",
    "IngestionStatusModel",
    "StatusResponse",
]
