"""
Corpus types and the live corpus holder.
"""

from grounding.index.base import (
    Chunk,
    Corpus,
    GroundingResult,
    IngestionState,
    IngestionStatus,
    Provenance,
    SearchResult,
)
from grounding.index.store import CorpusIndex

__all__ = [
    "Chunk",
    "Corpus",
    "CorpusIndex",
    "GroundingResult",
    "IngestionState",
    "IngestionStatus",
    "Provenance",
    "SearchResult",
]
