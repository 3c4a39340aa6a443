"""
Domain errors raised by the grounding engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from grounding.index.base import GroundingResult
    from grounding.rag.generation import GenerationPayload


class GroundingError(Exception):
    """Base class for engine errors."""

    reason: str = "error"


class ExtractionFailed(GroundingError):
    """Text extraction from the source document produced no usable text."""

    reason = "extraction_failed"


class NoUsableContent(GroundingError):
    """Segmentation left no substantive chunks (empty or boilerplate-only text)."""

    reason = "no_usable_content"


class EmbeddingBackendUnavailable(GroundingError):
    """Model initialization or an embedding call failed."""

    reason = "embedding_failed"


class GenerationUnavailable(GroundingError):
    """The generation collaborator failed; retrieval output is kept for a retry."""

    reason = "generation_failed"

    def __init__(
        self,
        message: str,
        grounding: "GroundingResult",
        payload: "GenerationPayload",
    ) -> None:
        super().__init__(message)
        self.grounding = grounding
        self.payload = payload


__all__ = [
    "GroundingError",
    "ExtractionFailed",
    "NoUsableContent",
    "EmbeddingBackendUnavailable",
    "GenerationUnavailable",
]
