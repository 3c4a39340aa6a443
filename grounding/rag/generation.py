"""
Generation hand-off: retrieve grounding, build the payload, call the LLM.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from grounding.errors import GenerationUnavailable
from grounding.index.base import GroundingResult
from grounding.llm.client import LLMClient
from grounding.rag.fallback import FallbackOrchestrator
from grounding.rag.prompts import build_messages


@dataclass(frozen=True)
class GenerationPayload:
    grounding_context: str
    user_question: str
    subject_data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReadingMetadata:
    source: str
    chunks_used: int
    context_length: int
    top_similarity: float
    model: str
    timestamp: datetime

    @classmethod
    def from_grounding(cls, grounding: GroundingResult, model: str) -> "ReadingMetadata":
        return cls(
            source=grounding.provenance.value,
            chunks_used=grounding.chunks_used,
            context_length=grounding.context_length,
            top_similarity=grounding.top_similarity,
            model=model,
            timestamp=datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "chunks_used": self.chunks_used,
            "context_length": self.context_length,
            "top_similarity": self.top_similarity,
            "model": self.model,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Reading:
    answer: str
    metadata: ReadingMetadata
    grounding: GroundingResult


class ReadingService:
    """Produces an answer grounded on the best available retrieval tier."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        llm_client: LLMClient,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.llm_client = llm_client
        self.logger = logger_ or logging.getLogger(__name__)

    async def generate(self, question: str, subject_data: Mapping[str, Any] | None = None) -> Reading:
        grounding = await self.orchestrator.retrieve(question)
        payload = GenerationPayload(
            grounding_context=grounding.context,
            user_question=question,
            subject_data=dict(subject_data or {}),
        )
        self.logger.info(
            "Grounding assembled",
            extra={
                "source": grounding.provenance.value,
                "chunks": grounding.chunks_used,
                "context_length": grounding.context_length,
            },
        )
        return await self.complete(payload, grounding)

    async def complete(self, payload: GenerationPayload, grounding: GroundingResult) -> Reading:
        """Run only the generation step; used directly to retry after GenerationUnavailable."""
        messages = build_messages(payload.user_question, payload.subject_data, payload.grounding_context)
        try:
            answer = await asyncio.to_thread(self.llm_client.chat, messages)
        except Exception as exc:
            self.logger.error("Generation failed", extra={"error": str(exc), "source": grounding.provenance.value})
            raise GenerationUnavailable(f"Generation failed: {exc}", grounding=grounding, payload=payload) from exc

        if not answer.strip():
            raise GenerationUnavailable("Generation returned an empty answer", grounding=grounding, payload=payload)

        metadata = ReadingMetadata.from_grounding(grounding, model=self.llm_client.model)
        self.logger.info("Reading generated", extra={"length": len(answer), "source": metadata.source})
        return Reading(answer=answer, metadata=metadata, grounding=grounding)


__all__ = ["GenerationPayload", "Reading", "ReadingMetadata", "ReadingService"]
