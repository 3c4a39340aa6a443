"""
Wiring of one grounding engine instance: corpus index, cache, indexer and services.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Mapping

from grounding.config import RetrievalConfig, Settings, settings
from grounding.embeddings import EmbeddingBackend, EmbeddingIndexer, get_embedding_backend
from grounding.extraction import get_extractor
from grounding.index.base import GroundingResult
from grounding.index.store import CorpusIndex
from grounding.indexing.pipeline import ExtractorFactory, IngestionService, IngestionSummary
from grounding.llm.client import LLMClient
from grounding.rag.cache import QueryCache
from grounding.rag.fallback import FallbackOrchestrator
from grounding.rag.generation import Reading, ReadingService
from grounding.rag.pipeline import RetrievalService

logger = logging.getLogger(__name__)


class GroundingEngine:
    """Owns the live corpus and every service that reads or replaces it."""

    def __init__(
        self,
        settings_: Settings | None = None,
        embedding_backend: EmbeddingBackend | None = None,
        llm_client: LLMClient | None = None,
        extractor_factory: ExtractorFactory | None = None,
        config: RetrievalConfig | None = None,
        show_progress: bool = False,
    ) -> None:
        self.settings = settings_ or settings
        self.config = config or RetrievalConfig.from_settings(self.settings)

        self.index = CorpusIndex()
        self.cache = QueryCache()
        self.indexer = EmbeddingIndexer(
            embedding_backend or get_embedding_backend(self.settings),
            batch_size=self.config.embed_batch_size,
            show_progress=show_progress,
        )
        self.ingestion = IngestionService(
            self.index,
            self.indexer,
            self.cache,
            config=self.config,
            extractor_factory=extractor_factory or (lambda path: get_extractor(path, self.settings)),
        )
        self.retrieval = RetrievalService(self.index, self.indexer, self.cache, config=self.config)
        self.orchestrator = FallbackOrchestrator(
            self.index,
            self.retrieval,
            status_provider=lambda: self.ingestion.status,
            config=self.config,
        )
        self.reading = ReadingService(
            self.orchestrator,
            llm_client
            or LLMClient(
                model=self.settings.llm_model_name,
                temperature=self.settings.llm_temperature,
                max_tokens=self.settings.llm_max_tokens,
            ),
        )

    async def ingest(self, path: str | None = None, force: bool = False) -> IngestionSummary:
        return await self.ingestion.ingest(path or self.settings.document_path, force=force)

    async def search(self, query: str, top_k: int | None = None) -> GroundingResult:
        return await self.orchestrator.retrieve(query, top_k=top_k)

    async def generate_reading(self, question: str, subject_data: Mapping[str, Any] | None = None) -> Reading:
        # An ingestion still running gets a bounded wait; after that the fallback tiers answer.
        await self.ingestion.wait_until_settled(self.settings.ingestion_wait_timeout_sec)
        return await self.reading.generate(question, subject_data)

    def clear_cache(self) -> int:
        cleared = len(self.cache)
        self.cache.clear()
        return cleared

    def status(self) -> Dict[str, Any]:
        """Read-only snapshot; never triggers ingestion."""
        corpus = self.index.current()
        return {
            "corpus_loaded": corpus is not None,
            "corpus_version": corpus.version if corpus is not None else 0,
            "chunks_loaded": len(corpus) if corpus is not None else 0,
            "embeddings_loaded": int(corpus.embeddings.shape[0]) if corpus is not None else 0,
            "keyword_buffer": len(self.index.buffer()),
            "cache_size": len(self.cache),
            "embedding_model": self.indexer.model_name,
            "embedding_ready": self.indexer.is_ready,
            "ingestion": self.ingestion.status.to_dict(),
        }


@lru_cache
def get_engine() -> GroundingEngine:
    logger.info("Creating grounding engine")
    return GroundingEngine()


__all__ = ["GroundingEngine", "get_engine"]
