"""
Indexed retrieval: cache check, query embedding, ranking, quality filter, cache store.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from grounding.config import RetrievalConfig
from grounding.embeddings.indexer import EmbeddingIndexer
from grounding.index.base import SearchResult
from grounding.index.store import CorpusIndex
from grounding.rag.cache import QueryCache
from grounding.rag.quality import QualityFilter
from grounding.rag.similarity import rank


class RetrievalService:
    """Tier-one search against the live corpus."""

    def __init__(
        self,
        index: CorpusIndex,
        indexer: EmbeddingIndexer,
        cache: QueryCache,
        config: RetrievalConfig | None = None,
        quality_filter: QualityFilter | None = None,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.index = index
        self.indexer = indexer
        self.cache = cache
        self.config = config or RetrievalConfig.from_settings()
        self.quality_filter = quality_filter or QualityFilter(
            relevance_threshold=self.config.relevance_threshold,
            max_results=self.config.max_results,
            min_chars=self.config.min_chunk_chars,
        )
        self.logger = logger_ or logging.getLogger(__name__)

    @staticmethod
    def normalize_question(text: str) -> str:
        """Trim and collapse runs of whitespace."""
        return " ".join(text.strip().split())

    async def search(self, query: str, top_k: int | None = None) -> Tuple[SearchResult, ...]:
        """
        Return the filtered results for ``query`` against one corpus snapshot.

        Only searches with the configured ``top_k`` are cached, so a hit is
        always the same result set a fresh search would produce.
        """
        question = self.normalize_question(query)
        corpus = self.index.current()
        if not question or corpus is None or len(corpus) == 0:
            return ()

        k = top_k or self.config.top_k
        cacheable = k == self.config.top_k
        if cacheable:
            cached = self.cache.get(question)
            if cached is not None:
                self.logger.info("Using cached results", extra={"query": question, "count": len(cached)})
                return cached

        vector = await self.indexer.embed_one(question)
        ranked = rank(vector, corpus, top_k=k, floor=self.config.similarity_floor)
        candidates: List[SearchResult] = [
            SearchResult(chunk=corpus.chunks[idx], similarity=score, relevance=0.0)
            for idx, score in ranked
        ]
        final = tuple(self.quality_filter.filter(candidates, question))

        self.logger.info(
            "Retrieved chunks",
            extra={
                "query": question,
                "ranked": len(ranked),
                "returned": len(final),
                "top_score": round(final[0].similarity, 3) if final else None,
                "corpus_version": corpus.version,
            },
        )

        if cacheable:
            self.cache.put(question, final, generation=corpus.version)
        return final


__all__ = ["RetrievalService"]
