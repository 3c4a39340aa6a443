"""
Three-tier retrieval: indexed search, keyword scan, static default knowledge.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple

from grounding.config import RetrievalConfig
from grounding.errors import EmbeddingBackendUnavailable
from grounding.index.base import (
    Chunk,
    GroundingResult,
    IngestionState,
    IngestionStatus,
    Provenance,
    SearchResult,
)
from grounding.index.store import CorpusIndex
from grounding.indexing.boilerplate import is_boilerplate
from grounding.rag.pipeline import RetrievalService
from grounding.rag.quality import lexical_relevance, query_terms

logger = logging.getLogger(__name__)

STATIC_DEFAULT_KNOWLEDGE: Tuple[str, ...] = (
    "Bhrigu Nandi Nadi reads a chart from planet-to-planet relationships rather than "
    "house lordships; the ascendant is given little weight.",
    "Jupiter is the jiva karaka and signifies the native in a male chart; Venus plays "
    "this role in a female chart. Saturn is the karma karaka and signifies career.",
    "Planets in trine to each other (1st, 5th and 9th signs from a planet) combine "
    "their results, as do planets in the same sign.",
    "A planet influences the planets in the sign immediately before it (2nd from it) "
    "and after it (12th from it); the 7th from a planet shows its partner.",
    "A retrograde planet is also read from the sign behind it, and an exchange of "
    "signs between two planets links both significations.",
    "Transits of Jupiter and Saturn over natal planets time events: Jupiter brings "
    "growth to what it touches, Saturn brings delay, effort and maturity.",
)

StatusProvider = Callable[[], IngestionStatus]


def keyword_scan(
    chunks: Sequence[Chunk],
    query: str,
    limit: int,
    similarity: float,
) -> List[SearchResult]:
    """
    Chunks containing at least one query term, in document order.

    No vector comparison happens here, so every match gets the same fixed
    ``similarity``.
    """
    terms = query_terms(query)
    if not terms or limit <= 0:
        return []

    matches: List[SearchResult] = []
    for chunk in chunks:
        lowered = chunk.text.lower()
        if not any(term in lowered for term in terms):
            continue
        if is_boilerplate(chunk.text):
            continue
        matches.append(
            SearchResult(chunk=chunk, similarity=similarity, relevance=lexical_relevance(chunk.text, query))
        )
        if len(matches) >= limit:
            break
    return matches


def static_results(facts: Sequence[str], query: str) -> List[SearchResult]:
    return [
        SearchResult(chunk=Chunk(index=idx, text=fact), similarity=0.0, relevance=lexical_relevance(fact, query))
        for idx, fact in enumerate(facts)
    ]


class FallbackOrchestrator:
    """
    Runs the retrieval tiers in order and returns the first non-empty one.

    Indexed search needs a ready ingestion status. The keyword tier scans the
    unindexed chunk buffer, which also exists when embedding failed during
    ingestion. The static tier always has an answer unless disabled, in
    which case the result is tagged ``no_match`` when a corpus is loaded and
    ``no_corpus`` when no ingestion has succeeded yet.
    """

    def __init__(
        self,
        index: CorpusIndex,
        retrieval: RetrievalService,
        status_provider: StatusProvider,
        config: RetrievalConfig | None = None,
        static_knowledge: Sequence[str] = STATIC_DEFAULT_KNOWLEDGE,
    ) -> None:
        self.index = index
        self.retrieval = retrieval
        self.status_provider = status_provider
        self.config = config or RetrievalConfig.from_settings()
        self.static_knowledge = tuple(static_knowledge)

    async def retrieve(self, query: str, top_k: int | None = None) -> GroundingResult:
        error: str | None = None

        status = self.status_provider()
        if status.state is IngestionState.READY and self.index.is_loaded:
            try:
                results = await self.retrieval.search(query, top_k=top_k)
            except EmbeddingBackendUnavailable as exc:
                logger.warning("Indexed search unavailable, using keyword fallback", extra={"error": str(exc)})
                error = str(exc)
                results = ()
            if results:
                return GroundingResult(provenance=Provenance.INDEXED, results=tuple(results))

        buffer = self.index.buffer()
        if buffer:
            matches = keyword_scan(
                buffer,
                query,
                limit=self.config.keyword_fallback_limit,
                similarity=self.config.keyword_fallback_similarity,
            )
            if matches:
                logger.info("Keyword fallback matched", extra={"count": len(matches), "buffer": len(buffer)})
                return GroundingResult(provenance=Provenance.KEYWORD_FALLBACK, results=tuple(matches), error=error)

        if self.config.static_knowledge_enabled and self.static_knowledge:
            logger.info("No relevant chunks found, using static default knowledge")
            return GroundingResult(
                provenance=Provenance.STATIC_DEFAULT,
                results=tuple(static_results(self.static_knowledge, query)),
                error=error,
            )

        if self.index.is_loaded:
            logger.info("No tier matched the query", extra={"corpus_version": self.index.version})
            return GroundingResult(provenance=Provenance.NO_MATCH, error=error)

        logger.info("No grounding available", extra={"ingestion": status.state.value})
        return GroundingResult(provenance=Provenance.NO_CORPUS, error=error)


__all__ = ["FallbackOrchestrator", "STATIC_DEFAULT_KNOWLEDGE", "keyword_scan", "static_results"]
