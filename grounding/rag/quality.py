"""
Post-ranking quality filter: boilerplate removal and lexical relevance.
"""

from __future__ import annotations

import re
from typing import List, Sequence

from grounding.config import settings
from grounding.index.base import SearchResult
from grounding.indexing.boilerplate import is_boilerplate

MIN_TERM_CHARS = 3

TERM_PATTERN = re.compile(r"\w+")


def query_terms(query: str) -> List[str]:
    """Lower-cased word terms longer than two characters; punctuation is dropped."""
    return [term for term in TERM_PATTERN.findall(query.lower()) if len(term) >= MIN_TERM_CHARS]


def lexical_relevance(text: str, query: str) -> float:
    """Share of query terms that occur literally in ``text``; 0.0 without terms."""
    terms = query_terms(query)
    if not terms:
        return 0.0
    lowered = text.lower()
    return sum(1 for term in terms if term in lowered) / len(terms)


class QualityFilter:
    def __init__(
        self,
        relevance_threshold: float = settings.relevance_threshold,
        max_results: int = settings.max_context_chunks,
        min_chars: int = settings.min_chunk_chars,
    ) -> None:
        self.relevance_threshold = relevance_threshold
        self.max_results = max_results
        self.min_chars = min_chars

    def filter(self, results: Sequence[SearchResult], query: str) -> List[SearchResult]:
        """
        Keep results that are substantive and either share a query term or are
        semantically close enough, then truncate to ``max_results``.
        """
        kept: List[SearchResult] = []
        for result in results:
            text = result.content
            if len(text.strip()) < self.min_chars or is_boilerplate(text):
                continue

            relevance = lexical_relevance(text, query)
            if relevance > 0 or result.similarity > self.relevance_threshold:
                kept.append(SearchResult(chunk=result.chunk, similarity=result.similarity, relevance=relevance))

            if len(kept) >= self.max_results:
                break

        return kept


__all__ = ["QualityFilter", "lexical_relevance", "query_terms"]
