"""
Process-lifetime memo of filtered search results, keyed by normalized query.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Tuple

from grounding.index.base import SearchResult

logger = logging.getLogger(__name__)


def normalize_query(query: str) -> str:
    return query.strip().lower()


class QueryCache:
    """
    Unbounded cache of final (filtered) result tuples.

    ``generation`` is the corpus version the entries belong to. ``reset``
    empties the cache for a new corpus; a ``put`` tagged with another
    generation is dropped, so a query that started before a corpus swap
    cannot write stale results afterwards.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[SearchResult, ...]] = {}
        self._generation = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def generation(self) -> int:
        return self._generation

    def get(self, query: str) -> Optional[Tuple[SearchResult, ...]]:
        return self._entries.get(normalize_query(query))

    def put(
        self,
        query: str,
        results: Sequence[SearchResult],
        generation: int | None = None,
    ) -> None:
        if generation is not None and generation != self._generation:
            logger.info(
                "Dropping cache write for superseded corpus",
                extra={"generation": generation, "current": self._generation},
            )
            return
        self._entries[normalize_query(query)] = tuple(results)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Query cache cleared")

    def reset(self, generation: int) -> None:
        self._generation = generation
        self.clear()


__all__ = ["QueryCache", "normalize_query"]
