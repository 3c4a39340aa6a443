"""
In-memory holder of the live corpus with swap-on-replace semantics.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
from typing import Sequence, Tuple

from grounding.index.base import Chunk, Corpus

logger = logging.getLogger(__name__)


class CorpusIndex:
    """
    Owns the single live Corpus of an engine.

    Readers take a snapshot with ``current()`` and keep using it; ``publish``
    replaces the reference in one assignment, so a reader never sees a mix of
    two versions. The keyword buffer is the unindexed chunk list used by the
    keyword fallback tier, and may exist without a Corpus.
    """

    def __init__(self) -> None:
        self._corpus: Corpus | None = None
        self._buffer: Tuple[Chunk, ...] = ()
        self._versions = itertools.count(1)

    def current(self) -> Corpus | None:
        return self._corpus

    def buffer(self) -> Tuple[Chunk, ...]:
        return self._buffer

    @property
    def is_loaded(self) -> bool:
        return self._corpus is not None

    @property
    def version(self) -> int:
        return self._corpus.version if self._corpus is not None else 0

    def publish(self, corpus: Corpus) -> Corpus:
        versioned = dataclasses.replace(corpus, version=next(self._versions))
        self._corpus = versioned
        self._buffer = versioned.chunks
        logger.info(
            "Corpus published",
            extra={"version": versioned.version, "chunks": len(versioned), "source": versioned.source},
        )
        return versioned

    def publish_buffer(self, chunks: Sequence[Chunk]) -> None:
        self._buffer = tuple(chunks)
        logger.info("Keyword buffer published", extra={"chunks": len(self._buffer)})


__all__ = ["CorpusIndex"]
