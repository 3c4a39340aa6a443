"""
Embedding indexer: one-time backend initialization, batching and normalization.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

import numpy as np
from tqdm import tqdm

from grounding.config import settings
from grounding.embeddings.base import EmbeddingBackend
from grounding.errors import EmbeddingBackendUnavailable

logger = logging.getLogger(__name__)

DEFAULT_EMBED_BATCH_SIZE = settings.embed_batch_size


def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """L2-normalize each row; all-zero rows stay zero."""
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    return np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)


class EmbeddingIndexer:
    """
    Turns texts into unit-length vectors using an ``EmbeddingBackend``.

    The backend is loaded lazily, once: the first caller schedules
    ``backend.load()`` in a worker thread and every concurrent caller awaits
    that same future. A failed load is forgotten so a later call can retry.
    Batching is an execution detail only; each text's vector does not depend
    on which batch it lands in.
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
        show_progress: bool = False,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.backend = backend
        self.batch_size = batch_size
        self.show_progress = show_progress
        self._init_future: asyncio.Future | None = None
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def model_name(self) -> str:
        return self.backend.model_name

    async def ensure_ready(self) -> None:
        if self._ready:
            return
        if self._init_future is None:
            logger.info("Initializing embedding backend", extra={"model": self.backend.model_name})
            self._init_future = asyncio.ensure_future(asyncio.to_thread(self.backend.load))

        future = self._init_future
        try:
            await asyncio.shield(future)
        except Exception as exc:
            if self._init_future is future:
                self._init_future = None
            logger.error("Embedding backend initialization failed", extra={"error": str(exc)})
            raise EmbeddingBackendUnavailable(f"Embedding model initialization failed: {exc}") from exc

        if not self._ready:
            self._ready = True
            logger.info("Embedding backend ready", extra={"model": self.backend.model_name})

    def _encode_batch(self, batch: Sequence[str]) -> List[List[float]]:
        try:
            vectors = self.backend.encode(batch)
        except Exception as exc:
            raise EmbeddingBackendUnavailable(f"Embedding call failed: {exc}") from exc

        if len(vectors) != len(batch):
            raise EmbeddingBackendUnavailable(
                f"Embedding backend returned {len(vectors)} vectors for {len(batch)} texts"
            )
        return [list(v) for v in vectors]

    async def embed(self, texts: Sequence[str]) -> np.ndarray:
        """Return an (n, dim) float32 matrix of unit-length rows."""
        if not texts:
            return np.zeros((0, 0), dtype=np.float32)

        await self.ensure_ready()

        rows: List[List[float]] = []
        batch_starts = range(0, len(texts), self.batch_size)
        for i in tqdm(batch_starts, desc="Embedding", unit="batch", disable=not self.show_progress):
            batch = list(texts[i : i + self.batch_size])
            rows.extend(await asyncio.to_thread(self._encode_batch, batch))

        dimensions = {len(row) for row in rows}
        if len(dimensions) != 1 or 0 in dimensions:
            raise EmbeddingBackendUnavailable(f"Inconsistent embedding dimensions: {sorted(dimensions)}")

        matrix = normalize_rows(np.asarray(rows, dtype=np.float32))
        logger.debug("Embedded texts", extra={"count": len(texts), "dimension": matrix.shape[1]})
        return matrix

    async def embed_one(self, text: str) -> np.ndarray:
        return (await self.embed([text]))[0]


__all__ = ["EmbeddingIndexer", "normalize_rows", "DEFAULT_EMBED_BATCH_SIZE"]
