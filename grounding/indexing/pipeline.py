"""
Ingestion pipeline: extract, segment, embed, and publish the corpus.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List

from grounding.config import RetrievalConfig
from grounding.embeddings.indexer import EmbeddingIndexer
from grounding.errors import EmbeddingBackendUnavailable, NoUsableContent
from grounding.extraction import Extractor, get_extractor
from grounding.index.base import Chunk, Corpus, IngestionState, IngestionStatus
from grounding.index.store import CorpusIndex
from grounding.indexing.chunker import clean_text, segment
from grounding.rag.cache import QueryCache

ExtractorFactory = Callable[[Path], Extractor]


@dataclass
class IngestionSummary:
    status: IngestionStatus
    already_processed: bool
    elapsed_sec: float


class IngestionService:
    """
    Builds the corpus from one document and owns the ingestion status.

    At most one ingestion runs at a time: callers arriving while it runs
    await the same task and see its outcome, including its error. The task
    is shielded, so a caller that gives up waiting does not cancel it.
    """

    def __init__(
        self,
        index: CorpusIndex,
        indexer: EmbeddingIndexer,
        cache: QueryCache,
        config: RetrievalConfig | None = None,
        extractor_factory: ExtractorFactory = get_extractor,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.index = index
        self.indexer = indexer
        self.cache = cache
        self.config = config or RetrievalConfig.from_settings()
        self.extractor_factory = extractor_factory
        self.logger = logger_ or logging.getLogger(__name__)
        self._status = IngestionStatus()
        self._task: asyncio.Future | None = None

    @property
    def status(self) -> IngestionStatus:
        return self._status

    @property
    def in_progress(self) -> bool:
        return self._task is not None and not self._task.done()

    async def ingest(self, path: str | Path, force: bool = False) -> IngestionSummary:
        """
        Ingest ``path`` unless a corpus is already ready (then a no-op).

        ``force`` re-ingests over a ready corpus; the old corpus stays live
        until the new one is published. If that run fails, the old corpus and
        its ready status are kept, with the failure in ``error`` and ``reason``.
        """
        if self._status.state is IngestionState.READY and not force:
            self.logger.info("Document already processed", extra={"source": self._status.source})
            return IngestionSummary(status=self._status, already_processed=True, elapsed_sec=0.0)

        if self.in_progress:
            self.logger.info("Ingestion already running, waiting for it", extra={"source": self._status.source})
        else:
            self._task = asyncio.ensure_future(self._run(Path(path)))
            self._task.add_done_callback(self._on_task_done)

        return await asyncio.shield(self._task)

    async def wait_until_settled(self, timeout: float) -> IngestionStatus:
        """Wait up to ``timeout`` seconds for a running ingestion; never raises its error."""
        if self.in_progress:
            try:
                await asyncio.wait_for(asyncio.shield(self._task), timeout)
            except asyncio.TimeoutError:
                self.logger.info("Stopped waiting for ingestion", extra={"timeout_sec": timeout})
            except Exception as exc:
                self.logger.info("Awaited ingestion failed", extra={"error": str(exc)})
        return self._status

    def _on_task_done(self, task: asyncio.Future) -> None:
        # Retrieve the error so an ingestion nobody awaited does not warn on teardown.
        if not task.cancelled() and task.exception() is not None:
            self.logger.debug("Ingestion task finished with error", extra={"error": str(task.exception())})

    async def _run(self, path: Path) -> IngestionSummary:
        started = time.time()
        source = str(path)
        previous = self._status
        self._status = IngestionStatus(state=IngestionState.IN_PROGRESS, source=source)
        self.logger.info("Ingestion started", extra={"source": source})

        raw_text = ""
        chunks: List[Chunk] = []
        try:
            extractor = self.extractor_factory(path)
            raw_text = await asyncio.to_thread(extractor.extract, path)

            chunks = segment(
                clean_text(raw_text),
                self.config.chunk_size,
                self.config.chunk_overlap,
                lookback=self.config.boundary_lookback,
                min_chars=self.config.min_chunk_chars,
            )
            if not chunks:
                raise NoUsableContent(f"No usable content in {path.name} after segmentation")
            self.logger.info("Segmented document", extra={"chunks": len(chunks), "text_length": len(raw_text)})

            try:
                embeddings = await self.indexer.embed([chunk.text for chunk in chunks])
            except EmbeddingBackendUnavailable:
                # A live corpus keeps its own chunks as the keyword buffer.
                if not self.index.is_loaded:
                    self.index.publish_buffer(chunks)
                raise

            corpus = self.index.publish(Corpus(chunks=tuple(chunks), embeddings=embeddings, source=source))
            self.cache.reset(corpus.version)
        except Exception as exc:
            reason = getattr(exc, "reason", "error")
            if self.index.is_loaded:
                # The previous corpus is still published and keeps serving indexed search.
                self._status = replace(previous, error=str(exc), reason=reason)
                self.logger.error(
                    "Re-ingestion failed, previous corpus kept",
                    extra={
                        "source": source,
                        "reason": reason,
                        "corpus_version": self.index.version,
                        "error": str(exc),
                    },
                )
                raise

            self._status = IngestionStatus(
                state=IngestionState.FAILED,
                chunk_count=len(chunks),
                source_length=len(raw_text),
                source=source,
                error=str(exc),
                reason=reason,
                last_processed=datetime.now(timezone.utc),
            )
            self.logger.error(
                "Ingestion failed",
                extra={"source": source, "reason": reason, "error": str(exc)},
            )
            raise

        elapsed = time.time() - started
        self._status = IngestionStatus(
            state=IngestionState.READY,
            chunk_count=len(corpus.chunks),
            embedding_count=int(corpus.embeddings.shape[0]),
            source_length=len(raw_text),
            source=source,
            last_processed=datetime.now(timezone.utc),
        )
        self.logger.info(
            "Ingestion completed",
            extra={"chunks": len(corpus), "corpus_version": corpus.version, "elapsed_sec": round(elapsed, 2)},
        )
        return IngestionSummary(status=self._status, already_processed=False, elapsed_sec=elapsed)


__all__ = ["IngestionService", "IngestionSummary"]
