"""
CLI for ingesting the reference document and printing the ingestion status.

Example:
    python -m scripts.ingest_document --path ./data/reference.pdf --embed-batch 32
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys

from grounding.config import RetrievalConfig, settings, setup_logging
from grounding.engine import GroundingEngine


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest the reference document.")
    parser.add_argument("--path", default=settings.document_path, help="Document to ingest.")
    parser.add_argument(
        "--embed-batch",
        type=int,
        default=settings.embed_batch_size,
        help="Batch size for embedding requests.",
    )
    return parser.parse_args()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    config = dataclasses.replace(RetrievalConfig.from_settings(), embed_batch_size=args.embed_batch)
    engine = GroundingEngine(config=config, show_progress=True)

    try:
        summary = asyncio.run(engine.ingest(args.path))
    except Exception:
        logger.exception("Ingestion failed")
        sys.exit(1)

    status = summary.status
    print(
        f"Status: {status.state.value} | chunks: {status.chunk_count} | embeddings: {status.embedding_count} "
        f"| text length: {status.source_length} (elapsed {summary.elapsed_sec:.2f}s)"
    )


if __name__ == "__main__":
    main()
