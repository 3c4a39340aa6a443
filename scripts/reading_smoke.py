"""
Smoke test of the grounded reading pipeline.

Example:
    python -m scripts.reading_smoke --question "How will my career develop?" --subject subject.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from grounding.config import settings, setup_logging
from grounding.engine import GroundingEngine
from grounding.errors import GroundingError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test of the grounded reading pipeline.")
    parser.add_argument("--question", "-q", required=True, help="Question for the reading")
    parser.add_argument("--subject", type=Path, default=None, help="JSON file with the subject's chart data")
    parser.add_argument("--path", default=settings.document_path, help="Document to ingest first")
    parser.add_argument("--skip-ingest", action="store_true", help="Answer from the fallback tiers only")
    return parser.parse_args()


async def run(args: argparse.Namespace, logger: logging.Logger):
    engine = GroundingEngine()
    if not args.skip_ingest:
        try:
            await engine.ingest(args.path)
        except GroundingError:
            logger.exception("Ingestion failed; continuing with fallback tiers")
    subject = json.loads(args.subject.read_text(encoding="utf-8")) if args.subject else {}
    return await engine.generate_reading(args.question, subject)


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    try:
        reading = asyncio.run(run(args, logger))
    except Exception:
        logger.exception("Reading smoke failed")
        sys.exit(1)

    print("\n=== Reading Smoke Result ===")
    print(json.dumps(reading.metadata.to_dict(), indent=2))
    print(f"\n{reading.answer}")


if __name__ == "__main__":
    main()
