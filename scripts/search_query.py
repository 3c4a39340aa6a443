"""
CLI for searching a freshly ingested document by text query.

Example:
    python -m scripts.search_query --query "Saturn in the 10th house" --top-k 5
"""

from __future__ import annotations

import argparse
import asyncio

from grounding.config import settings, setup_logging
from grounding.engine import GroundingEngine


async def run(path: str, query: str, top_k: int):
    engine = GroundingEngine()
    await engine.ingest(path)
    return await engine.search(query, top_k=top_k)


def main() -> None:
    parser = argparse.ArgumentParser(description="Search the reference document by text query.")
    parser.add_argument("--query", "-q", required=True, help="Query text")
    parser.add_argument("--path", default=settings.document_path, help="Document to ingest first")
    parser.add_argument("--top-k", type=int, default=settings.search_top_k, help="Candidates to rank")
    parser.add_argument("--snippet", type=int, default=300, help="Snippet length")
    args = parser.parse_args()

    setup_logging()
    grounding = asyncio.run(run(args.path, args.query, args.top_k))

    print(f"source={grounding.provenance.value} low_confidence={grounding.low_confidence}")
    if not grounding.results:
        print("No results")
        return

    for idx, result in enumerate(grounding.results, start=1):
        snippet = result.content[: args.snippet].replace("\n", " ")
        print(f"\n#{idx} similarity={result.similarity:.4f} relevance={result.relevance:.2f}")
        print("text:", snippet + ("..." if len(result.content) > args.snippet else ""))


if __name__ == "__main__":
    main()
