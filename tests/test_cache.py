"""Tests for the query result cache."""

from grounding.index.base import Chunk, SearchResult
from grounding.rag.cache import QueryCache, normalize_query

RESULTS = (SearchResult(chunk=Chunk(index=0, text="Jupiter brings growth."), similarity=0.8, relevance=1.0),)


def test_normalization_ignores_case_and_outer_whitespace():
    assert normalize_query("  Career Growth \n") == "career growth"

    cache = QueryCache()
    cache.put("Career Growth", RESULTS)
    assert cache.get("  career growth  ") is cache.get("CAREER GROWTH")
    assert len(cache) == 1


def test_miss_returns_none():
    assert QueryCache().get("anything") is None


def test_clear_empties_cache():
    cache = QueryCache()
    cache.put("a query", RESULTS)
    cache.clear()
    assert len(cache) == 0
    assert cache.get("a query") is None


def test_stores_empty_results_as_hit():
    cache = QueryCache()
    cache.put("nothing", [])
    assert cache.get("nothing") == ()


def test_reset_drops_writes_from_superseded_generation():
    cache = QueryCache()
    cache.reset(1)
    cache.put("q", RESULTS, generation=1)
    assert cache.get("q") == RESULTS

    cache.reset(2)
    assert cache.get("q") is None

    cache.put("q", RESULTS, generation=1)
    assert cache.get("q") is None
    assert cache.generation == 2
