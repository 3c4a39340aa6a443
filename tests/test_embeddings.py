"""Tests for the embedding indexer and backends."""

import asyncio
import threading
import time
from unittest.mock import MagicMock

import numpy as np
import pytest

from grounding.config import Settings
from grounding.embeddings import OpenAIEmbeddingBackend, get_embedding_backend
from grounding.embeddings.indexer import EmbeddingIndexer, normalize_rows
from grounding.errors import EmbeddingBackendUnavailable

TEXTS = [f"Planet number {i} sits in house {i % 12}" for i in range(23)]


class SlowLoadingBackend:
    model_name = "slow"

    def __init__(self):
        self.load_calls = 0
        self._lock = threading.Lock()

    def load(self):
        with self._lock:
            self.load_calls += 1
        time.sleep(0.05)

    def encode(self, texts):
        return [[float(len(t)), 1.0] for t in texts]


class FailingBackend:
    model_name = "broken"

    def __init__(self, fail_load=False):
        self.fail_load = fail_load

    def load(self):
        if self.fail_load:
            raise RuntimeError("model download failed")

    def encode(self, texts):
        raise ConnectionError("backend offline")


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_initialization():
    backend = SlowLoadingBackend()
    indexer = EmbeddingIndexer(backend, batch_size=4)

    await asyncio.gather(indexer.embed_one("a"), indexer.embed(["b", "c"]), indexer.ensure_ready())

    assert backend.load_calls == 1
    assert indexer.is_ready


@pytest.mark.asyncio
async def test_vectors_are_unit_length(backend):
    indexer = EmbeddingIndexer(backend, batch_size=5)

    matrix = await indexer.embed(TEXTS)

    assert matrix.shape[0] == len(TEXTS)
    np.testing.assert_allclose(np.linalg.norm(matrix, axis=1), 1.0, rtol=1e-5)


@pytest.mark.asyncio
async def test_batch_size_does_not_change_vectors(backend):
    small = await EmbeddingIndexer(backend, batch_size=3).embed(TEXTS)
    large = await EmbeddingIndexer(backend, batch_size=100).embed(TEXTS)

    np.testing.assert_array_equal(small, large)
    assert [len(call) for call in backend.encode_calls[:8]] == [3] * 7 + [2]


@pytest.mark.asyncio
async def test_embed_empty_input_skips_backend(backend):
    matrix = await EmbeddingIndexer(backend).embed([])
    assert matrix.shape == (0, 0)
    assert backend.load_calls == 0


@pytest.mark.asyncio
async def test_encode_failure_is_propagated():
    indexer = EmbeddingIndexer(FailingBackend())
    with pytest.raises(EmbeddingBackendUnavailable, match="backend offline"):
        await indexer.embed(["text"])


@pytest.mark.asyncio
async def test_failed_initialization_is_retried():
    backend = FailingBackend(fail_load=True)
    indexer = EmbeddingIndexer(backend)

    with pytest.raises(EmbeddingBackendUnavailable, match="initialization failed"):
        await indexer.ensure_ready()
    assert not indexer.is_ready

    backend.fail_load = False
    await indexer.ensure_ready()
    assert indexer.is_ready


@pytest.mark.asyncio
async def test_wrong_vector_count_is_a_backend_failure():
    backend = MagicMock()
    backend.model_name = "short"
    backend.encode.return_value = [[1.0, 0.0]]
    indexer = EmbeddingIndexer(backend)

    with pytest.raises(EmbeddingBackendUnavailable, match="returned 1 vectors for 2 texts"):
        await indexer.embed(["one", "two"])


def test_normalize_rows_keeps_zero_rows():
    normalized = normalize_rows(np.array([[3.0, 4.0], [0.0, 0.0]]))
    np.testing.assert_allclose(normalized, [[0.6, 0.8], [0.0, 0.0]])


def test_openai_backend_uses_embeddings_api():
    client = MagicMock()
    client.embeddings.create.return_value = MagicMock(
        data=[MagicMock(embedding=[0.1, 0.2]), MagicMock(embedding=[0.3, 0.4])]
    )
    backend = OpenAIEmbeddingBackend(model="text-embedding-3-small", client=client)

    vectors = backend.encode(["a", "b"])

    assert vectors == [[0.1, 0.2], [0.3, 0.4]]
    client.embeddings.create.assert_called_once_with(model="text-embedding-3-small", input=["a", "b"])


def test_backend_factory():
    backend = get_embedding_backend(Settings(EMBEDDING_BACKEND="openai", EMBEDDING_MODEL_NAME="custom-model"))
    assert isinstance(backend, OpenAIEmbeddingBackend)
    assert backend.model_name == "custom-model"

    with pytest.raises(ValueError, match="Unsupported embedding backend"):
        get_embedding_backend(Settings(EMBEDDING_BACKEND="faiss"))
