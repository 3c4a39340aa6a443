"""Pytest configuration and fixtures."""

import os
import re
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from grounding.config import RetrievalConfig, Settings  # noqa: E402
from grounding.engine import GroundingEngine  # noqa: E402

SCENARIO_TEXT = "Jupiter brings career growth. Saturn brings delay. ©2024 Publisher."

TOKEN_PATTERN = re.compile(r"[a-z]+")


class BagOfWordsBackend:
    """Deterministic embedding: one dimension per distinct word, raw counts."""

    def __init__(self, dimension: int = 512) -> None:
        self.dimension = dimension
        self.vocabulary: Dict[str, int] = {}
        self.load_calls = 0
        self.encode_calls: List[List[str]] = []

    @property
    def model_name(self) -> str:
        return "bag-of-words"

    def load(self) -> None:
        self.load_calls += 1

    def encode(self, texts: Sequence[str]) -> List[List[float]]:
        self.encode_calls.append(list(texts))
        vectors = []
        for text in texts:
            vector = [0.0] * self.dimension
            for token in TOKEN_PATTERN.findall(text.lower()):
                slot = self.vocabulary.setdefault(token, len(self.vocabulary) % self.dimension)
                vector[slot] += 1.0
            vectors.append(vector)
        return vectors


class FakeLLM:
    model = "fake-llm"

    def __init__(self, answer: str = "A grounded reading.", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: List[list] = []

    def chat(self, messages, response_format=None) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def scenario_text() -> str:
    return SCENARIO_TEXT


@pytest.fixture
def scenario_config() -> RetrievalConfig:
    return RetrievalConfig(chunk_size=40, chunk_overlap=10, embed_batch_size=4)


@pytest.fixture
def backend() -> BagOfWordsBackend:
    return BagOfWordsBackend()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def scenario_file(tmp_path: Path) -> Path:
    path = tmp_path / "reference.txt"
    path.write_text(SCENARIO_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def test_settings(scenario_file: Path) -> Settings:
    return Settings(
        DOCUMENT_PATH=str(scenario_file),
        ADMIN_TOKEN="admin-secret",
        INGESTION_WAIT_TIMEOUT_SEC=1.0,
    )


@pytest.fixture
def engine(test_settings, backend, fake_llm, scenario_config) -> GroundingEngine:
    return GroundingEngine(
        settings_=test_settings,
        embedding_backend=backend,
        llm_client=fake_llm,
        config=scenario_config,
    )
