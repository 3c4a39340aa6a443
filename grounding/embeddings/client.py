"""
OpenAI embeddings backend.
"""

from __future__ import annotations

from typing import List, Sequence

from openai import OpenAI

from grounding.config import settings

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name


class OpenAIEmbeddingBackend:
    def __init__(self, model: str = DEFAULT_EMBEDDING_MODEL, client: OpenAI | None = None) -> None:
        self.model = model
        self.client = client

    @property
    def model_name(self) -> str:
        return self.model

    def load(self) -> None:
        if self.client is None:
            api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            self.client = OpenAI(api_key=api_key)

    def encode(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        if self.client is None:
            self.load()
        response = self.client.embeddings.create(model=self.model, input=list(texts))
        return [item.embedding for item in response.data]


__all__ = ["OpenAIEmbeddingBackend", "DEFAULT_EMBEDDING_MODEL"]
