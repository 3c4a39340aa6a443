"""
Embedding backends and factory.
"""

from grounding.config import Settings, settings
from grounding.embeddings.base import EmbeddingBackend
from grounding.embeddings.client import OpenAIEmbeddingBackend
from grounding.embeddings.indexer import EmbeddingIndexer


def get_embedding_backend(source: Settings | None = None) -> EmbeddingBackend:
    """
    Factory to obtain the configured EmbeddingBackend instance.
    Supports "openai" and "sentence_transformers".
    """
    s = source or settings
    backend = s.embedding_backend.lower()
    if backend == "openai":
        return OpenAIEmbeddingBackend(model=s.embedding_model_name)
    if backend in ("sentence_transformers", "local"):
        # torch is only imported when the local model is selected
        from grounding.embeddings.sentence_transformer import SentenceTransformerBackend

        return SentenceTransformerBackend(model_name=s.local_embedding_model)
    raise ValueError(f"Unsupported embedding backend: {backend}")


__all__ = ["EmbeddingBackend", "EmbeddingIndexer", "OpenAIEmbeddingBackend", "get_embedding_backend"]
