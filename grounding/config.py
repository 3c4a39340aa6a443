"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    llm_model_name: str = Field(default="gpt-4.1-mini", alias="LLM_MODEL_NAME")
    llm_temperature: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=1500, alias="LLM_MAX_TOKENS")

    embedding_backend: str = Field(default="openai", alias="EMBEDDING_BACKEND")
    embedding_model_name: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL_NAME")
    local_embedding_model: str = Field(default="all-MiniLM-L6-v2", alias="LOCAL_EMBEDDING_MODEL")
    embed_batch_size: int = Field(default=32, alias="EMBED_BATCH_SIZE")

    document_path: str = Field(default="./data/reference.pdf", alias="DOCUMENT_PATH")
    extractor_backend: str = Field(default="pymupdf", alias="EXTRACTOR_BACKEND")
    pdftotext_binary: str = Field(default="pdftotext", alias="PDFTOTEXT_BINARY")
    extraction_timeout_sec: float = Field(default=120.0, alias="EXTRACTION_TIMEOUT_SEC")

    chunk_size_chars: int = Field(default=500, alias="CHUNK_SIZE_CHARS")
    chunk_overlap_chars: int = Field(default=100, alias="CHUNK_OVERLAP_CHARS")
    chunk_boundary_lookback: int = Field(default=50, alias="CHUNK_BOUNDARY_LOOKBACK")
    min_chunk_chars: int = Field(default=20, alias="MIN_CHUNK_CHARS")

    similarity_floor: float | None = Field(default=0.2, alias="SIMILARITY_FLOOR")
    relevance_threshold: float = Field(default=0.3, alias="RELEVANCE_THRESHOLD")
    search_top_k: int = Field(default=5, alias="SEARCH_TOP_K")
    max_context_chunks: int = Field(default=3, alias="MAX_CONTEXT_CHUNKS")

    keyword_fallback_limit: int = Field(default=10, alias="KEYWORD_FALLBACK_LIMIT")
    keyword_fallback_similarity: float = Field(default=0.5, alias="KEYWORD_FALLBACK_SIMILARITY")
    static_knowledge_enabled: bool = Field(default=True, alias="STATIC_KNOWLEDGE_ENABLED")

    ingest_on_startup: bool = Field(default=False, alias="INGEST_ON_STARTUP")
    ingestion_wait_timeout_sec: float = Field(default=30.0, alias="INGESTION_WAIT_TIMEOUT_SEC")

    admin_token: SecretStr | None = Field(default=None, alias="ADMIN_TOKEN")


settings = Settings()


@dataclass(frozen=True)
class RetrievalConfig:
    """Tunable constants of the segment/rank/filter/fallback pipeline."""

    chunk_size: int = 500
    chunk_overlap: int = 100
    boundary_lookback: int = 50
    min_chunk_chars: int = 20
    embed_batch_size: int = 32
    similarity_floor: float | None = 0.2
    relevance_threshold: float = 0.3
    top_k: int = 5
    max_results: int = 3
    keyword_fallback_limit: int = 10
    keyword_fallback_similarity: float = 0.5
    static_knowledge_enabled: bool = True

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "RetrievalConfig":
        s = source or settings
        return cls(
            chunk_size=s.chunk_size_chars,
            chunk_overlap=s.chunk_overlap_chars,
            boundary_lookback=s.chunk_boundary_lookback,
            min_chunk_chars=s.min_chunk_chars,
            embed_batch_size=s.embed_batch_size,
            similarity_floor=s.similarity_floor,
            relevance_threshold=s.relevance_threshold,
            top_k=s.search_top_k,
            max_results=s.max_context_chunks,
            keyword_fallback_limit=s.keyword_fallback_limit,
            keyword_fallback_similarity=s.keyword_fallback_similarity,
            static_knowledge_enabled=s.static_knowledge_enabled,
        )


def setup_logging() -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    return logging.getLogger("grounding")


def public_settings() -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    return settings.model_dump(
        exclude={"openai_api_key", "admin_token"},
        exclude_none=True,
    )


__all__ = ["Settings", "settings", "RetrievalConfig", "setup_logging", "public_settings"]
