"""
OpenAI chat client used for grounded readings.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI

from grounding.config import settings

logger = logging.getLogger(__name__)

DEFAULT_LLM_MODEL = settings.llm_model_name
DEFAULT_TEMPERATURE = settings.llm_temperature
DEFAULT_MAX_TOKENS = settings.llm_max_tokens


class LLMClient:
    """Thin wrapper over chat completions; the OpenAI client is created on first use."""

    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int | None = DEFAULT_MAX_TOKENS,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            self._client = OpenAI(api_key=api_key)
        return self._client

    def chat(self, messages: List[Dict[str, Any]], response_format: Optional[Dict[str, Any]] = None) -> str:
        """Return the first choice's text, or "" when the model sent none."""
        request: Dict[str, Any] = {"model": self.model, "temperature": self.temperature, "messages": messages}
        if self.max_tokens:
            request["max_tokens"] = self.max_tokens
        if response_format:
            request["response_format"] = response_format

        completion = self.client.chat.completions.create(**request)
        if not completion.choices:
            logger.warning("Chat completion returned no choices", extra={"model": self.model})
            return ""

        usage = getattr(completion, "usage", None)
        if usage is not None:
            logger.info(
                "Chat completion finished",
                extra={"model": self.model, "total_tokens": getattr(usage, "total_tokens", None)},
            )
        return completion.choices[0].message.content or ""


__all__ = ["LLMClient", "DEFAULT_LLM_MODEL", "DEFAULT_TEMPERATURE", "DEFAULT_MAX_TOKENS"]
