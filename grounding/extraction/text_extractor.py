"""
Plain-text documents (already converted references, fixtures).
"""

from __future__ import annotations

from pathlib import Path

from grounding.errors import ExtractionFailed


class PlainTextExtractor:
    name = "text"

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def extract(self, path: Path) -> str:
        path = Path(path)
        try:
            text = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise ExtractionFailed(f"Could not read {path}: {exc}") from exc

        if not text.strip():
            raise ExtractionFailed(f"No text in {path.name}")
        return text


__all__ = ["PlainTextExtractor"]
