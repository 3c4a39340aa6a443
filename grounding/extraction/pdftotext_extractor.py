"""
PDF text extraction through the poppler ``pdftotext`` command-line tool.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from grounding.config import settings
from grounding.errors import ExtractionFailed

logger = logging.getLogger(__name__)


class PdfToTextExtractor:
    name = "pdftotext"

    def __init__(
        self,
        binary: str = settings.pdftotext_binary,
        timeout_sec: float = settings.extraction_timeout_sec,
    ) -> None:
        self.binary = binary
        self.timeout_sec = timeout_sec

    def extract(self, path: Path) -> str:
        path = Path(path)
        if not path.exists():
            raise ExtractionFailed(f"Document not found: {path}")

        try:
            completed = subprocess.run(
                [self.binary, str(path), "-"],
                capture_output=True,
                check=True,
                timeout=self.timeout_sec,
            )
        except FileNotFoundError as exc:
            raise ExtractionFailed(f"{self.binary} is not installed") from exc
        except subprocess.TimeoutExpired as exc:
            raise ExtractionFailed(f"{self.binary} timed out after {self.timeout_sec}s") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
            raise ExtractionFailed(f"{self.binary} failed ({exc.returncode}): {stderr}") from exc

        text = completed.stdout.decode("utf-8", errors="replace")
        if not text.strip():
            raise ExtractionFailed(f"No text extracted from {path.name}")

        logger.info("PDF text extracted", extra={"extractor": self.name, "length": len(text)})
        return text


__all__ = ["PdfToTextExtractor"]
