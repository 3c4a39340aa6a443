"""
PDF text extraction with PyMuPDF.
"""

from __future__ import annotations

import logging
from pathlib import Path

import fitz

from grounding.errors import ExtractionFailed

logger = logging.getLogger(__name__)


class PyMuPDFExtractor:
    name = "pymupdf"

    def extract(self, path: Path) -> str:
        path = Path(path)
        if not path.exists():
            raise ExtractionFailed(f"Document not found: {path}")

        try:
            with fitz.open(path) as doc:
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise ExtractionFailed(f"PyMuPDF could not read {path.name}: {exc}") from exc

        text = "\n".join(pages)
        if not text.strip():
            raise ExtractionFailed(f"No text extracted from {path.name}")

        logger.info("PDF text extracted", extra={"extractor": self.name, "pages": len(pages), "length": len(text)})
        return text


__all__ = ["PyMuPDFExtractor"]
