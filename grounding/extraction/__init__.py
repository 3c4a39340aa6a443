"""
Text extraction strategies and factory.
"""

from pathlib import Path

from grounding.config import Settings, settings
from grounding.extraction.base import Extractor
from grounding.extraction.pdftotext_extractor import PdfToTextExtractor
from grounding.extraction.text_extractor import PlainTextExtractor

TEXT_SUFFIXES = (".txt", ".md")


def get_extractor(path: str | Path, source: Settings | None = None) -> Extractor:
    """
    Factory to obtain the Extractor for a document.
    Text files are read directly; everything else uses EXTRACTOR_BACKEND
    ("pymupdf" or "pdftotext").
    """
    s = source or settings
    if Path(path).suffix.lower() in TEXT_SUFFIXES:
        return PlainTextExtractor()

    backend = s.extractor_backend.lower()
    if backend == "pymupdf":
        from grounding.extraction.pymupdf_extractor import PyMuPDFExtractor

        return PyMuPDFExtractor()
    if backend == "pdftotext":
        return PdfToTextExtractor(binary=s.pdftotext_binary, timeout_sec=s.extraction_timeout_sec)
    if backend == "text":
        return PlainTextExtractor()
    raise ValueError(f"Unsupported extractor backend: {backend}")


__all__ = ["Extractor", "PdfToTextExtractor", "PlainTextExtractor", "get_extractor", "TEXT_SUFFIXES"]
