"""Protocol for document text extractors."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class Extractor(Protocol):
    """Turns a source document into plain text.

    Implementations raise ``ExtractionFailed`` when the document cannot be
    read or yields no text.
    """

    @property
    def name(self) -> str:
        """Return identifier for this strategy (e.g., 'pymupdf', 'pdftotext')."""
        ...

    def extract(self, path: Path) -> str:
        """Return the document's text."""
        ...
