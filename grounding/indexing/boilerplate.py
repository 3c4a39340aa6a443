"""
Signatures of non-substantive text (front matter, contents pages, epigraphs).

Shared by the segmenter and the retrieval-time quality filter.
"""

from __future__ import annotations

import re
from typing import Pattern, Tuple

BOILERPLATE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"©"),
    re.compile(r"\bcopyright\b", flags=re.IGNORECASE),
    re.compile(r"\ball rights reserved\b", flags=re.IGNORECASE),
    re.compile(r"\bISBN\b"),
    re.compile(r"\bPublisher:", flags=re.IGNORECASE),
    re.compile(r"\bpublished by\b", flags=re.IGNORECASE),
    re.compile(r"\bNotion Press\b", flags=re.IGNORECASE),
    re.compile(r"\bTABLE OF CONTENTS\b", flags=re.IGNORECASE),
    # Contents and index headers only when they stand on a line of their own
    re.compile(r"^\s*CONTENTS\s*$", flags=re.MULTILINE),
    re.compile(r"^\s*INDEX\s*$", flags=re.MULTILINE),
)

# "Chapter 3 ........ 41" style lines
TOC_LINE_PATTERN = re.compile(r"(?:\.{3,}|…+|\s{3,})\s*\d{1,4}\s*$")
TOC_LINE_RATIO = 0.5

# A quotation followed by an attribution line, e.g. "..." - Author
EPIGRAPH_PATTERN = re.compile(
    r"^\s*[\"“'‘].{0,400}?[\"”'’]\s*(?:[-–—]{1,2}|~)\s*[A-Z][^\n]{0,80}\s*$",
    flags=re.DOTALL,
)


def _is_table_of_contents(text: str) -> bool:
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        return False
    hits = sum(1 for line in lines if TOC_LINE_PATTERN.search(line))
    return hits / len(lines) >= TOC_LINE_RATIO


def is_boilerplate(text: str) -> bool:
    if any(pattern.search(text) for pattern in BOILERPLATE_PATTERNS):
        return True
    if _is_table_of_contents(text):
        return True
    return bool(EPIGRAPH_PATTERN.match(text))


__all__ = ["BOILERPLATE_PATTERNS", "is_boilerplate"]
