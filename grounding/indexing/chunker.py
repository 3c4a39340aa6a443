"""
Text chunking utilities.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from grounding.config import settings
from grounding.index.base import Chunk
from grounding.indexing.boilerplate import is_boilerplate

CHUNK_SIZE_CHARS = settings.chunk_size_chars
CHUNK_OVERLAP_CHARS = settings.chunk_overlap_chars
BOUNDARY_LOOKBACK_CHARS = settings.chunk_boundary_lookback
MIN_CHUNK_CHARS = settings.min_chunk_chars

BOUNDARY_CHARS = (".", "\n")


def clean_text(text: str) -> str:
    text = re.sub(r"\r\n?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()


def _find_boundary(text: str, start: int, end: int, overlap: int, lookback: int) -> int:
    """
    Move the cut back to just after the nearest '.' or newline inside the lookback.

    The cut never lands at or before ``start + overlap`` so the next window
    always starts after the current one.
    """
    lower = max(start + overlap + 1, end - lookback)
    cut = max(text.rfind(ch, lower, end) for ch in BOUNDARY_CHARS)
    if cut == -1:
        return end
    return cut + 1


def split_windows(text: str, max_len: int, overlap: int, lookback: int) -> List[Tuple[int, int]]:
    """Return (start, end) offsets of consecutive windows sharing ``overlap`` characters."""
    windows: List[Tuple[int, int]] = []
    length = len(text)
    start = 0

    while start < length:
        end = start + max_len
        if end >= length:
            windows.append((start, length))
            break
        end = _find_boundary(text, start, end, overlap, lookback)
        windows.append((start, end))
        start = end - overlap

    return windows


def segment(
    text: str,
    max_len: int = CHUNK_SIZE_CHARS,
    overlap: int = CHUNK_OVERLAP_CHARS,
    *,
    lookback: int = BOUNDARY_LOOKBACK_CHARS,
    min_chars: int = MIN_CHUNK_CHARS,
) -> List[Chunk]:
    """
    Split text into overlapping chunks, dropping near-empty and boilerplate pieces.

    Chunk indexes are assigned after filtering so they stay contiguous.
    """
    if overlap < 0:
        raise ValueError("overlap must not be negative")
    if max_len <= overlap:
        raise ValueError("max_len must be greater than overlap")

    chunks: List[Chunk] = []
    for start, end in split_windows(text, max_len, overlap, lookback):
        piece = text[start:end]
        if len(piece.strip()) < min_chars:
            continue
        if is_boilerplate(piece):
            continue
        chunks.append(Chunk(index=len(chunks), text=piece, start=start))

    return chunks


__all__ = ["clean_text", "split_windows", "segment", "CHUNK_SIZE_CHARS", "CHUNK_OVERLAP_CHARS"]
