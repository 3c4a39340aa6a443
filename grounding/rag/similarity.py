"""
Cosine similarity ranking over an in-memory corpus.
"""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from grounding.config import settings
from grounding.index.base import Corpus

DEFAULT_SIMILARITY_FLOOR = settings.similarity_floor


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        return 0.0
    norm = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(a, b) / norm, -1.0, 1.0))


def similarity_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row; 0 where a norm is 0."""
    query = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.size == 0 or matrix.shape[1] != query.shape[0]:
        return np.zeros(matrix.shape[0], dtype=np.float64)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)
    return np.clip(scores, -1.0, 1.0)


def rank(
    query: np.ndarray,
    corpus: Corpus,
    top_k: int,
    floor: float | None = DEFAULT_SIMILARITY_FLOOR,
) -> List[Tuple[int, float]]:
    """
    Return up to ``top_k`` (chunk index, similarity) pairs, best first.

    Scores below ``floor`` are dropped before sorting. The sort is stable, so
    equal scores keep chunk index order.
    """
    if top_k <= 0 or len(corpus) == 0:
        return []

    scores = similarity_scores(query, corpus.embeddings)
    candidates = [
        (idx, float(score))
        for idx, score in enumerate(scores)
        if floor is None or score >= floor
    ]
    candidates.sort(key=lambda pair: pair[1], reverse=True)
    return candidates[:top_k]


__all__ = ["cosine_similarity", "similarity_scores", "rank", "DEFAULT_SIMILARITY_FLOOR"]
