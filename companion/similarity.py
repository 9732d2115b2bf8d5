"""Cosine similarity between embedding vectors."""

from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return dot(a, b) / (|a| * |b|), in [-1, 1].

    Mismatched lengths and zero-norm vectors score 0 instead of raising.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape or not a.size:
        return 0.0
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return 0.0
    return float(np.dot(a, b) / denom)


def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine of query against every row of matrix, in one pass.

    Rows of a different width than the query, and zero-norm rows, score 0.
    """
    query_vec = np.asarray(query, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != query_vec.shape[0]:
        return np.zeros(len(matrix))

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
    dots = matrix @ query_vec
    scores = np.zeros(len(matrix))
    np.divide(dots, norms, out=scores, where=norms != 0)
    return scores
