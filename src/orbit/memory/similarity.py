"""Cosine similarity over embedding vectors."""

from collections.abc import Sequence

import numpy as np


class DimensionMismatchError(ValueError):
    """Vectors have different lengths."""


class DegenerateVectorError(ValueError):
    """Vector is empty or all zeros, so its direction is undefined."""


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Normalized dot product of two equal-length, non-zero vectors."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.shape != vb.shape:
        raise DimensionMismatchError(
            f"Embedding dimensions differ: {va.size} vs {vb.size}"
        )

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        raise DegenerateVectorError("Cannot compare a zero-length or all-zero vector")

    return float(np.dot(va, vb) / (norm_a * norm_b))


def check_embedding(vector: Sequence[float], dimension: int | None = None) -> None:
    """Validate a vector before storing or querying with it.

    Raises:
        DegenerateVectorError: vector is empty or all zeros
        DimensionMismatchError: vector length differs from dimension
    """
    if dimension is not None and len(vector) != dimension:
        raise DimensionMismatchError(
            f"Embedding has {len(vector)} dimensions, bank uses {dimension}"
        )
    if not any(vector):
        raise DegenerateVectorError("Embedding is empty or all zeros")
