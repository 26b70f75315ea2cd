"""Tests for cosine similarity."""

import math

import pytest

from orbit.memory.similarity import (
    DegenerateVectorError,
    DimensionMismatchError,
    check_embedding,
    cosine_similarity,
)


def test_identical_vectors():
    assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)


def test_orthogonal_vectors():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


def test_opposite_vectors():
    assert cosine_similarity([1.0, -2.0], [-1.0, 2.0]) == pytest.approx(-1.0)


def test_magnitude_ignored():
    """Scaling a vector does not change its similarity."""
    assert cosine_similarity([1.0, 1.0], [10.0, 10.0]) == pytest.approx(1.0)


def test_symmetric():
    a = [0.3, -1.2, 4.0, 0.05]
    b = [2.0, 0.7, -0.4, 1.1]
    assert cosine_similarity(a, b) == cosine_similarity(b, a)


def test_known_value():
    expected = 11 / (math.sqrt(5) * math.sqrt(25))
    assert cosine_similarity([1.0, 2.0], [3.0, 4.0]) == pytest.approx(expected)


def test_dimension_mismatch():
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


def test_zero_vector():
    with pytest.raises(DegenerateVectorError):
        cosine_similarity([0.0, 0.0], [1.0, 0.0])


def test_errors_are_value_errors():
    """Validation errors can be caught as ValueError."""
    assert issubclass(DimensionMismatchError, ValueError)
    assert issubclass(DegenerateVectorError, ValueError)


def test_check_embedding():
    check_embedding([0.1, 0.2], dimension=2)
    check_embedding([0.1, 0.2])

    with pytest.raises(DimensionMismatchError):
        check_embedding([0.1, 0.2], dimension=3)
    with pytest.raises(DegenerateVectorError):
        check_embedding([])
    with pytest.raises(DegenerateVectorError):
        check_embedding([0.0, 0.0, 0.0], dimension=3)
