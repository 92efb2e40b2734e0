"""
Dense Vector Analytics.

Small numeric primitives over dense float arrays, used for co-occurrence
export and for ranking terms against the singular vectors:

    - max_value, norm
    - dot_product, cosine_similarity (dimension-sensitive, return Outcome)
    - argmax_k: indices of the k largest values
    - scale_to_range: linear rescaling into [low, high]
"""

from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np

from spectralmap._errors import (
    SM_ERROR_DIMENSION_MISMATCH,
    SM_ERROR_DIVISION_BY_ZERO,
    IndexOutOfRangeError,
    NumericalError,
    Outcome,
)

__all__ = [
    "max_value",
    "norm",
    "dot_product",
    "cosine_similarity",
    "argmax_k",
    "scale_to_range",
]

VectorInput = Union[Sequence[float], np.ndarray]


def _as_vector(x: VectorInput) -> np.ndarray:
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1D vector, got {arr.ndim}D")
    return arr


def max_value(x: VectorInput) -> float:
    """Largest value of ``x``; ``-inf`` for an empty vector."""
    arr = _as_vector(x)
    if arr.size == 0:
        return -math.inf
    return float(arr.max())


def norm(x: VectorInput) -> float:
    """Euclidean norm of ``x``."""
    arr = _as_vector(x)
    return math.sqrt(float(np.dot(arr, arr)))


def dot_product(x: VectorInput, y: VectorInput) -> Outcome[float]:
    """Dot product of two dense vectors of equal length.

    Returns:
        Outcome holding the product, or a DIMENSION_MISMATCH failure when
        the lengths differ.
    """
    a = _as_vector(x)
    b = _as_vector(y)
    if a.size != b.size:
        return Outcome.failure(
            SM_ERROR_DIMENSION_MISMATCH,
            f"vector lengths differ: {a.size} != {b.size}",
        )
    return Outcome.success(float(np.dot(a, b)))


def cosine_similarity(x: VectorInput, y: VectorInput) -> Outcome[float]:
    """Cosine of the angle between ``x`` and ``y``.

    ``cos(x, y) = dot(x, y) / (norm(x) * norm(y))``

    Returns:
        Outcome holding the cosine. Fails with DIMENSION_MISMATCH when the
        lengths differ and with DIVISION_BY_ZERO when either vector is all
        zeros (the cosine is undefined).

    Example:
        >>> cosine_similarity([1.0, 0.0], [1.0, 1.0]).unwrap()
        0.7071067811865475
        >>> cosine_similarity([0.0, 0.0], [1.0, 1.0]).value_or(float("nan"))
        nan
    """
    dot = dot_product(x, y)
    if not dot.ok:
        return dot
    denominator = norm(x) * norm(y)
    if denominator == 0.0:
        return Outcome.failure(SM_ERROR_DIVISION_BY_ZERO, "cosine with a zero vector")
    return Outcome.success(dot.value / denominator)


def argmax_k(values: VectorInput, k: int) -> np.ndarray:
    """Indices of the ``k`` largest values, largest first.

    Each round scans the working copy for its maximum and marks the chosen
    position as taken, so the cost is O(k * n) and no full sort is done.
    On ties the first position wins. NaN values rank below every number.

    Args:
        values: Values to select from.
        k: Number of indices to return, ``0 <= k <= len(values)``.

    Returns:
        int64 array of length ``k``.

    Raises:
        IndexOutOfRangeError: If ``k`` is negative or exceeds ``len(values)``.

    Example:
        >>> argmax_k([3.0, 1.0, 4.0, 1.0, 5.0], 2)
        array([4, 2])
    """
    work = _as_vector(values).copy()
    n = work.size
    if k < 0 or k > n:
        raise IndexOutOfRangeError(f"cannot select {k} of {n} values")

    work[np.isnan(work)] = -np.inf
    taken = np.zeros(n, dtype=bool)
    result = np.empty(k, dtype=np.int64)
    for i in range(k):
        candidates = np.flatnonzero(~taken)
        best = candidates[int(np.argmax(work[candidates]))]
        taken[best] = True
        result[i] = best
    return result


def scale_to_range(values: VectorInput, low: float, high: float) -> np.ndarray:
    """Rescale ``values`` linearly: ``low + v * (high - low) / max(values)``.

    The largest value maps to ``high`` and zero maps to ``low``.

    Raises:
        NumericalError: If the maximum is zero.
    """
    arr = _as_vector(values)
    if arr.size == 0:
        return arr.copy()
    top = float(arr.max())
    if top == 0.0:
        raise NumericalError("cannot scale values whose maximum is zero", code=SM_ERROR_DIVISION_BY_ZERO)
    return low + arr * (high - low) / top
