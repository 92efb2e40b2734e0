"""
Term ranking against singular vectors.

A term is described by its row of the co-occurrence matrix. Comparing that
row with every left singular vector (eigenvector) by cosine similarity
tells which eigenvectors the term is close to; the singular values of the
best matches, mapped into the visible wavelength range, form the term's
spectrum.
"""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from spectralmap._config import SpectrumConfig
from spectralmap._errors import (
    SM_ERROR_DIMENSION_MISMATCH,
    IndexOutOfRangeError,
    check_outcome,
)
from spectralmap.math.dense import argmax_k, cosine_similarity, scale_to_range

__all__ = [
    "TermMatch",
    "find_term",
    "cosines_for_term",
    "rank_term",
]


@dataclass(frozen=True)
class TermMatch:
    """One eigenvector matched against a term."""

    eigenvector: int
    cosine: float
    similar: bool                # cosine passes the similarity cutoff
    wavelength: Optional[float]  # None when no singular values were given

    def __str__(self) -> str:
        return f"{self.eigenvector}:{self.cosine}"


def find_term(words: Sequence[str], term: str) -> int:
    """Position of ``term`` in a sorted word list (binary search, lower-cased).

    Raises:
        IndexOutOfRangeError: If the term is not in the list.
    """
    term = term.lower()
    pos = bisect_left(words, term)
    if pos < len(words) and words[pos] == term:
        return pos
    raise IndexOutOfRangeError(f"term {term!r} is not in the word list")


def cosines_for_term(
    cooccurrence: np.ndarray,
    eigenvectors: np.ndarray,
    term_index: int,
) -> np.ndarray:
    """Cosine of a term's co-occurrence row with every eigenvector.

    Undefined cosines (zero row or zero eigenvector) are NaN.

    Raises:
        IndexOutOfRangeError: If ``term_index`` is not a row of ``cooccurrence``.
        DimensionMismatchError: If row and eigenvector lengths differ.
    """
    cooccurrence = np.asarray(cooccurrence, dtype=np.float64)
    eigenvectors = np.asarray(eigenvectors, dtype=np.float64)
    if not 0 <= term_index < cooccurrence.shape[0]:
        raise IndexOutOfRangeError(
            f"term index {term_index} outside 0..{cooccurrence.shape[0] - 1}"
        )

    term_row = cooccurrence[term_index]
    result = np.empty(eigenvectors.shape[0], dtype=np.float64)
    for i, vector in enumerate(eigenvectors):
        outcome = cosine_similarity(term_row, vector)
        if outcome.code == SM_ERROR_DIMENSION_MISMATCH:
            check_outcome(outcome, f"eigenvector {i}")
        result[i] = outcome.value_or(math.nan)
    return result


def rank_term(
    cooccurrence: np.ndarray,
    eigenvectors: np.ndarray,
    term_index: int,
    singular_values: Optional[np.ndarray] = None,
    config: Optional[SpectrumConfig] = None,
) -> List[TermMatch]:
    """Best matching eigenvectors for a term, most similar first.

    At most ``config.top_k`` matches are returned (fewer when there are
    fewer eigenvectors). Each match carries the wavelength of its singular
    value after scaling into the configured visible range.

    Raises:
        IndexOutOfRangeError: If ``term_index`` is out of range or there are
            fewer singular values than eigenvectors.
    """
    config = config or SpectrumConfig()
    cosines = cosines_for_term(cooccurrence, eigenvectors, term_index)
    k = min(config.top_k, cosines.size)

    wavelengths = None
    if singular_values is not None:
        singular_values = np.asarray(singular_values, dtype=np.float64)
        if singular_values.size < cosines.size:
            raise IndexOutOfRangeError(
                f"{singular_values.size} singular values for {cosines.size} eigenvectors"
            )
        wavelengths = scale_to_range(
            singular_values, config.visible_low, config.visible_high
        )

    matches = []
    for index in argmax_k(cosines, k):
        cosine = float(cosines[index])
        matches.append(TermMatch(
            eigenvector=int(index),
            cosine=cosine,
            similar=cosine >= config.similarity_cutoff,
            wavelength=None if wavelengths is None else float(wavelengths[index]),
        ))
    return matches
