"""
spectralmap math module.

Dense vector analytics and term ranking over solver output.

Example:
    >>> import spectralmap.math as smath
    >>> smath.argmax_k([3.0, 1.0, 4.0, 1.0, 5.0], 2)
    array([4, 2])
"""

from spectralmap.math.dense import (
    max_value,
    norm,
    dot_product,
    cosine_similarity,
    argmax_k,
    scale_to_range,
)

from spectralmap.math.ranking import (
    TermMatch,
    find_term,
    cosines_for_term,
    rank_term,
)

__all__ = [
    # Dense analytics
    "max_value",
    "norm",
    "dot_product",
    "cosine_similarity",
    "argmax_k",
    "scale_to_range",
    # Ranking
    "TermMatch",
    "find_term",
    "cosines_for_term",
    "rank_term",
]
