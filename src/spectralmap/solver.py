"""
SVD solver adapter.

The decomposition itself is a black box with a single contract: given a
compressed-column matrix and a rank ``k``, return ``k`` left singular
vectors, ``k`` right singular vectors and ``k`` singular values, or fail
when ``k`` exceeds what the matrix supports.

The default solver wraps ``scipy.sparse.linalg.svds`` (ARPACK, a Lanczos
type iteration). Any callable with the ``Solver`` signature can replace it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Tuple

import numpy as np

from ._errors import (
    SM_ERROR_CONVERGENCE_ERROR,
    DimensionMismatchError,
    InsufficientRankError,
    NumericalError,
)
from .sparse import CompressedColumnMatrix

__all__ = [
    "DecompositionResult",
    "Solver",
    "check_rank",
    "effective_rank",
    "svds_solver",
    "make_svds_solver",
]

logger = logging.getLogger("spectralmap.solver")


@dataclass(frozen=True)
class DecompositionResult:
    """Singular triplets returned by a solver, largest singular value first.

    Attributes:
        left_vectors: (k, n_rows) array, one left singular vector per row.
        right_vectors: (k, n_cols) array, one right singular vector per row.
        singular_values: (k,) array, descending.
    """

    left_vectors: np.ndarray
    right_vectors: np.ndarray
    singular_values: np.ndarray

    @property
    def rank(self) -> int:
        return int(self.singular_values.size)

    def validate(self, shape: Tuple[int, int]) -> None:
        """Check the arrays against the decomposed matrix's shape.

        Raises:
            DimensionMismatchError: If any array has the wrong shape.
        """
        k = self.rank
        n_rows, n_cols = shape
        if self.left_vectors.shape != (k, n_rows):
            raise DimensionMismatchError(
                f"left vectors have shape {self.left_vectors.shape}, expected {(k, n_rows)}"
            )
        if self.right_vectors.shape != (k, n_cols):
            raise DimensionMismatchError(
                f"right vectors have shape {self.right_vectors.shape}, expected {(k, n_cols)}"
            )


Solver = Callable[[CompressedColumnMatrix, int], DecompositionResult]


def check_rank(shape: Tuple[int, int], k: int) -> None:
    """Reject ranks the solver cannot deliver.

    The iterative solver computes at most ``min(shape) - 1`` triplets.

    Raises:
        InsufficientRankError: If ``k < 1`` or ``k >= min(shape)``.
    """
    limit = min(shape) - 1
    if k < 1 or k > limit:
        raise InsufficientRankError(
            f"requested {k} singular triplets from a {shape[0]}x{shape[1]} matrix; "
            f"at most {max(limit, 0)} are available"
        )


def effective_rank(singular_values: np.ndarray, shape: Tuple[int, int]) -> int:
    """Number of singular values above the numerical noise floor.

    The floor is ``max(s) * max(shape) * eps``, the threshold numpy uses
    in ``matrix_rank``.
    """
    s = np.asarray(singular_values, dtype=np.float64)
    if s.size == 0:
        return 0
    floor = s.max() * max(shape) * np.finfo(np.float64).eps
    return int(np.count_nonzero(s > floor))


def svds_solver(
    matrix: CompressedColumnMatrix,
    k: int,
    tol: float = 0.0,
) -> DecompositionResult:
    """Compute the ``k`` largest singular triplets with scipy's ``svds``.

    Raises:
        InsufficientRankError: If ``k`` is out of range for the matrix or
            exceeds its effective rank.
        NumericalError: If the iteration does not converge.
    """
    from scipy.sparse.linalg import ArpackNoConvergence, svds

    check_rank(matrix.shape, k)
    logger.info("Starting SVD of %dx%d matrix, k=%d", matrix.n_rows, matrix.n_cols, k)

    try:
        u, s, vt = svds(matrix.to_scipy(), k=k, tol=tol)
    except ArpackNoConvergence as exc:
        raise NumericalError(
            f"SVD did not converge: {exc}", code=SM_ERROR_CONVERGENCE_ERROR
        ) from exc

    order = np.argsort(s)[::-1]
    s = s[order]
    effective = effective_rank(s, matrix.shape)
    if effective < k:
        raise InsufficientRankError(
            f"requested {k} singular triplets but the matrix has effective rank {effective}"
        )

    return DecompositionResult(
        left_vectors=np.ascontiguousarray(u[:, order].T),
        right_vectors=np.ascontiguousarray(vt[order]),
        singular_values=np.ascontiguousarray(s),
    )


def make_svds_solver(tol: float = 0.0) -> Solver:
    """Bind a tolerance to ``svds_solver``."""
    return partial(svds_solver, tol=tol)
