"""Format Bridge.

Converts row-major sparse matrices into the layouts consumed outside the
algebra layer:

    - Dense row-major arrays (co-occurrence export, term ranking)
    - Compressed-column arrays (input of the SVD solver)

and routes solver output to storage unchanged.

Example:
    >>> ccm = to_compressed_column(cooc)
    >>> ccm.col_ptr[-1] == ccm.nnz
    True
    >>> csc = ccm.to_scipy()          # scipy.sparse.csc_matrix
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Tuple, Union
import logging
import os

import numpy as np

from ._matrix import SparseMatrix
from ._vector import extract_column

if TYPE_CHECKING:
    from scipy import sparse as sp
    from ..solver import DecompositionResult

__all__ = [
    'CompressedColumnMatrix',
    'to_dense_matrix',
    'iter_dense_rows',
    'to_compressed_column',
    'export_decomposition',
]

logger = logging.getLogger("spectralmap.bridge")

PathLike = Union[str, "os.PathLike[str]"]


# =============================================================================
# Compressed-Column Matrix
# =============================================================================

@dataclass(frozen=True)
class CompressedColumnMatrix:
    """Compressed-column (CSC) view of a sparse matrix.

    For column ``c`` the entries ``row_indices[col_ptr[c]:col_ptr[c + 1]]``
    are the rows holding a value in that column, in ascending order, and
    ``col_ptr[n_cols] == nnz``.

    Attributes:
        col_ptr: Column offsets, int64, length n_cols + 1.
        row_indices: 0-based row of every entry, int64, length nnz.
        values: Entry values, float64, length nnz.
        shape: (n_rows, n_cols).
    """

    col_ptr: np.ndarray
    row_indices: np.ndarray
    values: np.ndarray
    shape: Tuple[int, int]

    @property
    def n_rows(self) -> int:
        return self.shape[0]

    @property
    def n_cols(self) -> int:
        return self.shape[1]

    @property
    def nnz(self) -> int:
        return int(self.values.size)

    def column(self, c: int) -> Tuple[np.ndarray, np.ndarray]:
        """Rows and values of column ``c``."""
        start, end = self.col_ptr[c], self.col_ptr[c + 1]
        return self.row_indices[start:end], self.values[start:end]

    def validate(self) -> None:
        """Check the layout invariants.

        Raises:
            ValueError: If any offset, length or row index is inconsistent.
        """
        n_rows, n_cols = self.shape
        if self.col_ptr.size != n_cols + 1:
            raise ValueError(
                f"col_ptr has {self.col_ptr.size} entries, expected {n_cols + 1}"
            )
        if self.row_indices.size != self.values.size:
            raise ValueError("row_indices and values differ in length")
        if self.col_ptr[0] != 0 or self.col_ptr[-1] != self.nnz:
            raise ValueError("col_ptr must start at 0 and end at nnz")
        if np.any(np.diff(self.col_ptr) < 0):
            raise ValueError("col_ptr is not monotonic")
        if self.nnz and (self.row_indices.min() < 0 or self.row_indices.max() >= n_rows):
            raise ValueError("row index out of range")

    def to_scipy(self) -> "sp.csc_matrix":
        """Convert to scipy.sparse.csc_matrix (arrays are shared, not copied)."""
        from scipy import sparse as sp

        return sp.csc_matrix(
            (self.values, self.row_indices, self.col_ptr), shape=self.shape
        )

    def to_dense(self) -> np.ndarray:
        dense = np.zeros(self.shape, dtype=np.float64)
        for c in range(self.n_cols):
            rows, vals = self.column(c)
            dense[rows, c] = vals
        return dense


# =============================================================================
# Conversions
# =============================================================================

def iter_dense_rows(matrix: SparseMatrix) -> Iterator[np.ndarray]:
    """Yield each row as a dense float64 array of width ``matrix.n_cols``.

    Only one row is materialized at a time, which makes this the sink of
    choice for large vocabularies. Absent and empty rows yield zero rows.
    """
    width = matrix.n_cols
    base = matrix.index_base
    for row in matrix:
        dense_row = np.zeros(width, dtype=np.float64)
        if row:
            dense_row[[i - base for i in row._indices]] = row._values
        yield dense_row


def to_dense_matrix(matrix: SparseMatrix) -> np.ndarray:
    """Materialize ``matrix`` as a dense (n_rows x n_cols) float64 array.

    Entry ``(i, index)`` lands in cell ``[i, index - index_base]``; absent
    rows become all-zero rows of full width.
    """
    dense = np.zeros(matrix.shape, dtype=np.float64)
    base = matrix.index_base
    for i, row in enumerate(matrix):
        if row:
            dense[i, [c - base for c in row._indices]] = row._values
    return dense


def to_compressed_column(matrix: SparseMatrix) -> CompressedColumnMatrix:
    """Convert a row-major sparse matrix into compressed-column layout.

    Columns are visited in ascending order and each is gathered with
    ``extract_column``, so the conversion costs O(rows x columns). That is
    acceptable for term x term co-occurrence matrices, whose size is
    bounded by the vocabulary.

    Returns:
        CompressedColumnMatrix of shape ``matrix.shape`` with 0-based rows
        and columns.
    """
    nnz = matrix.nnz
    n_rows, n_cols = matrix.shape
    base = matrix.index_base

    col_ptr = np.zeros(n_cols + 1, dtype=np.int64)
    row_indices = np.empty(nnz, dtype=np.int64)
    values = np.empty(nnz, dtype=np.float64)

    n = 0
    for c in range(n_cols):
        column = extract_column(matrix, c + base)
        col_ptr[c] = n
        k = len(column)
        if k:
            row_indices[n:n + k] = column._indices
            values[n:n + k] = column._values
            n += k
    col_ptr[n_cols] = n

    logger.debug("Compressed %dx%d matrix with %d entries", n_rows, n_cols, n)
    return CompressedColumnMatrix(col_ptr, row_indices, values, (n_rows, n_cols))


def export_decomposition(
    result: "DecompositionResult",
    left_path: PathLike,
    right_path: PathLike,
    values_path: PathLike,
    delimiter: str = " ",
) -> None:
    """Write solver output to storage without transforming it.

    Left and right singular vectors are written one vector per line,
    singular values one per line.
    """
    from ..io import write_dense_matrix, write_list

    write_dense_matrix(result.left_vectors, left_path, delimiter)
    write_dense_matrix(result.right_vectors, right_path, delimiter)
    write_list(result.singular_values, values_path)
