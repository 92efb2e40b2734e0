"""Sparse Matrix and Sparse Matrix Algebra.

A SparseMatrix is an ordered sequence of row vectors. The column dimension
is not stored; it is derived from the largest index and the matrix's index
base. The index base (0 or 1) is decided once, when the matrix is built,
and carried with it, so later operations never guess it again.

Operations:
    - find_min_column_index / find_max_column_index: index range scans
    - detect_index_base / normalize_index_base / shift_columns
    - transpose
    - multiply_with_transpose: C[i][j] = dot(A[i], B[j]) (co-occurrence)

Example:
    >>> docs = SparseMatrix.from_pairs([[(1, 2.0), (3, 1.0)], [(2, 1.0), (3, 3.0)]])
    >>> docs.index_base, docs.shape
    (1, (2, 3))
    >>> terms = transpose(docs)                      # 3 x 2, 0-based
    >>> cooc = multiply_with_transpose(docs, docs).unwrap()
    >>> cooc[0]
    SparseVector([0:5.0, 1:3.0])
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .._errors import SM_ERROR_DIMENSION_MISMATCH, Outcome
from ._vector import SparseVector, dot_product

__all__ = [
    'SparseMatrix',
    'find_min_column_index',
    'find_max_column_index',
    'detect_index_base',
    'shift_columns',
    'normalize_index_base',
    'transpose',
    'multiply_with_transpose',
]

Row = Optional[SparseVector]


# =============================================================================
# Index Range Scans
# =============================================================================

def find_min_column_index(rows: Iterable[Row]) -> Optional[int]:
    """Smallest index stored in any row.

    Returns:
        The minimum index, or ``None`` when no row holds an entry. ``None``
        is distinct from a legitimate minimum of 0.
    """
    result = None
    for row in rows:
        if row:
            first = row._indices[0]
            if result is None or first < result:
                result = first
    return result


def find_max_column_index(rows: Iterable[Row]) -> int:
    """Largest index stored in any row, 0 when no row holds an entry."""
    result = 0
    for row in rows:
        if row:
            last = row._indices[-1]
            if last > result:
                result = last
    return result


def detect_index_base(rows: Iterable[Row]) -> int:
    """Decide whether indices are 0-based or 1-based.

    A matrix whose smallest index is 0 is 0-based; any other non-empty
    matrix is treated as 1-based. A matrix without entries is 0-based.
    """
    min_index = find_min_column_index(rows)
    if min_index is None or min_index == 0:
        return 0
    return 1


def _scan(rows: Sequence[Row]) -> Tuple[int, Optional[int], int]:
    """Count entries and find the index range in a single pass."""
    nnz = 0
    min_index = None
    max_index = 0
    for row in rows:
        if row:
            nnz += len(row)
            first, last = row._indices[0], row._indices[-1]
            if min_index is None or first < min_index:
                min_index = first
            if last > max_index:
                max_index = last
    return nnz, min_index, max_index


# =============================================================================
# Sparse Matrix
# =============================================================================

class SparseMatrix:
    """Row-major sparse matrix built from per-row sparse vectors.

    Rows may be absent (``None``) or empty; both stand for all-zero rows but
    are kept distinct. Matrices are not modified after construction: every
    operation returns a new matrix.

    Attributes:
        index_base: 0 or 1, the base all indices are expressed in.
        shape: (n_rows, n_cols) with ``n_cols = max_index + 1 - index_base``.
        nnz: Number of stored entries.
    """

    __slots__ = ('_rows', '_index_base', '_nnz', '_min_index', '_max_index')

    def __init__(self, rows: Iterable[Row] = (), index_base: Optional[int] = None):
        """Initialize from row vectors.

        Args:
            rows: Row vectors; ownership passes to the matrix.
            index_base: 0 or 1. Detected from the smallest index when omitted.

        Raises:
            ValueError: If ``index_base`` is not 0 or 1, or an entry lies below it.
            TypeError: If a row is neither a SparseVector nor None.
        """
        rows = tuple(rows)
        for row in rows:
            if row is not None and not isinstance(row, SparseVector):
                raise TypeError(f"Expected SparseVector or None, got {type(row)}")

        self._rows: Tuple[Row, ...] = rows
        self._nnz, self._min_index, self._max_index = _scan(rows)

        if index_base is None:
            index_base = 0 if self._min_index in (None, 0) else 1
        if index_base not in (0, 1):
            raise ValueError(f"index_base must be 0 or 1, got {index_base}")
        if self._min_index is not None and self._min_index < index_base:
            raise ValueError(
                f"index {self._min_index} lies below index base {index_base}"
            )
        self._index_base = index_base

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def from_pairs(
        cls,
        rows: Iterable[Optional[Iterable[Tuple[int, float]]]],
        index_base: Optional[int] = None,
    ) -> "SparseMatrix":
        """Build from per-row (index, value) pairs; ``None`` rows stay absent."""
        vectors = [None if r is None else SparseVector.from_pairs(r) for r in rows]
        return cls(vectors, index_base=index_base)

    @classmethod
    def from_dense(cls, dense, index_base: int = 0) -> "SparseMatrix":
        """Build from a 2D array-like, storing only non-zero cells.

        All-zero rows become empty (not absent) rows.
        """
        arr = np.asarray(dense, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"Expected a 2D array, got {arr.ndim}D")
        rows = []
        for dense_row in arr:
            nz = np.flatnonzero(dense_row)
            rows.append(SparseVector._from_sorted(
                [int(c) + index_base for c in nz],
                [float(dense_row[c]) for c in nz],
            ))
        return cls(rows, index_base=index_base)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def rows(self) -> Tuple[Row, ...]:
        return self._rows

    @property
    def index_base(self) -> int:
        return self._index_base

    @property
    def n_rows(self) -> int:
        return len(self._rows)

    @property
    def n_cols(self) -> int:
        if self._min_index is None:
            return 0
        return self._max_index + 1 - self._index_base

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.n_rows, self.n_cols)

    @property
    def nnz(self) -> int:
        return self._nnz

    @property
    def min_column_index(self) -> Optional[int]:
        return self._min_index

    @property
    def max_column_index(self) -> int:
        return self._max_index

    # =========================================================================
    # Python protocol
    # =========================================================================

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __getitem__(self, row: int) -> Row:
        return self._rows[row]

    def __eq__(self, other) -> bool:
        if not isinstance(other, SparseMatrix):
            return NotImplemented
        return self._index_base == other._index_base and self._rows == other._rows

    def __repr__(self) -> str:
        return (
            f"SparseMatrix(shape={self.shape}, nnz={self._nnz}, "
            f"index_base={self._index_base})"
        )


# =============================================================================
# Index Base Normalization
# =============================================================================

def shift_columns(matrix: SparseMatrix, k: int) -> SparseMatrix:
    """Shift every index by ``k`` and the index base along with it.

    Absent rows stay absent. Shifting a 0-based matrix by 1 re-expresses it
    1-based without changing its shape.
    """
    rows: List[Row] = []
    for row in matrix:
        if row is None:
            rows.append(None)
        else:
            rows.append(SparseVector._from_sorted(
                [i + k for i in row._indices], list(row._values)
            ))
    return SparseMatrix(rows, index_base=matrix.index_base + k)


def normalize_index_base(matrix: SparseMatrix, index_base: int = 0) -> SparseMatrix:
    """Re-express ``matrix`` in ``index_base`` (0 or 1)."""
    if index_base not in (0, 1):
        raise ValueError(f"index_base must be 0 or 1, got {index_base}")
    if matrix.index_base == index_base:
        return matrix
    return shift_columns(matrix, index_base - matrix.index_base)


# =============================================================================
# Transpose and Multiplication
# =============================================================================

def transpose(matrix: SparseMatrix) -> SparseMatrix:
    """Transpose a sparse matrix.

    Output row ``r`` collects an entry ``(i, value)`` for every input entry
    of row ``i`` stored at column ``r + index_base``. The output has
    ``matrix.n_cols`` rows and is 0-based (its indices are input row
    numbers). Output rows that receive no entry are absent.

    Input rows are visited in order, so every output row is built by
    appending and stays sorted without re-insertion.
    """
    base = matrix.index_base
    result: List[Row] = [None] * matrix.n_cols
    for i, row in enumerate(matrix):
        if not row:
            continue
        for index, value in row.items():
            target = result[index - base]
            if target is None:
                target = result[index - base] = SparseVector()
            target._accumulate(i, value)
    return SparseMatrix(result, index_base=0)


def multiply_with_transpose(
    a: SparseMatrix,
    b: SparseMatrix,
) -> Outcome[SparseMatrix]:
    """Multiply ``a`` with the transpose of ``b``.

    Computes ``C[i][j] = dot_product(a[i], b[j])`` for every row pair and
    stores only non-zero results. With ``a`` and ``b`` both the term x
    document matrix, ``C`` is the term x term co-occurrence matrix.

    Args:
        a: Left matrix (m rows).
        b: Right matrix (p rows), same column space as ``a``.

    Returns:
        Outcome holding a 0-based m x p SparseMatrix (rows without any
        non-zero product are absent), or a DIMENSION_MISMATCH failure when
        the column dimensions or index bases differ.
    """
    if a.index_base != b.index_base or a.n_cols != b.n_cols:
        return Outcome.failure(
            SM_ERROR_DIMENSION_MISMATCH,
            f"cannot multiply {a.shape} (base {a.index_base}) with transpose of "
            f"{b.shape} (base {b.index_base})",
        )

    symmetric = a is b
    cache: Dict[Tuple[int, int], float] = {}
    b_rows = b.rows
    result: List[Row] = []
    for i, x in enumerate(a):
        out: Row = None
        if x:
            for j, y in enumerate(b_rows):
                if symmetric and j < i:
                    value = cache.pop((j, i), 0.0)
                else:
                    value = dot_product(x, y)
                    if symmetric and j > i and value != 0.0:
                        cache[(i, j)] = value
                if value != 0.0:
                    if out is None:
                        out = SparseVector()
                    out._accumulate(j, value)
        result.append(out)
    return Outcome.success(SparseMatrix(result, index_base=0))
