"""Sparse Vector and Sparse Vector Algebra.

A sparse vector is an ordered sequence of (index, value) entries with
strictly ascending, unique indices. Entries are kept in two growable
parallel lists, so accumulating into a vector amortizes its cost instead
of reallocating on every insert.

Operations:
    - insert_or_accumulate: add a value at an index (merge by summation)
    - dot_product: merge-scan product of two sorted vectors
    - extract_column: collect one column of a row-major matrix

Absent vectors (``None``) are accepted wherever a vector is read and
behave like vectors with no entries.

Example:
    >>> x = SparseVector.from_pairs([(1, 2.0), (3, 1.0)])
    >>> y = insert_or_accumulate(x, 3, 2.0)
    >>> dot_product(x, y)
    7.0
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ._element import SparseElement

__all__ = [
    'SparseVector',
    'insert_or_accumulate',
    'dot_product',
    'extract_column',
]


class SparseVector:
    """Sorted sparse vector backed by parallel index/value lists.

    Vectors are owned by exactly one matrix row (or column) and are not
    shared; transformations build new vectors instead of mutating.

    Attributes:
        indices: Entry indices, strictly ascending.
        values: Entry values aligned with ``indices``.
    """

    __slots__ = ('_indices', '_values')

    def __init__(
        self,
        indices: Optional[Sequence[int]] = None,
        values: Optional[Sequence[float]] = None,
    ):
        """Initialize from already sorted indices and values.

        Args:
            indices: Strictly ascending non-negative indices.
            values: Values aligned with ``indices``.

        Raises:
            ValueError: If lengths differ, an index is negative, or indices
                are not strictly ascending.
        """
        indices = [] if indices is None else [int(i) for i in indices]
        values = [] if values is None else [float(v) for v in values]

        if len(indices) != len(values):
            raise ValueError(
                f"indices and values differ in length: {len(indices)} != {len(values)}"
            )
        for k, index in enumerate(indices):
            if index < 0:
                raise ValueError(f"negative index {index}")
            if k > 0 and indices[k - 1] >= index:
                raise ValueError(
                    f"indices not strictly ascending at position {k}: "
                    f"{indices[k - 1]} then {index}"
                )

        self._indices: List[int] = indices
        self._values: List[float] = values

    @classmethod
    def _from_sorted(cls, indices: List[int], values: List[float]) -> "SparseVector":
        """Adopt lists that are known to satisfy the ordering invariant."""
        vec = cls.__new__(cls)
        vec._indices = indices
        vec._values = values
        return vec

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, float]]) -> "SparseVector":
        """Build a vector from (index, value) pairs in any order.

        Duplicate indices are merged by summation.
        """
        vec = cls()
        for index, value in pairs:
            if int(index) < 0:
                raise ValueError(f"negative index {index}")
            vec._accumulate(int(index), float(value))
        return vec

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def indices(self) -> Tuple[int, ...]:
        return tuple(self._indices)

    @property
    def values(self) -> Tuple[float, ...]:
        return tuple(self._values)

    @property
    def min_index(self) -> Optional[int]:
        return self._indices[0] if self._indices else None

    @property
    def max_index(self) -> Optional[int]:
        return self._indices[-1] if self._indices else None

    def items(self) -> Iterator[Tuple[int, float]]:
        """Iterate (index, value) tuples in ascending index order."""
        return zip(self._indices, self._values)

    def get(self, index: int, default: float = 0.0) -> float:
        """Value stored at ``index`` or ``default`` when there is no entry."""
        pos = bisect_left(self._indices, index)
        if pos < len(self._indices) and self._indices[pos] == index:
            return self._values[pos]
        return default

    def copy(self) -> "SparseVector":
        return SparseVector._from_sorted(list(self._indices), list(self._values))

    # =========================================================================
    # Mutation (builders only)
    # =========================================================================

    def _accumulate(self, index: int, value: float) -> None:
        """Add ``value`` at ``index`` in place, keeping indices sorted and unique.

        Appending past the current maximum is O(1) amortized, which is the
        common case when rows are built in ascending order.
        """
        if not self._indices or index > self._indices[-1]:
            self._indices.append(index)
            self._values.append(value)
            return
        pos = bisect_left(self._indices, index)
        if self._indices[pos] == index:
            self._values[pos] += value
        else:
            self._indices.insert(pos, index)
            self._values.insert(pos, value)

    # =========================================================================
    # Python protocol
    # =========================================================================

    def __len__(self) -> int:
        return len(self._indices)

    def __iter__(self) -> Iterator[SparseElement]:
        for index, value in zip(self._indices, self._values):
            yield SparseElement(index, value)

    def __getitem__(self, position: int) -> SparseElement:
        return SparseElement(self._indices[position], self._values[position])

    def __bool__(self) -> bool:
        return bool(self._indices)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SparseVector):
            return NotImplemented
        return self._indices == other._indices and self._values == other._values

    def __repr__(self) -> str:
        body = ", ".join(f"{i}:{v}" for i, v in zip(self._indices, self._values))
        return f"SparseVector([{body}])"


# =============================================================================
# Vector Algebra
# =============================================================================

def insert_or_accumulate(
    vector: Optional[SparseVector],
    index: int,
    value: float,
) -> SparseVector:
    """Return a new vector with ``value`` added at ``index``.

    If ``index`` already has an entry its value is increased, otherwise a
    new entry is inserted at its sorted position. The input vector is not
    modified. An absent or empty input yields a single-element vector.

    Args:
        vector: Source vector, may be ``None``.
        index: Non-negative index to add at.
        value: Value to add.

    Returns:
        New SparseVector.

    Raises:
        ValueError: If ``index`` is negative.

    Example:
        >>> v = insert_or_accumulate(None, 2, 1.5)
        >>> v = insert_or_accumulate(v, 2, 1.0)
        >>> v
        SparseVector([2:2.5])
    """
    if index < 0:
        raise ValueError(f"negative index {index}")
    result = SparseVector() if vector is None else vector.copy()
    result._accumulate(int(index), float(value))
    return result


def dot_product(x: Optional[SparseVector], y: Optional[SparseVector]) -> float:
    """Dot product of two sparse vectors.

    Both vectors are scanned once in ascending index order; the pointer at
    the smaller index advances and a product is accumulated only when the
    indices match. There is no length check: vectors are aligned by index.

    Returns:
        The dot product, ``0.0`` if either vector is absent or empty.
    """
    if x is None or y is None:
        return 0.0

    xi, xv = x._indices, x._values
    yi, yv = y._indices, y._values
    xlen, ylen = len(xi), len(yi)
    i = j = 0
    total = 0.0
    while i < xlen and j < ylen:
        a, b = xi[i], yi[j]
        if a == b:
            total += xv[i] * yv[j]
            i += 1
            j += 1
        elif a > b:
            j += 1
        else:
            i += 1
    return total


def extract_column(
    rows: Iterable[Optional[SparseVector]],
    column_index: int,
) -> SparseVector:
    """Extract one column of a row-major sparse matrix.

    Every row is visited once and contributes at most one entry, the one
    stored at ``column_index``. The result is indexed by row number
    (0-based), so it is already in ascending order.

    Args:
        rows: Matrix rows (a SparseMatrix or any sequence of vectors).
        column_index: Raw column index as stored in the rows.

    Returns:
        SparseVector of (row, value) entries, possibly empty.
    """
    indices: List[int] = []
    values: List[float] = []
    for row_number, row in enumerate(rows):
        if not row:
            continue
        row_indices = row._indices
        pos = bisect_left(row_indices, column_index)
        if pos < len(row_indices) and row_indices[pos] == column_index:
            indices.append(row_number)
            values.append(row._values[pos])
    return SparseVector._from_sorted(indices, values)
