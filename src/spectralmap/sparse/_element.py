"""Sparse Element: the (index, value) pair stored in sparse vectors."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ['SparseElement']


@dataclass(frozen=True)
class SparseElement:
    """One non-zero entry of a sparse vector.

    Attributes:
        index: Non-negative column (or row) index.
        value: Entry value.
    """

    __slots__ = ('index', 'value')

    index: int
    value: float

    def __str__(self) -> str:
        return f"{self.index}:{self.value}"
