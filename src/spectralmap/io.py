"""
Plain-text matrix formats.

Formats:
    - Sparse (libsvm-like): one row per line, tokens separated by
      whitespace, ``[``, ``:`` or ``]``; an odd token count means the first
      token is a label and is dropped; the rest are ``index value`` pairs.
    - Dense: one row per line, values joined by a delimiter, no header.
    - List: one value per line.
    - Word list: one token per line, lower-cased, blank lines skipped,
      sorted ascending.

Numbers are written the way the JVM prints doubles (``5.0``, ``1.0E-5``,
``NaN``) so output files stay interchangeable with existing corpora.
Every file is opened in a ``with`` block and released before returning.
"""

from __future__ import annotations

import logging
import math
import os
import re
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from ._errors import (
    SM_ERROR_FILE_NOT_FOUND,
    SM_ERROR_READ_ERROR,
    SM_ERROR_WRITE_ERROR,
    MatrixFormatError,
    MatrixIOError,
)
from .sparse import SparseMatrix, SparseVector

__all__ = [
    "format_double",
    "parse_sparse_row",
    "read_sparse_matrix",
    "read_dense_matrix",
    "read_double_array",
    "read_word_list",
    "write_dense_matrix",
    "write_list",
]

logger = logging.getLogger("spectralmap.io")

PathLike = Union[str, "os.PathLike[str]"]

_SPARSE_DELIMITERS = re.compile(r"[\s\[:\]]+")
_DENSE_DELIMITERS = re.compile(r"[\s,]+")
_LINE_BREAKS = re.compile(r"[\r\n]")


# =============================================================================
# Number Formatting
# =============================================================================

def format_double(x: float) -> str:
    """Format a double the way ``java.lang.Double.toString`` does.

    Values with magnitude in [1e-3, 1e7) use plain notation with at least
    one fractional digit; others use ``d.dddE[-]n`` notation.

    Example:
        >>> format_double(5.0), format_double(1e-05), format_double(12345678.0)
        ('5.0', '1.0E-5', '1.2345678E7')
    """
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    magnitude = abs(x)
    if x == 0.0 or 1e-3 <= magnitude < 1e7:
        text = np.format_float_positional(x, unique=True, trim="0")
        return text
    text = np.format_float_scientific(x, unique=True, trim="0", exp_digits=1)
    mantissa, exponent = text.split("e")
    return f"{mantissa}E{int(exponent)}"


# =============================================================================
# Readers
# =============================================================================

def _open_error(exc: OSError, path: PathLike, code: int) -> MatrixIOError:
    if isinstance(exc, FileNotFoundError):
        code = SM_ERROR_FILE_NOT_FOUND
    return MatrixIOError(f"{os.fspath(path)}: {exc.strerror or exc}", code=code)


def _read_lines(path: PathLike) -> List[str]:
    """Read a text file and split it on CR/LF, keeping interior empty lines."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise _open_error(exc, path, SM_ERROR_READ_ERROR) from exc
    except UnicodeDecodeError as exc:
        raise MatrixFormatError(
            f"{os.fspath(path)}: not valid UTF-8 text at byte {exc.start}"
        ) from exc
    return _LINE_BREAKS.split(text)


def parse_sparse_row(
    line: str,
    source: str = "<string>",
    line_number: int = 0,
) -> SparseVector:
    """Parse one sparse row.

    Entries are kept as given when their indices ascend; otherwise they are
    sorted (duplicates summed) and a warning is logged.

    Raises:
        MatrixFormatError: If an index or value does not parse, or an index
            is negative.
    """
    tokens = [t for t in _SPARSE_DELIMITERS.split(line) if t]
    if len(tokens) % 2 != 0:
        tokens = tokens[1:]

    indices: List[int] = []
    values: List[float] = []
    for k in range(0, len(tokens), 2):
        try:
            index = int(tokens[k])
            value = float(tokens[k + 1])
        except ValueError as exc:
            raise MatrixFormatError(
                f"{source}:{line_number}: cannot parse pair "
                f"{tokens[k]!r}:{tokens[k + 1]!r}"
            ) from exc
        if index < 0:
            raise MatrixFormatError(f"{source}:{line_number}: negative index {index}")
        indices.append(index)
        values.append(value)

    if all(indices[k] < indices[k + 1] for k in range(len(indices) - 1)):
        return SparseVector._from_sorted(indices, values)

    logger.warning(
        "%s:%d: indices are not strictly ascending; sorting row", source, line_number
    )
    return SparseVector.from_pairs(zip(indices, values))


def read_sparse_matrix(path: PathLike, index_base: Optional[int] = None) -> SparseMatrix:
    """Read a sparse matrix, one row per non-empty line.

    A line without index/value pairs yields an empty row. The index base is
    detected from the smallest index unless given.

    Raises:
        MatrixIOError: If the file cannot be read.
        MatrixFormatError: If a line is malformed.
    """
    source = os.fspath(path)
    rows = [
        parse_sparse_row(line, source, number)
        for number, line in enumerate(_read_lines(path), start=1)
        if line
    ]
    try:
        matrix = SparseMatrix(rows, index_base=index_base)
    except ValueError as exc:
        raise MatrixFormatError(f"{source}: {exc}") from exc
    logger.info(
        "Read %s: %d rows, %d columns, %d entries (index base %d)",
        source, matrix.n_rows, matrix.n_cols, matrix.nnz, matrix.index_base,
    )
    return matrix


def read_dense_matrix(path: PathLike) -> np.ndarray:
    """Read a dense matrix whose values are separated by commas and/or spaces.

    Raises:
        MatrixFormatError: If a value does not parse or rows differ in width.
    """
    source = os.fspath(path)
    rows: List[List[float]] = []
    for number, line in enumerate(_read_lines(path), start=1):
        tokens = [t for t in _DENSE_DELIMITERS.split(line) if t]
        if not tokens:
            continue
        try:
            rows.append([float(t) for t in tokens])
        except ValueError as exc:
            raise MatrixFormatError(f"{source}:{number}: {exc}") from exc
        if len(rows[-1]) != len(rows[0]):
            raise MatrixFormatError(
                f"{source}:{number}: row has {len(rows[-1])} values, "
                f"expected {len(rows[0])}"
            )
    if not rows:
        return np.zeros((0, 0), dtype=np.float64)
    return np.asarray(rows, dtype=np.float64)


def read_double_array(path: PathLike) -> np.ndarray:
    """Read one value per line."""
    source = os.fspath(path)
    values: List[float] = []
    for number, line in enumerate(_read_lines(path), start=1):
        token = line.strip()
        if not token:
            continue
        try:
            values.append(float(token))
        except ValueError as exc:
            raise MatrixFormatError(f"{source}:{number}: {exc}") from exc
    return np.asarray(values, dtype=np.float64)


def read_word_list(path: PathLike) -> List[str]:
    """Read index terms: lower-cased, blank lines skipped, sorted ascending.

    The sorted order matches the row order of the term matrix.
    """
    words = [line.lower() for line in _read_lines(path) if line]
    words.sort()
    return words


# =============================================================================
# Writers
# =============================================================================

def write_dense_matrix(
    rows: Iterable[Sequence[float]],
    path: PathLike,
    delimiter: str = " ",
) -> int:
    """Write one line per row, values joined by ``delimiter``.

    ``rows`` may be a 2D array or any iterable of rows, including a
    generator that produces rows on demand.

    Returns:
        Number of rows written.

    Raises:
        MatrixIOError: If the file cannot be written.
    """
    count = 0
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for row in rows:
                f.write(delimiter.join(format_double(v) for v in row))
                f.write("\n")
                count += 1
    except OSError as exc:
        raise _open_error(exc, path, SM_ERROR_WRITE_ERROR) from exc
    logger.debug("Wrote %d rows to %s", count, os.fspath(path))
    return count


def write_list(values: Iterable[float], path: PathLike) -> int:
    """Write one value per line.

    Returns:
        Number of values written.
    """
    count = 0
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for v in values:
                f.write(format_double(v))
                f.write("\n")
                count += 1
    except OSError as exc:
        raise _open_error(exc, path, SM_ERROR_WRITE_ERROR) from exc
    logger.debug("Wrote %d values to %s", count, os.fspath(path))
    return count
