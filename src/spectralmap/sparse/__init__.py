"""
Sparse algebra for spectralmap.

Provides:
- SparseElement / SparseVector: sorted (index, value) vectors
- SparseMatrix: row-major matrices with an explicit index base
- Vector algebra: insert_or_accumulate, dot_product, extract_column
- Matrix algebra: transpose, multiply_with_transpose, index range scans
- Format bridge: dense and compressed-column conversions
"""

from ._element import SparseElement
from ._vector import (
    SparseVector,
    insert_or_accumulate,
    dot_product,
    extract_column,
)
from ._matrix import (
    SparseMatrix,
    find_min_column_index,
    find_max_column_index,
    detect_index_base,
    shift_columns,
    normalize_index_base,
    transpose,
    multiply_with_transpose,
)
from ._bridge import (
    CompressedColumnMatrix,
    to_dense_matrix,
    iter_dense_rows,
    to_compressed_column,
    export_decomposition,
)

__all__ = [
    # Elements and vectors
    'SparseElement',
    'SparseVector',
    'insert_or_accumulate',
    'dot_product',
    'extract_column',

    # Matrices
    'SparseMatrix',
    'find_min_column_index',
    'find_max_column_index',
    'detect_index_base',
    'shift_columns',
    'normalize_index_base',
    'transpose',
    'multiply_with_transpose',

    # Format bridge
    'CompressedColumnMatrix',
    'to_dense_matrix',
    'iter_dense_rows',
    'to_compressed_column',
    'export_decomposition',
]
