"""
spectralmap - Spectral mapping of index terms

Builds a term co-occurrence matrix from a sparse term-document matrix,
decomposes it with a sparse SVD solver, and ranks terms by their
similarity to the resulting eigenvectors.

Modules:
- sparse: sparse vectors/matrices, transpose, co-occurrence product,
  dense and compressed-column conversions
- math: dense vector analytics and term ranking
- io: plain-text matrix formats
- solver: SVD solver adapter
- pipeline: load -> transpose -> co-occur -> export -> decompose -> export

Example:
    >>> from spectralmap import read_sparse_matrix, build_cooccurrence
    >>> docs = read_sparse_matrix("td.txt")
    >>> cooc = build_cooccurrence(docs)
    >>> cooc.shape
    (5000, 5000)
"""

__version__ = '0.1.0'

from . import sparse
from . import math

from ._errors import (
    SpectralMapError,
    ConfigurationError,
    DimensionMismatchError,
    IndexOutOfRangeError,
    InsufficientRankError,
    MatrixFormatError,
    MatrixIOError,
    NumericalError,
    Outcome,
    check_outcome,
)
from ._config import (
    DecomposeConfig,
    SpectrumConfig,
    SpectralMapConfig,
)
from .sparse import (
    SparseElement,
    SparseVector,
    SparseMatrix,
    CompressedColumnMatrix,
    transpose,
    multiply_with_transpose,
    to_dense_matrix,
    to_compressed_column,
)
from .io import (
    read_sparse_matrix,
    read_dense_matrix,
    read_double_array,
    read_word_list,
    write_dense_matrix,
    write_list,
)
from .solver import DecompositionResult, svds_solver
from .pipeline import (
    Stage,
    DecomposePaths,
    DecomposePipeline,
    PipelineResult,
    build_cooccurrence,
    run_decompose,
)

__all__ = [
    # Version
    '__version__',

    # Modules
    'sparse',
    'math',

    # Errors
    'SpectralMapError',
    'ConfigurationError',
    'DimensionMismatchError',
    'IndexOutOfRangeError',
    'InsufficientRankError',
    'MatrixFormatError',
    'MatrixIOError',
    'NumericalError',
    'Outcome',
    'check_outcome',

    # Configuration
    'DecomposeConfig',
    'SpectrumConfig',
    'SpectralMapConfig',

    # Sparse algebra
    'SparseElement',
    'SparseVector',
    'SparseMatrix',
    'CompressedColumnMatrix',
    'transpose',
    'multiply_with_transpose',
    'to_dense_matrix',
    'to_compressed_column',

    # I/O
    'read_sparse_matrix',
    'read_dense_matrix',
    'read_double_array',
    'read_word_list',
    'write_dense_matrix',
    'write_list',

    # Solver and pipeline
    'DecompositionResult',
    'svds_solver',
    'Stage',
    'DecomposePaths',
    'DecomposePipeline',
    'PipelineResult',
    'build_cooccurrence',
    'run_decompose',
]
