"""
Pytest configuration and shared fixtures for spectralmap tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from spectralmap.sparse import SparseMatrix, SparseVector


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def doc_matrix():
    """Two documents over three terms, 1-based.

    Rows:
        [1:2.0, 3:1.0]
        [2:1.0, 3:3.0]

    Dense:
        [[2, 0, 1],
         [0, 1, 3]]
    """
    return SparseMatrix.from_pairs([
        [(1, 2.0), (3, 1.0)],
        [(2, 1.0), (3, 3.0)],
    ])


@pytest.fixture
def term_cooccurrence_dense():
    """Term x term co-occurrence of ``doc_matrix``."""
    return np.array([
        [4.0, 0.0, 2.0],
        [0.0, 1.0, 3.0],
        [2.0, 3.0, 10.0],
    ])


@pytest.fixture
def sparse_with_absent_row():
    """0-based 3x2 matrix whose middle row is absent."""
    return SparseMatrix([
        SparseVector([0], [1.0]),
        None,
        SparseVector([1], [2.0]),
    ], index_base=0)


@pytest.fixture
def random_sparse_matrix():
    """Deterministic random 0-based matrix with some empty rows."""
    rng = np.random.default_rng(7)
    dense = rng.random((8, 6))
    dense[dense < 0.6] = 0.0
    dense[3] = 0.0
    return SparseMatrix.from_dense(dense, index_base=0), dense


@pytest.fixture
def td_file(tmp_path):
    """Term-document file in libsvm style with labels."""
    path = tmp_path / "td.txt"
    path.write_text("1 1:2.0 3:1.0\n2 2:1.0 3:3.0\n")
    return path
