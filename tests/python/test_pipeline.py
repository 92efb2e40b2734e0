"""
Tests for the SVD solver adapter and the decomposition pipeline.
"""

import numpy as np
import pytest

from spectralmap import (
    ConfigurationError,
    DimensionMismatchError,
    InsufficientRankError,
    MatrixFormatError,
    MatrixIOError,
)
from spectralmap._config import DecomposeConfig, SpectralMapConfig
from spectralmap.io import read_dense_matrix, read_double_array
from spectralmap.pipeline import (
    DecomposePaths,
    DecomposePipeline,
    Stage,
    build_cooccurrence,
    run_decompose,
)
from spectralmap.solver import DecompositionResult, check_rank, effective_rank, svds_solver
from spectralmap.sparse import SparseMatrix, to_compressed_column, to_dense_matrix


def _paths(tmp_path, td_file):
    return DecomposePaths(
        td_file,
        tmp_path / "cooc.txt",
        tmp_path / "ut.txt",
        tmp_path / "vt.txt",
        tmp_path / "s.txt",
    )


def _fake_solver(matrix, k):
    """Identity-like triplets with the right shapes."""
    n_rows, n_cols = matrix.shape
    return DecompositionResult(
        left_vectors=np.eye(k, n_rows),
        right_vectors=np.eye(k, n_cols),
        singular_values=np.arange(k, 0, -1, dtype=np.float64),
    )


# =============================================================================
# Solver
# =============================================================================

class TestSolver:
    """Test the scipy svds adapter."""

    def test_singular_values(self, term_cooccurrence_dense):
        """Test values match a dense SVD, largest first."""
        compressed = to_compressed_column(SparseMatrix.from_dense(term_cooccurrence_dense))
        result = svds_solver(compressed, 2)

        expected = np.linalg.svd(term_cooccurrence_dense, compute_uv=False)[:2]
        np.testing.assert_allclose(result.singular_values, expected, rtol=1e-6)
        assert result.left_vectors.shape == (2, 3)
        assert result.right_vectors.shape == (2, 3)
        assert result.singular_values[0] >= result.singular_values[1]

    def test_vectors_reconstruct(self, term_cooccurrence_dense):
        """Test A v = s u for every triplet."""
        compressed = to_compressed_column(SparseMatrix.from_dense(term_cooccurrence_dense))
        result = svds_solver(compressed, 2)
        for u, v, s in zip(result.left_vectors, result.right_vectors, result.singular_values):
            np.testing.assert_allclose(term_cooccurrence_dense @ v, s * u, atol=1e-8)

    def test_rank_too_large(self, term_cooccurrence_dense):
        """Test the default rank fails on a small matrix."""
        compressed = to_compressed_column(SparseMatrix.from_dense(term_cooccurrence_dense))
        with pytest.raises(InsufficientRankError):
            svds_solver(compressed, 1000)

    def test_rank_deficient(self):
        """Test k beyond the effective rank fails instead of returning padding."""
        compressed = to_compressed_column(SparseMatrix.from_dense(np.ones((4, 4))))
        with pytest.raises(InsufficientRankError, match="effective rank 1"):
            svds_solver(compressed, 2)

    def test_rank_deficient_within_rank(self, term_cooccurrence_dense):
        """Test a singular matrix still decomposes up to its rank."""
        assert np.linalg.matrix_rank(term_cooccurrence_dense) == 2
        compressed = to_compressed_column(SparseMatrix.from_dense(term_cooccurrence_dense))
        assert svds_solver(compressed, 2).rank == 2

    def test_effective_rank(self):
        """Test values at the noise floor do not count."""
        assert effective_rank(np.array([4.0, 2e-32, 0.0]), (4, 4)) == 1
        assert effective_rank(np.array([0.0, 0.0]), (3, 3)) == 0
        assert effective_rank(np.array([]), (3, 3)) == 0

    @pytest.mark.parametrize("k", [0, 3])
    def test_check_rank(self, k):
        """Test ranks outside 1..min(shape)-1 are rejected."""
        with pytest.raises(InsufficientRankError):
            check_rank((3, 4), k)

    def test_validate_shape(self):
        """Test result arrays are checked against the matrix shape."""
        result = _fake_solver(to_compressed_column(SparseMatrix.from_dense(np.eye(3))), 2)
        result.validate((3, 3))
        with pytest.raises(DimensionMismatchError):
            result.validate((4, 3))


# =============================================================================
# Pipeline
# =============================================================================

class TestBuildCooccurrence:
    """Test the co-occurrence computation."""

    def test_term_by_term(self, doc_matrix, term_cooccurrence_dense):
        """Test documents x terms gives terms x terms."""
        cooccurrence = build_cooccurrence(doc_matrix)
        assert cooccurrence.shape == (3, 3)
        assert cooccurrence.index_base == 0
        np.testing.assert_array_equal(to_dense_matrix(cooccurrence), term_cooccurrence_dense)


class TestDecomposePaths:
    """Test argument validation."""

    @pytest.mark.parametrize("count", [0, 4, 6])
    def test_wrong_count(self, count):
        """Test anything but five paths is rejected with the count."""
        with pytest.raises(ConfigurationError, match=f"There were {count} arguments"):
            DecomposePaths.from_args(["x"] * count)

    def test_five(self):
        """Test five paths are accepted in order."""
        paths = DecomposePaths.from_args(["a", "b", "c", "d", "e"])
        assert paths.term_document == "a"
        assert paths.singular_values == "e"


class TestDecomposePipeline:
    """Test the full run."""

    def test_cooccurrence_file(self, tmp_path, td_file):
        """Test the co-occurrence matrix is exported in dense form."""
        paths = _paths(tmp_path, td_file)
        DecomposePipeline(DecomposeConfig(rank=2), _fake_solver).run(paths)
        assert paths.cooccurrence.read_text() == "4.0 0.0 2.0\n0.0 1.0 3.0\n2.0 3.0 10.0\n"

    def test_stream_export_matches(self, tmp_path, td_file):
        """Test streamed and materialized export write the same text."""
        dense_paths = _paths(tmp_path, td_file)
        DecomposePipeline(DecomposeConfig(rank=2), _fake_solver).run(dense_paths)
        expected = dense_paths.cooccurrence.read_text()

        stream_dir = tmp_path / "stream"
        stream_dir.mkdir()
        stream_paths = _paths(stream_dir, td_file)
        config = DecomposeConfig(rank=2, stream_dense_export=True)
        DecomposePipeline(config, _fake_solver).run(stream_paths)
        assert stream_paths.cooccurrence.read_text() == expected

    def test_results_exported(self, tmp_path, td_file):
        """Test solver output is written unchanged."""
        paths = _paths(tmp_path, td_file)
        DecomposePipeline(DecomposeConfig(rank=2), _fake_solver).run(paths)
        np.testing.assert_array_equal(read_dense_matrix(paths.left_vectors), np.eye(2, 3))
        np.testing.assert_array_equal(read_dense_matrix(paths.right_vectors), np.eye(2, 3))
        np.testing.assert_array_equal(read_double_array(paths.singular_values), [2.0, 1.0])

    def test_delimiter(self, tmp_path, td_file):
        """Test the configured delimiter separates values."""
        paths = _paths(tmp_path, td_file)
        DecomposePipeline(DecomposeConfig(rank=2, delimiter=","), _fake_solver).run(paths)
        assert paths.cooccurrence.read_text().splitlines()[0] == "4.0,0.0,2.0"

    def test_stage_reports(self, tmp_path, td_file):
        """Test every stage reports once, in order."""
        result = DecomposePipeline(DecomposeConfig(rank=2), _fake_solver).run(
            _paths(tmp_path, td_file)
        )
        assert [r.stage for r in result.reports] == list(Stage)
        assert result.reports[Stage.LOAD].shape == (2, 3)
        assert result.reports[Stage.TRANSPOSE].shape == (3, 2)
        assert result.reports[Stage.COOCCUR].nnz == 7

    def test_real_solver(self, tmp_path, td_file, term_cooccurrence_dense):
        """Test the default solver end to end."""
        paths = _paths(tmp_path, td_file)
        result = run_decompose(
            [paths.term_document, paths.cooccurrence, paths.left_vectors,
             paths.right_vectors, paths.singular_values],
            SpectralMapConfig(decompose=DecomposeConfig(rank=2)),
        )
        expected = np.linalg.svd(term_cooccurrence_dense, compute_uv=False)[:2]
        np.testing.assert_allclose(
            read_double_array(paths.singular_values), expected, rtol=1e-6
        )
        assert result.decomposition.rank == 2

    def test_default_rank_fails(self, tmp_path, td_file):
        """Test rank 1000 on a 3x3 matrix aborts after the co-occurrence export."""
        paths = _paths(tmp_path, td_file)
        with pytest.raises(InsufficientRankError):
            DecomposePipeline().run(paths)
        assert paths.cooccurrence.exists()
        assert not paths.left_vectors.exists()

    def test_explicit_index_base(self, tmp_path):
        """Test a 0-based file without term 0 keeps an empty term 0."""
        td = tmp_path / "td0.txt"
        td.write_text("1:2.0 3:1.0\n2:1.0 3:3.0\n")
        paths = _paths(tmp_path, td)
        result = DecomposePipeline(
            DecomposeConfig(rank=2, index_base=0), _fake_solver
        ).run(paths)
        assert result.reports[Stage.LOAD].shape == (2, 4)
        assert result.cooccurrence.shape == (4, 4)
        assert paths.cooccurrence.read_text().splitlines()[0] == "0.0 0.0 0.0 0.0"

    def test_index_base_conflict(self, tmp_path):
        """Test a 1-based setting rejects a file that uses index 0."""
        td = tmp_path / "td0.txt"
        td.write_text("0:1.0 1:2.0\n")
        with pytest.raises(MatrixFormatError):
            DecomposePipeline(
                DecomposeConfig(rank=2, index_base=1), _fake_solver
            ).run(_paths(tmp_path, td))

    def test_missing_input(self, tmp_path):
        """Test a missing term-document file aborts at load."""
        paths = _paths(tmp_path, tmp_path / "missing.txt")
        with pytest.raises(MatrixIOError) as excinfo:
            DecomposePipeline(DecomposeConfig(rank=2), _fake_solver).run(paths)
        assert "missing.txt" in str(excinfo.value)
        assert not paths.cooccurrence.exists()
