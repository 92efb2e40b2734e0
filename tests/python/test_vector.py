"""
Tests for sparse elements, sparse vectors and vector algebra.
"""

import pytest
import numpy as np

from spectralmap.sparse import (
    SparseElement,
    SparseVector,
    SparseMatrix,
    insert_or_accumulate,
    dot_product,
    extract_column,
)


class TestSparseElement:
    """Test the (index, value) pair."""

    def test_str(self):
        """Test element prints as index:value."""
        assert str(SparseElement(3, 1.5)) == "3:1.5"

    def test_frozen(self):
        """Test elements cannot be modified."""
        element = SparseElement(1, 2.0)
        with pytest.raises(AttributeError):
            element.value = 3.0


class TestSparseVectorCreation:
    """Test SparseVector construction and validation."""

    def test_create_empty(self):
        """Test empty vector has no entries."""
        vec = SparseVector()
        assert len(vec) == 0
        assert not vec
        assert vec.min_index is None

    def test_create_sorted(self):
        """Test creating from sorted arrays."""
        vec = SparseVector([1, 4, 7], [1.0, 2.0, 3.0])
        assert vec.indices == (1, 4, 7)
        assert vec.values == (1.0, 2.0, 3.0)
        assert vec.max_index == 7

    def test_unsorted_rejected(self):
        """Test constructor rejects descending indices."""
        with pytest.raises(ValueError):
            SparseVector([3, 1], [1.0, 1.0])

    def test_duplicate_rejected(self):
        """Test constructor rejects duplicate indices."""
        with pytest.raises(ValueError):
            SparseVector([2, 2], [1.0, 1.0])

    def test_negative_rejected(self):
        """Test constructor rejects negative indices."""
        with pytest.raises(ValueError):
            SparseVector([-1], [1.0])

    def test_length_mismatch_rejected(self):
        """Test constructor rejects misaligned arrays."""
        with pytest.raises(ValueError):
            SparseVector([1, 2], [1.0])

    def test_from_pairs_sorts_and_merges(self):
        """Test from_pairs sorts indices and sums duplicates."""
        vec = SparseVector.from_pairs([(5, 1.0), (2, 2.0), (5, 0.5)])
        assert vec.indices == (2, 5)
        assert vec.values == (2.0, 1.5)

    def test_iteration_yields_elements(self):
        """Test iterating produces SparseElement objects."""
        vec = SparseVector([0, 3], [1.0, 2.0])
        assert list(vec) == [SparseElement(0, 1.0), SparseElement(3, 2.0)]
        assert vec[1] == SparseElement(3, 2.0)

    def test_get(self):
        """Test value lookup by index."""
        vec = SparseVector([0, 3], [1.0, 2.0])
        assert vec.get(3) == 2.0
        assert vec.get(2) == 0.0


class TestInsertOrAccumulate:
    """Test merge-insert semantics."""

    def test_insert_into_absent(self):
        """Test inserting into None yields a single-element vector."""
        vec = insert_or_accumulate(None, 4, 1.5)
        assert vec == SparseVector([4], [1.5])

    def test_insert_into_empty(self):
        """Test inserting into an empty vector yields a single-element vector."""
        vec = insert_or_accumulate(SparseVector(), 0, 2.0)
        assert vec == SparseVector([0], [2.0])

    def test_insert_keeps_order(self):
        """Test inserting in the middle, front and back keeps ascending order."""
        vec = SparseVector([2, 6], [1.0, 1.0])
        vec = insert_or_accumulate(vec, 4, 3.0)
        vec = insert_or_accumulate(vec, 0, 5.0)
        vec = insert_or_accumulate(vec, 9, 7.0)
        assert vec.indices == (0, 2, 4, 6, 9)
        assert vec.values == (5.0, 1.0, 3.0, 1.0, 7.0)

    def test_repeated_accumulation(self):
        """Test repeated inserts at one index never duplicate it."""
        vec = None
        for _ in range(5):
            vec = insert_or_accumulate(vec, 3, 1.0)
        assert vec.indices == (3,)
        assert vec.values == (5.0,)

    def test_source_not_modified(self):
        """Test the input vector is left untouched."""
        original = SparseVector([1], [1.0])
        updated = insert_or_accumulate(original, 1, 1.0)
        assert original.values == (1.0,)
        assert updated.values == (2.0,)

    def test_negative_index(self):
        """Test negative index is rejected."""
        with pytest.raises(ValueError):
            insert_or_accumulate(None, -2, 1.0)


class TestDotProduct:
    """Test the merge-scan dot product."""

    def test_basic(self):
        """Test product accumulates only on matching indices."""
        x = SparseVector([1, 3, 5], [1.0, 2.0, 3.0])
        y = SparseVector([0, 3, 5, 8], [4.0, 5.0, 6.0, 7.0])
        assert dot_product(x, y) == pytest.approx(2.0 * 5.0 + 3.0 * 6.0)

    def test_absent_operand(self):
        """Test an absent operand gives zero."""
        x = SparseVector([1], [1.0])
        assert dot_product(x, None) == 0.0
        assert dot_product(None, x) == 0.0

    def test_empty_operand(self):
        """Test an empty operand gives zero."""
        assert dot_product(SparseVector(), SparseVector([0], [1.0])) == 0.0

    def test_disjoint(self):
        """Test vectors without common indices give zero."""
        x = SparseVector([0, 2], [1.0, 1.0])
        y = SparseVector([1, 3], [1.0, 1.0])
        assert dot_product(x, y) == 0.0

    def test_no_length_check(self):
        """Test vectors of different lengths align by index only."""
        x = SparseVector([100], [2.0])
        y = SparseVector([1, 100, 1000], [9.0, 3.0, 9.0])
        assert dot_product(x, y) == pytest.approx(6.0)

    def test_commutative(self):
        """Test dot product is commutative on random vectors."""
        rng = np.random.default_rng(3)
        for _ in range(20):
            xi = sorted(rng.choice(30, size=8, replace=False).tolist())
            yi = sorted(rng.choice(30, size=12, replace=False).tolist())
            x = SparseVector(xi, rng.normal(size=8).tolist())
            y = SparseVector(yi, rng.normal(size=12).tolist())
            assert dot_product(x, y) == dot_product(y, x)


class TestExtractColumn:
    """Test column extraction."""

    def test_extract(self, doc_matrix):
        """Test column 3 collects one entry from every row holding it."""
        column = extract_column(doc_matrix, 3)
        assert column.indices == (0, 1)
        assert column.values == (1.0, 3.0)

    def test_extract_missing(self, doc_matrix):
        """Test a column without entries is empty."""
        assert len(extract_column(doc_matrix, 7)) == 0

    def test_skips_absent_rows(self, sparse_with_absent_row):
        """Test absent rows are skipped and row numbers are kept."""
        column = extract_column(sparse_with_absent_row, 1)
        assert column.indices == (2,)
        assert column.values == (2.0,)

    def test_accepts_row_list(self):
        """Test a plain list of rows works as input."""
        rows = [SparseVector([0], [1.0]), SparseVector([0, 1], [2.0, 3.0])]
        assert extract_column(rows, 0).values == (1.0, 2.0)

    def test_matches_dense_column(self, random_sparse_matrix):
        """Test extracted columns equal the dense columns."""
        matrix, dense = random_sparse_matrix
        for c in range(dense.shape[1]):
            column = extract_column(matrix, c)
            expected_rows = np.flatnonzero(dense[:, c]).tolist()
            assert list(column.indices) == expected_rows
            np.testing.assert_allclose(column.values, dense[expected_rows, c])
