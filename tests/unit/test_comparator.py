"""
Unit tests for ResultSetComparator and the canonical row ordering.
"""

import itertools
import pytest
from pathlib import Path
from unittest.mock import patch
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from pushdown_diff.core.comparator import (
    ResultSetComparator,
    ComparisonResult,
    row_sort_key,
    sort_rows,
)
from pushdown_diff.core.errors import (
    CellMismatch,
    ColumnMismatch,
    RowCountMismatch,
    ShapeError,
)
from pushdown_diff.core.result_set import ResultSet


def make(columns, rows):
    return ResultSet(list(columns), [tuple(r) for r in rows])


class TestRowOrdering:
    """Byte-wise lexicographic ordering of rows."""

    def test_first_differing_column_decides(self):
        rows = [(b"b", b"a"), (b"a", b"z"), (b"a", b"b")]
        result = sort_rows(make(["x", "y"], rows))
        assert result.rows == [(b"a", b"b"), (b"a", b"z"), (b"b", b"a")]

    def test_bytes_not_numeric_order(self):
        result = sort_rows(make(["n"], [(b"10",), (b"9",), (b"1",)]))
        assert result.rows == [(b"1",), (b"10",), (b"9",)]

    def test_null_sorts_before_empty_by_default(self):
        assert row_sort_key((None,)) < row_sort_key((b"",))
        assert row_sort_key((None,)) < row_sort_key((b"\x00",))

    def test_legacy_ordering_treats_null_as_empty(self):
        assert row_sort_key((None,), "legacy") == row_sort_key((b"",), "legacy")
        assert row_sort_key((None,), "legacy") < row_sort_key((b"a",), "legacy")

    def test_unknown_ordering_rejected(self):
        with pytest.raises(ValueError):
            ResultSetComparator(null_ordering="last")


class TestResultSetComparator:
    """Equality checking between two result sets."""

    def setup_method(self):
        """Set up test fixtures."""
        self.comparator = ResultSetComparator()

    def test_equal_sets_in_different_order(self):
        left = make(["id", "name"], [(b"2", b"b"), (b"1", None), (b"3", b"c")])
        right = make(["id", "name"], [(b"3", b"c"), (b"2", b"b"), (b"1", None)])

        self.comparator.assert_equal(left, right)

    def test_order_independent_for_every_permutation(self):
        rows = [
            (b"1", None),
            (b"1", b""),
            (b"", b"x"),
            (None, b"x"),
            (b"2", b"NULL"),
        ]
        for perm in itertools.permutations(rows):
            left = make(["a", "b"], rows)
            right = make(["a", "b"], perm)
            assert self.comparator.compare(left, right).equal, perm

    def test_duplicate_rows_must_match_in_multiplicity(self):
        left = make(["a"], [(b"1",), (b"1",), (b"2",)])
        right = make(["a"], [(b"1",), (b"2",), (b"2",)])

        with pytest.raises(CellMismatch):
            self.comparator.assert_equal(left, right)

    def test_null_is_not_the_word_null(self):
        left = make(["id", "name"], [(b"1", None)])
        right = make(["id", "name"], [(b"1", b"NULL")])

        with pytest.raises(CellMismatch) as exc_info:
            self.comparator.assert_equal(left, right)

        error = exc_info.value
        assert error.row_index == 0
        assert error.column == "name"
        assert error.left_value is None
        assert error.right_value == b"NULL"

    def test_null_is_not_empty_bytes(self):
        left = make(["v"], [(None,)])
        right = make(["v"], [(b"",)])

        with pytest.raises(CellMismatch):
            self.comparator.assert_equal(left, right)

    def test_cell_mismatch_reports_sorted_position(self):
        left = make(["k", "v"], [(b"b", b"2"), (b"a", b"1")])
        right = make(["k", "v"], [(b"a", b"1"), (b"b", b"3")])

        with pytest.raises(CellMismatch) as exc_info:
            self.comparator.assert_equal(left, right)

        assert exc_info.value.row_index == 1
        assert exc_info.value.column == "v"

    def test_column_mismatch_short_circuits(self):
        left = make(["a", "b"], [(b"1", b"2")])
        right = make(["a", "c"], [(b"1", b"2")])

        with patch.object(left, "check_shape") as left_shape, \
             patch.object(right, "check_shape") as right_shape:
            with pytest.raises(ColumnMismatch) as exc_info:
                self.comparator.assert_equal(left, right)

        left_shape.assert_not_called()
        right_shape.assert_not_called()
        assert exc_info.value.left_columns == ["a", "b"]
        assert exc_info.value.right_columns == ["a", "c"]

    def test_column_order_matters(self):
        left = make(["a", "b"], [])
        right = make(["b", "a"], [])

        with pytest.raises(ColumnMismatch):
            self.comparator.assert_equal(left, right)

    def test_row_count_mismatch_skips_row_comparison(self):
        left = make(["a"], [(b"1",), (b"2",), (b"3",)])
        right = make(["a"], [(b"1",), (b"2",)])

        with pytest.raises(RowCountMismatch) as exc_info:
            self.comparator.assert_equal(left, right)

        assert exc_info.value.left_rows == 3
        assert exc_info.value.right_rows == 2
        # rows untouched, not sorted
        assert left.rows == [(b"1",), (b"2",), (b"3",)]

    def test_ragged_row_is_fatal(self):
        left = make(["a", "b"], [(b"1",)])
        right = make(["a", "b"], [(b"1", b"2")])

        with pytest.raises(ShapeError):
            self.comparator.compare(left, right)

    def test_empty_sets_are_equal(self):
        assert self.comparator.compare(make(["a"], []), make(["a"], [])).equal

    def test_compare_returns_result_instead_of_raising(self):
        left = make(["a"], [(b"1",)])
        right = make(["a"], [(b"2",)])

        result = self.comparator.compare(left, right)

        assert isinstance(result, ComparisonResult)
        assert not result.equal
        assert isinstance(result.error, CellMismatch)
        assert "CELL MISMATCH" in result.reason
        assert result.left_rows == 1 and result.right_rows == 1

    def test_verdict_is_deterministic(self):
        rows = [(b"x", None), (b"y", b"1"), (b"x", b"0")]
        verdicts = set()
        for perm in itertools.permutations(rows):
            right = make(["a", "b"], list(perm)[:2] + [(b"x", b"9")])
            verdicts.add(self.comparator.compare(make(["a", "b"], rows), right).equal)
        assert verdicts == {False}


class TestLegacyNullOrdering:
    """The legacy ordering ties NULL with empty bytes."""

    def setup_method(self):
        self.comparator = ResultSetComparator(null_ordering="legacy")

    def test_plain_permutations_still_equal(self):
        left = make(["a"], [(b"2",), (None,), (b"1",)])
        right = make(["a"], [(None,), (b"1",), (b"2",)])

        assert self.comparator.compare(left, right).equal

    def test_null_and_empty_tie_depends_on_input_order(self):
        left = make(["a"], [(None,), (b"",)])
        right = make(["a"], [(b"",), (None,)])

        # stable sort keeps the tied rows in input order
        assert not self.comparator.compare(left, right).equal
