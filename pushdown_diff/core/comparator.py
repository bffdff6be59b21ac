"""
Core result set comparison logic.
Single responsibility: decide whether two result sets hold the same rows.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ..utils.logger import get_logger
from .errors import (
    CellMismatch,
    ColumnMismatch,
    ComparisonError,
    RowCountMismatch,
)
from .result_set import ResultSet, Row


logger = get_logger()

NULL_FIRST = "first"
NULL_LEGACY = "legacy"
NULL_ORDERINGS = (NULL_FIRST, NULL_LEGACY)


def _legacy_key(row: Row) -> Tuple[bytes, ...]:
    # NULL compares as empty bytes, so NULL and b"" tie
    return tuple(b"" if cell is None else cell for cell in row)


def _null_first_key(row: Row) -> Tuple[Tuple[bool, bytes], ...]:
    return tuple((False, b"") if cell is None else (True, cell) for cell in row)


_SORT_KEYS: Dict[str, Callable[[Row], tuple]] = {
    NULL_FIRST: _null_first_key,
    NULL_LEGACY: _legacy_key,
}


def row_sort_key(row: Row, null_ordering: str = NULL_FIRST) -> tuple:
    """
    Total-order key for a row: byte-wise lexicographic, column by column.

    Args:
        row: Row of nullable byte cells
        null_ordering: "first" sorts NULL before every value,
            "legacy" treats NULL as the empty byte string

    Returns:
        Sortable key
    """
    return _key_func(null_ordering)(row)


def sort_rows(result_set: ResultSet, null_ordering: str = NULL_FIRST) -> ResultSet:
    """Sort a result set's rows in place and return it."""
    result_set.rows.sort(key=_key_func(null_ordering))
    return result_set


def _key_func(null_ordering: str) -> Callable[[Row], tuple]:
    if null_ordering not in _SORT_KEYS:
        raise ValueError(
            f"Unknown null ordering '{null_ordering}', "
            f"expected one of {NULL_ORDERINGS}"
        )
    return _SORT_KEYS[null_ordering]


@dataclass
class ComparisonResult:
    """Outcome of comparing two result sets."""

    equal: bool
    columns: List[str] = field(default_factory=list)
    left_rows: int = 0
    right_rows: int = 0
    error: Optional[ComparisonError] = None

    @property
    def reason(self) -> str:
        return str(self.error) if self.error else ""


class ResultSetComparator:
    """
    Order-independent, byte-exact comparison of two result sets.
    """

    def __init__(self, null_ordering: str = NULL_FIRST):
        """
        Initialize comparator.

        Args:
            null_ordering: Sort treatment of NULL cells ("first" or "legacy")
        """
        self._key = _key_func(null_ordering)
        self.null_ordering = null_ordering

    def assert_equal(self, left: ResultSet, right: ResultSet) -> None:
        """
        Check two result sets for equality, sorting both in place.

        Args:
            left: Result from the row backend
            right: Result from the push-down backend

        Raises:
            ColumnMismatch: Column names or order differ (rows not inspected)
            RowCountMismatch: Row counts differ (rows not inspected)
            CellMismatch: First differing cell after canonical sorting
        """
        if list(left.columns) != list(right.columns):
            raise ColumnMismatch(left.columns, right.columns)

        if len(left.rows) != len(right.rows):
            raise RowCountMismatch(len(left.rows), len(right.rows))

        left.check_shape()
        right.check_shape()

        left.rows.sort(key=self._key)
        right.rows.sort(key=self._key)

        for index, (l_row, r_row) in enumerate(zip(left.rows, right.rows)):
            if l_row == r_row:
                continue
            for column, l_cell, r_cell in zip(left.columns, l_row, r_row):
                # None == None, bytes == bytes; None never equals bytes
                if l_cell != r_cell:
                    raise CellMismatch(index, column, l_cell, r_cell)

    def compare(self, left: ResultSet, right: ResultSet) -> ComparisonResult:
        """
        Compare two result sets without raising on semantic mismatches.

        Returns:
            ComparisonResult with the verdict and, if unequal, the error
        """
        result = ComparisonResult(
            equal=True,
            columns=list(left.columns),
            left_rows=len(left.rows),
            right_rows=len(right.rows)
        )

        try:
            self.assert_equal(left, right)
        except ComparisonError as e:
            result.equal = False
            result.error = e
            logger.warning("comparator.mismatch",
                           kind=type(e).__name__,
                           detail=str(e))
        else:
            logger.debug("comparator.equal",
                         columns=len(left.columns),
                         rows=len(left.rows))

        return result
