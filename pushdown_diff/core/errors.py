"""
Exception hierarchy for the push-down comparison harness.
"""

from typing import List, Optional


class PushDownError(Exception):
    """Base class for every recoverable harness failure."""
    pass


class ScanError(PushDownError):
    """Reading a row from a cursor failed during normalization."""
    pass


class BackendError(PushDownError):
    """Opening, executing on, or closing a backend failed."""
    pass


class QueryError(BackendError):
    """A query could not be executed or its result could not be read."""
    pass


class ComparisonError(PushDownError):
    """Two result sets are not equal."""
    pass


class ColumnMismatch(ComparisonError):
    """Column name lists differ in names or order."""

    def __init__(self, left_columns: List[str], right_columns: List[str]):
        self.left_columns = list(left_columns)
        self.right_columns = list(right_columns)
        super().__init__(
            f"[COLUMN MISMATCH] left columns {self.left_columns} != "
            f"right columns {self.right_columns}. "
            f"Suggestion: Check that both backends ran the same query."
        )


class RowCountMismatch(ComparisonError):
    """Result sets have different row counts."""

    def __init__(self, left_rows: int, right_rows: int):
        self.left_rows = left_rows
        self.right_rows = right_rows
        super().__init__(
            f"[ROW COUNT MISMATCH] left has {left_rows} rows, "
            f"right has {right_rows} rows."
        )


class CellMismatch(ComparisonError):
    """A cell differs at a row/column position after canonical sorting."""

    def __init__(self, row_index: int, column: str,
                 left_value: Optional[bytes], right_value: Optional[bytes]):
        self.row_index = row_index
        self.column = column
        self.left_value = left_value
        self.right_value = right_value
        super().__init__(
            f"[CELL MISMATCH] row {row_index}, column '{column}': "
            f"left={_show(left_value)} right={_show(right_value)}"
        )


class ReplicaError(PushDownError):
    """Base class for replica readiness polling failures."""

    def __init__(self, message: str, database: str, table: str):
        self.database = database
        self.table = table
        super().__init__(message)


class UnexpectedRowCount(ReplicaError):
    """The availability metadata query did not return exactly one row."""

    def __init__(self, database: str, table: str, row_count: int):
        self.row_count = row_count
        super().__init__(
            f"[REPLICA ERROR] Invalid replica metadata for {database}.{table}: "
            f"expected 1 row, got {row_count}. "
            f"Suggestion: Verify the table exists and has a replica configured.",
            database, table
        )


class UnexpectedColumnCount(ReplicaError):
    """The availability metadata query did not return exactly one column."""

    def __init__(self, database: str, table: str, columns: List[str]):
        self.columns = list(columns)
        super().__init__(
            f"[REPLICA ERROR] Invalid replica metadata for {database}.{table}: "
            f"expected 1 column, got {len(self.columns)} {self.columns}. "
            f"Suggestion: Check the availability query selects only one column.",
            database, table
        )


class PollTimeout(ReplicaError):
    """The replica did not become available before the timeout."""

    def __init__(self, database: str, table: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"[REPLICA TIMEOUT] Waited for replica {database}.{table} "
            f"longer than {timeout:g}s",
            database, table
        )


class ShapeError(AssertionError):
    """
    A row's width differs from the column count.

    Signals a normalization bug, not a data issue. Deliberately not a
    PushDownError so that harness error handling never swallows it.
    """
    pass


def _show(value: Optional[bytes]) -> str:
    if value is None:
        return "NULL"
    return repr(value)
