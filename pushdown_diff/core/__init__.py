"""Result normalization, comparison, rendering and replica polling."""

from .errors import (
    PushDownError,
    ScanError,
    BackendError,
    QueryError,
    ComparisonError,
    ColumnMismatch,
    RowCountMismatch,
    CellMismatch,
    ReplicaError,
    UnexpectedRowCount,
    UnexpectedColumnCount,
    PollTimeout,
    ShapeError,
)
from .result_set import ResultSet, rows_from_cursor, rows_from_frame
from .comparator import ResultSetComparator, ComparisonResult, sort_rows, row_sort_key
from .renderer import write_query_result, render, render_mismatch
from .replica import ReplicaReadinessPoller, PollState

__all__ = [
    "PushDownError",
    "ScanError",
    "BackendError",
    "QueryError",
    "ComparisonError",
    "ColumnMismatch",
    "RowCountMismatch",
    "CellMismatch",
    "ReplicaError",
    "UnexpectedRowCount",
    "UnexpectedColumnCount",
    "PollTimeout",
    "ShapeError",
    "ResultSet",
    "rows_from_cursor",
    "rows_from_frame",
    "ResultSetComparator",
    "ComparisonResult",
    "sort_rows",
    "row_sort_key",
    "write_query_result",
    "render",
    "render_mismatch",
    "ReplicaReadinessPoller",
    "PollState",
]
