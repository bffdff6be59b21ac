"""
Canonical result set model and row normalization.
Single responsibility: turn a backend's tabular result into ResultSet.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..utils.converters import to_cell
from ..utils.logger import get_logger
from .errors import ScanError, ShapeError


logger = get_logger()

Cell = Optional[bytes]
Row = Tuple[Cell, ...]

DEFAULT_BATCH_SIZE = 1024


@dataclass
class ResultSet:
    """Ordered column names plus rows of nullable byte cells."""

    columns: List[str]
    rows: List[Row] = field(default_factory=list)

    @classmethod
    def build(cls, columns: Sequence[str],
              rows: Sequence[Sequence[Cell]]) -> "ResultSet":
        """
        Build a result set, validating every row width.

        Raises:
            ShapeError: If any row has the wrong number of cells
        """
        result = cls(list(columns), [tuple(r) for r in rows])
        result.check_shape()
        return result

    def check_shape(self) -> None:
        """Raise ShapeError unless every row has one cell per column."""
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ShapeError(
                    f"row {index} has {len(row)} cells, expected {width} "
                    f"(columns {self.columns})"
                )

    def __len__(self) -> int:
        return len(self.rows)


def rows_from_cursor(cursor: Any, columns: Sequence[str],
                     batch_size: int = DEFAULT_BATCH_SIZE) -> ResultSet:
    """
    Drain a DB-API cursor into a ResultSet.

    The cursor must be positioned before its first row. Each row keeps
    exactly ``len(columns)`` values. Width is not re-checked per row.

    Args:
        cursor: Open DB-API 2 cursor
        columns: Column names from the cursor metadata
        batch_size: Rows requested per fetchmany call

    Returns:
        Normalized result set

    Raises:
        ScanError: If fetching or converting any row fails
    """
    width = len(columns)
    rows: List[Row] = []

    try:
        while True:
            batch = cursor.fetchmany(batch_size)
            if not batch:
                break
            for raw in batch:
                rows.append(tuple(to_cell(v) for v in raw[:width]))
    except Exception as e:
        logger.error("normalizer.scan.failed",
                     rows_read=len(rows),
                     error=str(e))
        raise ScanError(f"[SCAN ERROR] Failed to read row {len(rows)}: {e}") from e

    logger.debug("normalizer.scan.complete",
                 columns=width,
                 rows=len(rows))

    return ResultSet(list(columns), rows)


def rows_from_frame(df: pd.DataFrame) -> ResultSet:
    """
    Normalize a pandas DataFrame (e.g. DuckDB ``.df()``) into a ResultSet.

    NaN, NaT, pd.NA and None all become true NULL.

    Args:
        df: DataFrame with one column per result column

    Returns:
        Normalized result set
    """
    columns = [str(c) for c in df.columns]
    rows: List[Row] = []

    for raw in df.itertuples(index=False, name=None):
        rows.append(tuple(None if _is_missing(v) else to_cell(_unwrap(v))
                          for v in raw))

    logger.debug("normalizer.frame.complete",
                 columns=len(columns),
                 rows=len(rows))

    return ResultSet.build(columns, rows)


def _is_missing(value: Any) -> bool:
    # pd.isna is elementwise on list-like values
    if isinstance(value, (list, tuple, dict, set, bytes, bytearray, np.ndarray)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _unwrap(value: Any) -> Any:
    # LIST columns arrive as arrays; item() would flatten a single element
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    # numpy scalars
    if hasattr(value, "item") and not isinstance(value, (bytes, str)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value
