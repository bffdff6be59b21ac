"""
Result set rendering.
Single responsibility: deterministic tab-separated text for diagnostics.
"""

import io
from typing import TextIO

from ..utils.converters import cell_to_text
from .errors import CellMismatch, ComparisonError
from .result_set import ResultSet


def write_query_result(result_set: ResultSet, target: TextIO) -> None:
    """
    Write a result set as tab-separated text into a caller buffer.

    Header line of column names, then one line per row in the current
    order. NULL renders as ``NULL``. Every line ends with one newline.

    Args:
        result_set: Result set to render
        target: Writable text buffer

    Raises:
        ShapeError: A row width differs from the column count
    """
    result_set.check_shape()

    target.write("\t".join(result_set.columns))
    target.write("\n")

    for row in result_set.rows:
        target.write("\t".join(cell_to_text(cell) for cell in row))
        target.write("\n")


def render(result_set: ResultSet) -> str:
    """Render a result set to a string."""
    buffer = io.StringIO()
    write_query_result(result_set, buffer)
    return buffer.getvalue()


def render_mismatch(left: ResultSet, right: ResultSet,
                    error: ComparisonError,
                    left_label: str = "left",
                    right_label: str = "right") -> str:
    """
    Build a diagnostic report for a failed comparison.

    Args:
        left: Left result set (already sorted if rows were compared)
        right: Right result set
        error: Comparison failure to describe
        left_label: Name shown for the left side
        right_label: Name shown for the right side

    Returns:
        Multi-section text report
    """
    buffer = io.StringIO()
    buffer.write(f"{type(error).__name__}: {error}\n")

    if isinstance(error, CellMismatch):
        buffer.write(f"first difference at row {error.row_index}, "
                     f"column {error.column}\n")

    for label, result_set in ((left_label, left), (right_label, right)):
        buffer.write(f"\n--- {label} ({len(result_set)} rows)\n")
        write_query_result(result_set, buffer)

    return buffer.getvalue()
