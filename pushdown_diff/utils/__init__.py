"""Utility functions and helpers."""

from .logger import get_logger, StructuredLogger
from .converters import to_cell, cell_to_text

__all__ = [
    "get_logger",
    "StructuredLogger",
    "to_cell",
    "cell_to_text",
]
