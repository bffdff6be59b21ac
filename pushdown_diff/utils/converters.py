"""
Driver value conversion utilities.
Single responsibility: turn driver-specific values into raw cell bytes.
"""

from datetime import datetime
from typing import Any, Optional


def to_cell(val: Any) -> Optional[bytes]:
    """
    Convert a driver value to a nullable byte cell.

    Only ``None`` becomes NULL. Text is UTF-8 encoded, so the word
    ``"NULL"`` and the empty string stay ordinary values.

    Args:
        val: Value returned by a database driver

    Returns:
        Raw bytes, or None for a true NULL

    Examples:
        >>> to_cell(42)
        b'42'
        >>> to_cell(True)
        b'1'
        >>> to_cell(None) is None
        True
    """
    if val is None:
        return None

    if isinstance(val, bytes):
        return val

    if isinstance(val, (bytearray, memoryview)):
        return bytes(val)

    # bool before int: MySQL-style wire text
    if isinstance(val, bool):
        return b"1" if val else b"0"

    if isinstance(val, str):
        return val.encode("utf-8")

    if isinstance(val, float):
        return repr(val).encode("utf-8")

    if isinstance(val, datetime):
        return val.isoformat(sep=" ").encode("utf-8")

    return str(val).encode("utf-8")


def cell_to_text(cell: Optional[bytes], null_text: str = "NULL") -> str:
    """
    Decode a cell for display.

    Args:
        cell: Cell bytes or None
        null_text: Text used for a true NULL

    Returns:
        Display text; undecodable bytes are replaced
    """
    if cell is None:
        return null_text
    return cell.decode("utf-8", errors="replace")
