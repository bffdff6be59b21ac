"""Backend adapters."""

from .backend import Backend, qliteral, read_sql_file, split_statements

__all__ = ["Backend", "qliteral", "read_sql_file", "split_statements"]
