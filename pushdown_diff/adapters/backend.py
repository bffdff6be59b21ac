"""
Database backend adapter.
Single responsibility: open a named database and run queries on it.
"""

from contextlib import closing
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

import duckdb

from ..core.errors import BackendError, QueryError
from ..core.replica import qliteral
from ..core.result_set import DEFAULT_BATCH_SIZE, ResultSet, rows_from_cursor
from ..utils.logger import get_logger


logger = get_logger()

DB_PLACEHOLDER = "{db}"

__all__ = ["Backend", "qliteral", "read_sql_file", "split_statements"]

QUOTES = ("'", '"', "`")


def split_statements(sql: str) -> List[str]:
    """
    Split SQL text on ';' and drop blank statements.

    A ';' inside a quoted string, a quoted identifier, a ``--`` line
    comment or a ``/* */`` block comment does not end a statement.
    Doubled quotes (``'it''s'``) stay inside the literal.

    Args:
        sql: Text holding one or more statements

    Returns:
        Statements without trailing semicolons

    Examples:
        >>> split_statements("SELECT 'a;b' AS s; SELECT 2")
        ["SELECT 'a;b' AS s", 'SELECT 2']
    """
    statements = []
    start = 0
    i = 0
    n = len(sql)

    while i < n:
        ch = sql[i]
        if ch in QUOTES:
            end = sql.find(ch, i + 1)
            # unterminated quote runs to the end of the text
            i = n if end == -1 else end + 1
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end == -1 else end + 1
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif ch == ";":
            statements.append(sql[start:i])
            i += 1
            start = i
        else:
            i += 1

    statements.append(sql[start:])
    return [s.strip() for s in statements if s.strip()]


def read_sql_file(path: Path) -> List[str]:
    """
    Read a SQL file into individual statements.

    Args:
        path: SQL file path

    Returns:
        Statements without trailing semicolons

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"SQL file not found: {path}")
    return split_statements(path.read_text(encoding="utf-8"))


class Backend:
    """
    One query-execution backend bound to a named database.
    """

    def __init__(self, name: str, connection_pattern: str, database: str,
                 session_sql: Optional[Sequence[str]] = None,
                 connect: Callable[[str], Any] = duckdb.connect,
                 batch_size: int = DEFAULT_BATCH_SIZE):
        """
        Initialize backend.

        Args:
            name: Label used in logs and reports
            connection_pattern: Connection string, ``{db}`` is replaced
            database: Database name substituted into the pattern
            session_sql: Statements run right after connecting
            connect: DB-API connection factory (DuckDB by default)
            batch_size: Rows fetched per batch during normalization
        """
        self.name = name
        self.connection_pattern = connection_pattern
        self.database = database
        self.session_sql = list(session_sql or [])
        self.connect = connect
        self.batch_size = batch_size
        self.con = None

    @property
    def connection_string(self) -> str:
        return self.connection_pattern.replace(DB_PLACEHOLDER, self.database)

    def open(self) -> "Backend":
        """
        Connect and run session statements.

        Raises:
            BackendError: If connecting or session setup fails
        """
        if self.con is not None:
            return self

        target = self.connection_string
        try:
            self.con = self.connect(target)
        except Exception as e:
            logger.error("backend.open.failed",
                         backend=self.name,
                         target=target,
                         error=str(e))
            raise BackendError(
                f"[BACKEND ERROR] Failed to open {self.name} [{target}]: {e}"
            ) from e

        logger.info("backend.opened", backend=self.name, target=target)

        try:
            self.run_session_statements()
        except BackendError:
            self.close()
            raise
        return self

    def close(self) -> None:
        """Close the connection if open."""
        if self.con is None:
            return
        con, self.con = self.con, None
        try:
            con.close()
        except Exception as e:
            raise BackendError(
                f"[BACKEND ERROR] Failed to close {self.name}: {e}"
            ) from e
        logger.debug("backend.closed", backend=self.name)

    def __enter__(self) -> "Backend":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def run_session_statements(self) -> None:
        for statement in self.session_sql:
            self.execute(statement)

    def execute(self, sql: str) -> None:
        """
        Execute a statement and discard any result.

        Raises:
            BackendError: If execution fails
        """
        cursor = self._cursor()
        with closing(cursor):
            try:
                cursor.execute(sql)
            except Exception as e:
                logger.error("backend.execute.failed",
                             backend=self.name,
                             sql=sql,
                             error=str(e))
                raise BackendError(
                    f"[BACKEND ERROR] Failed to execute query [{sql}] on {self.name}: {e}"
                ) from e

    def query(self, sql: str) -> Tuple[Any, List[str]]:
        """
        Run a query; the caller owns (and must close) the returned cursor.

        Returns:
            (cursor, column names)

        Raises:
            QueryError: If execution fails
        """
        cursor = self._cursor()
        try:
            cursor.execute(sql)
            columns = [d[0] for d in (cursor.description or [])]
        except Exception as e:
            cursor.close()
            logger.error("backend.query.failed",
                         backend=self.name,
                         sql=sql,
                         error=str(e))
            raise QueryError(
                f"[QUERY ERROR] Query failed on {self.name} [{sql}]: {e}"
            ) from e
        return cursor, columns

    def fetch_result(self, sql: str) -> ResultSet:
        """
        Run a query and normalize its full result.

        Raises:
            QueryError: If execution fails
            ScanError: If reading rows fails
        """
        cursor, columns = self.query(sql)
        with closing(cursor):
            return rows_from_cursor(cursor, columns, batch_size=self.batch_size)

    def _cursor(self):
        if self.con is None:
            raise BackendError(
                f"[BACKEND ERROR] Backend {self.name} is not open. "
                f"Suggestion: call open() or use it as a context manager."
            )
        return self.con.cursor()
