"""
Replica readiness polling.
Single responsibility: block until a table's analytical replica is available.
"""

import time
from contextlib import closing
from enum import Enum
from typing import Any, Callable, Iterable, List, Sequence, Tuple

from ..utils.logger import get_logger
from .errors import (
    PollTimeout,
    QueryError,
    ReplicaError,
    UnexpectedColumnCount,
    UnexpectedRowCount,
)
from .result_set import rows_from_cursor


logger = get_logger()

DEFAULT_TIMEOUT = 300.0

REPLICA_AVAILABLE_SQL = (
    "select available from information_schema.tiflash_replica "
    "where table_schema = {database} and table_name = {table}"
)

QueryFunc = Callable[[str], Tuple[Any, Sequence[str]]]


def qliteral(value: str) -> str:
    """Quote a value as a SQL string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class PollState(Enum):
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ReplicaReadinessPoller:
    """
    Poll replica availability metadata until ready, failed, or timed out.

    The loop has no backoff; ``interval`` is the pause between polls and
    defaults to a tight loop. Clock and sleep are injectable.
    """

    def __init__(self, query: QueryFunc, database: str,
                 timeout: float = DEFAULT_TIMEOUT,
                 interval: float = 0.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize poller.

        Args:
            query: Query capability returning (cursor, column names)
            database: Schema that owns the polled tables
            timeout: Seconds before giving up
            interval: Seconds to sleep between polls
            clock: Monotonic clock in seconds
            sleep: Sleep function
        """
        if not database:
            raise ValueError("Database name is required")
        if timeout < 0 or interval < 0:
            raise ValueError("timeout and interval must be non-negative")

        self.query = query
        self.database = database
        self.timeout = timeout
        self.interval = interval
        self.clock = clock
        self.sleep = sleep
        self.state = PollState.POLLING
        self.attempts = 0

    def availability_sql(self, table: str) -> str:
        return REPLICA_AVAILABLE_SQL.format(database=qliteral(self.database),
                                            table=qliteral(table))

    def wait(self, table: str) -> None:
        """
        Block until the replica of ``table`` reports available.

        Args:
            table: Table name

        Raises:
            PollTimeout: Elapsed time exceeded the timeout
            UnexpectedRowCount: Metadata query returned 0 or 2+ rows
            UnexpectedColumnCount: Metadata query returned other than 1 column
            QueryError: Metadata query failed (no retry)
        """
        sql = self.availability_sql(table)
        self.state = PollState.POLLING
        self.attempts = 0
        start = self.clock()

        logger.info("replica.poll.waiting",
                    database=self.database,
                    table=table,
                    timeout=self.timeout)

        while self.state is PollState.POLLING:
            if self.clock() - start > self.timeout:
                self.state = PollState.FAILED
                logger.error("replica.poll.timeout",
                             database=self.database,
                             table=table,
                             attempts=self.attempts)
                raise PollTimeout(self.database, table, self.timeout)

            self.attempts += 1
            try:
                available = self._poll_once(sql, table)
            except (QueryError, ReplicaError) as e:
                self.state = PollState.FAILED
                logger.error("replica.poll.failed",
                             database=self.database,
                             table=table,
                             error=str(e))
                raise

            if available:
                self.state = PollState.SUCCEEDED
            elif self.interval:
                self.sleep(self.interval)

        logger.info("replica.poll.available",
                    database=self.database,
                    table=table,
                    attempts=self.attempts,
                    elapsed=round(self.clock() - start, 3))

    def wait_all(self, tables: Iterable[str]) -> List[str]:
        """Wait for each table in turn; returns the tables waited on."""
        done = []
        for table in tables:
            self.wait(table)
            done.append(table)
        return done

    def _poll_once(self, sql: str, table: str) -> bool:
        try:
            cursor, columns = self.query(sql)
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"[QUERY ERROR] Replica metadata query failed: {e}") from e

        with closing(cursor):
            try:
                result = rows_from_cursor(cursor, columns)
            except Exception as e:
                raise QueryError(
                    f"[QUERY ERROR] Reading replica metadata failed: {e}"
                ) from e

        if len(columns) != 1:
            raise UnexpectedColumnCount(self.database, table, list(columns))

        if len(result) != 1:
            raise UnexpectedRowCount(self.database, table, len(result))

        row = result.rows[0]
        return len(row) == 1 and row[0] == b"1"
