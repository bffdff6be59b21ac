"""
Push-down comparison pipeline.
Single responsibility: run every query on both backends and compare results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional

import duckdb

from ..adapters.backend import Backend, read_sql_file
from ..config.manager import BackendConfig, HarnessConfig
from ..core.comparator import ResultSetComparator
from ..core.errors import BackendError, QueryError, ScanError
from ..core.renderer import render_mismatch
from ..core.replica import ReplicaReadinessPoller
from ..utils.logger import get_logger


logger = get_logger()

PASS = "pass"
FAIL = "fail"
ERROR = "error"


@dataclass
class QueryOutcome:
    """Result of one query compared across both backends."""

    index: int
    sql: str
    status: str
    row_count: Optional[int] = None
    reason: str = ""
    diagnostic: str = ""


@dataclass
class PipelineReport:
    """All query outcomes of a run."""

    database: str
    outcomes: List[QueryOutcome] = field(default_factory=list)
    replicas_ready: List[str] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def passed(self) -> int:
        return self._count(PASS)

    @property
    def failed(self) -> int:
        return self._count(FAIL)

    @property
    def errors(self) -> int:
        return self._count(ERROR)

    @property
    def success(self) -> bool:
        return self.passed == len(self.outcomes)


class PushDownPipeline:
    """
    Main pipeline orchestrator.
    """

    def __init__(self, config: HarnessConfig, base_dir: Optional[Path] = None,
                 progress: Any = None,
                 connect: Callable[[str], Any] = duckdb.connect,
                 poller_factory: Callable[..., ReplicaReadinessPoller] = ReplicaReadinessPoller):
        """
        Initialize pipeline.

        Args:
            config: Harness configuration
            base_dir: Directory relative paths in the config resolve against
            progress: Progress monitor (optional)
            connect: DB-API connection factory for both backends
            poller_factory: Builds the replica poller
        """
        self.config = config
        self.base_dir = Path(base_dir or ".")
        self.progress = progress
        self.comparator = ResultSetComparator(config.null_ordering)
        self.poller_factory = poller_factory
        self.row = self._make_backend(config.row_backend, connect)
        self.pushdown = self._make_backend(config.pushdown_backend, connect)

    def _make_backend(self, cfg: BackendConfig, connect) -> Backend:
        return Backend(cfg.name, cfg.connection, self.config.database,
                       session_sql=cfg.session_sql,
                       connect=connect,
                       batch_size=self.config.batch_size)

    def _path(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.base_dir / p

    def run(self) -> PipelineReport:
        """
        Run the complete pipeline.

        Returns:
            Report with one outcome per query

        Raises:
            PushDownError: Setup or replica wait failed
            FileNotFoundError: A SQL file is missing
        """
        report = PipelineReport(database=self.config.database)
        queries = read_sql_file(self._path(self.config.queries))

        logger.info("pipeline.starting",
                    database=self.config.database,
                    queries=len(queries))

        try:
            self.row.open()
            self.pushdown.open()

            self.prepare()
            report.replicas_ready = self.wait_replicas()

            if self.progress:
                self.progress.start(f"Push-down diff: {self.config.database}", len(queries))

            for index, sql in enumerate(queries, 1):
                outcome = self.run_query(index, sql)
                report.outcomes.append(outcome)
                if self.progress:
                    self.progress.advance(outcome)
        except BaseException:
            self._close_backends(propagating=True)
            raise

        self._close_backends(propagating=False)

        logger.info("pipeline.completed",
                    passed=report.passed,
                    failed=report.failed,
                    errors=report.errors)

        if self.progress:
            self.progress.show_summary(report)

        return report

    def _close_backends(self, propagating: bool) -> None:
        """
        Close both backends.

        While another exception is propagating, close failures are only
        logged so the original error reaches the caller. Otherwise the
        first close failure is raised after both closes were attempted.
        """
        first_error = None
        for backend in (self.pushdown, self.row):
            try:
                backend.close()
            except BackendError as e:
                logger.error("pipeline.close.failed",
                             backend=backend.name,
                             error=str(e))
                if first_error is None:
                    first_error = e

        if first_error is not None and not propagating:
            raise first_error

    def prepare(self) -> int:
        """Run setup statements on the row backend; returns how many ran."""
        if not self.config.setup_sql:
            return 0

        statements = read_sql_file(self._path(self.config.setup_sql))
        for statement in statements:
            self.row.execute(statement)

        logger.info("pipeline.prepared", statements=len(statements))
        return len(statements)

    def wait_replicas(self) -> List[str]:
        """Block until every configured replica table is available."""
        if not self.config.replica_tables:
            return []

        poller = self.poller_factory(
            self.row.query,
            self.config.database,
            timeout=self.config.replica_timeout,
            interval=self.config.poll_interval
        )
        return poller.wait_all(self.config.replica_tables)

    def run_query(self, index: int, sql: str) -> QueryOutcome:
        """
        Run one query on both backends and compare.

        Query and scan errors become an ``error`` outcome; the run goes on.
        """
        try:
            left = self.row.fetch_result(sql)
            right = self.pushdown.fetch_result(sql)
        except (QueryError, ScanError) as e:
            logger.error("pipeline.query.error", index=index, error=str(e))
            return QueryOutcome(index, sql, ERROR, reason=str(e))

        result = self.comparator.compare(left, right)
        if result.equal:
            return QueryOutcome(index, sql, PASS, row_count=result.left_rows)

        diagnostic = render_mismatch(left, right, result.error,
                                     left_label=self.row.name,
                                     right_label=self.pushdown.name)
        logger.warning("pipeline.query.mismatch",
                       index=index,
                       reason=result.reason)
        return QueryOutcome(index, sql, FAIL,
                            row_count=result.left_rows,
                            reason=result.reason,
                            diagnostic=diagnostic)


def write_report(report: PipelineReport, output_dir: Path) -> Path:
    """
    Write summary.txt plus one queryNNN.diff per failing query.

    Args:
        report: Pipeline report
        output_dir: Directory to create

    Returns:
        The output directory
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    lines = [
        f"database: {report.database}",
        f"generated: {datetime.now().isoformat(timespec='seconds')}",
        f"passed: {report.passed}",
        f"failed: {report.failed}",
        f"errors: {report.errors}",
        ""
    ]
    for outcome in report.outcomes:
        lines.append(f"{outcome.index}\t{outcome.status}\t{outcome.reason}")
        if outcome.status != PASS:
            diff_path = output_dir / f"query{outcome.index:03d}.diff"
            diff_path.write_text(
                f"{outcome.sql}\n\n{outcome.diagnostic or outcome.reason}\n",
                encoding="utf-8"
            )

    (output_dir / "summary.txt").write_text("\n".join(lines) + "\n", encoding="utf-8")

    logger.info("pipeline.report.written", dir=str(output_dir))
    return output_dir
