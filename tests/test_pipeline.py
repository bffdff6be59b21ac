"""
End-to-end tests for PushDownPipeline using in-memory DuckDB backends.
"""

import pytest
from pathlib import Path
from unittest.mock import Mock
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pushdown_diff.config.manager import BackendConfig, HarnessConfig
from pushdown_diff.core.errors import BackendError, PollTimeout
from pushdown_diff.pipeline.runner import PushDownPipeline, write_report


ROWS = "(1, 'a', 1.5), (2, NULL, 2.5), (3, 'NULL', NULL)"
SAME_ROWS_REORDERED = "(3, 'NULL', NULL), (1, 'a', 1.5), (2, NULL, 2.5)"
CHANGED_ROWS = "(1, 'a', 1.5), (2, 'NULL', 2.5), (3, 'NULL', NULL)"


def create_table(values):
    return (f"CREATE TABLE t AS SELECT * FROM (VALUES {values}) "
            f"v(id, name, score)")


class TestPushDownPipeline:

    def setup_method(self):
        """Set up test fixtures."""
        self.progress = Mock()

    def _config(self, tmp_path, queries, pushdown_rows=SAME_ROWS_REORDERED, **kwargs):
        (tmp_path / "queries.sql").write_text(queries)
        return HarnessConfig(
            database="test",
            backends={
                "row": BackendConfig("row", ":memory:", [create_table(ROWS)]),
                "pushdown": BackendConfig("pushdown", ":memory:", [create_table(pushdown_rows)]),
            },
            queries="queries.sql",
            **kwargs
        )

    def test_matching_backends_pass(self, tmp_path):
        config = self._config(tmp_path, "SELECT * FROM t;\nSELECT count(*) AS n FROM t;")
        pipeline = PushDownPipeline(config, base_dir=tmp_path, progress=self.progress)

        report = pipeline.run()

        assert report.success
        assert [o.status for o in report.outcomes] == ["pass", "pass"]
        assert report.outcomes[0].row_count == 3
        self.progress.start.assert_called_once()
        assert self.progress.advance.call_count == 2
        self.progress.show_summary.assert_called_once_with(report)
        assert pipeline.row.con is None
        assert pipeline.pushdown.con is None

    def test_null_versus_word_null_fails(self, tmp_path):
        config = self._config(tmp_path, "SELECT id, name FROM t", pushdown_rows=CHANGED_ROWS)

        report = PushDownPipeline(config, base_dir=tmp_path).run()

        outcome = report.outcomes[0]
        assert outcome.status == "fail"
        assert "CELL MISMATCH" in outcome.reason
        assert "column 'name'" in outcome.reason
        assert "--- row (3 rows)\nid\tname\n" in outcome.diagnostic
        assert not report.success

    def test_query_error_does_not_stop_run(self, tmp_path):
        config = self._config(tmp_path, "SELECT * FROM missing;\nSELECT id FROM t")

        report = PushDownPipeline(config, base_dir=tmp_path).run()

        assert [o.status for o in report.outcomes] == ["error", "pass"]
        assert report.errors == 1

    def test_setup_sql_runs_on_row_backend(self, tmp_path):
        (tmp_path / "setup.sql").write_text("CREATE TABLE extra (x INTEGER);\nINSERT INTO extra VALUES (1);")
        config = self._config(tmp_path, "SELECT id FROM t", setup_sql="setup.sql")
        pipeline = PushDownPipeline(config, base_dir=tmp_path)

        pipeline.row.open()
        try:
            assert pipeline.prepare() == 2
            assert pipeline.row.fetch_result("SELECT x FROM extra").rows == [(b"1",)]
        finally:
            pipeline.row.close()

    def test_waits_for_replicas_before_comparing(self, tmp_path):
        config = self._config(tmp_path, "SELECT id FROM t",
                              replica_tables=["t"], replica_timeout=5.0, poll_interval=0.1)
        poller = Mock()
        poller.wait_all.return_value = ["t"]
        factory = Mock(return_value=poller)

        pipeline = PushDownPipeline(config, base_dir=tmp_path, poller_factory=factory)
        report = pipeline.run()

        factory.assert_called_once_with(pipeline.row.query, "test", timeout=5.0, interval=0.1)
        poller.wait_all.assert_called_once_with(["t"])
        assert report.replicas_ready == ["t"]

    def test_replica_timeout_aborts_and_closes_backends(self, tmp_path):
        config = self._config(tmp_path, "SELECT id FROM t", replica_tables=["t"])
        poller = Mock()
        poller.wait_all.side_effect = PollTimeout("test", "t", 300.0)

        pipeline = PushDownPipeline(config, base_dir=tmp_path,
                                    poller_factory=Mock(return_value=poller))

        with pytest.raises(PollTimeout):
            pipeline.run()

        assert pipeline.row.con is None
        assert pipeline.pushdown.con is None

    def _failing_close_connect(self):
        con = Mock()
        con.close.side_effect = RuntimeError("socket already closed")
        return Mock(return_value=con), con

    def test_close_failure_does_not_mask_original_error(self, tmp_path):
        (tmp_path / "queries.sql").write_text("SELECT 1")
        config = HarnessConfig(
            database="test",
            backends={
                "row": BackendConfig("row", "x"),
                "pushdown": BackendConfig("pushdown", "y"),
            },
            queries="queries.sql",
            replica_tables=["t"]
        )
        connect, con = self._failing_close_connect()
        poller = Mock()
        poller.wait_all.side_effect = PollTimeout("test", "t", 300.0)

        pipeline = PushDownPipeline(config, base_dir=tmp_path, connect=connect,
                                    poller_factory=Mock(return_value=poller))

        with pytest.raises(PollTimeout):
            pipeline.run()

        assert con.close.call_count == 2
        assert pipeline.row.con is None
        assert pipeline.pushdown.con is None

    def test_close_failure_raised_after_clean_run(self, tmp_path):
        (tmp_path / "queries.sql").write_text("")
        config = HarnessConfig(
            database="test",
            backends={
                "row": BackendConfig("row", "x"),
                "pushdown": BackendConfig("pushdown", "y"),
            },
            queries="queries.sql"
        )
        connect, con = self._failing_close_connect()

        pipeline = PushDownPipeline(config, base_dir=tmp_path, connect=connect)

        with pytest.raises(BackendError, match="socket already closed"):
            pipeline.run()

        # both closes attempted even though the first failed
        assert con.close.call_count == 2

    def test_open_failure_is_backend_error(self, tmp_path):
        config = self._config(tmp_path, "SELECT 1")
        pipeline = PushDownPipeline(config, base_dir=tmp_path,
                                    connect=Mock(side_effect=OSError("refused")))

        with pytest.raises(BackendError):
            pipeline.run()


class TestWriteReport:

    def test_summary_and_diff_files(self, tmp_path):
        config = HarnessConfig(
            database="test",
            backends={
                "row": BackendConfig("row", ":memory:", [create_table(ROWS)]),
                "pushdown": BackendConfig("pushdown", ":memory:", [create_table(CHANGED_ROWS)]),
            },
            queries="queries.sql"
        )
        (tmp_path / "queries.sql").write_text("SELECT id FROM t;\nSELECT name FROM t;")
        report = PushDownPipeline(config, base_dir=tmp_path).run()

        out = write_report(report, tmp_path / "report")

        summary = (out / "summary.txt").read_text()
        assert "passed: 1" in summary
        assert "failed: 1" in summary
        assert not (out / "query001.diff").exists()
        diff = (out / "query002.diff").read_text()
        assert diff.startswith("SELECT name FROM t\n\nCellMismatch")
