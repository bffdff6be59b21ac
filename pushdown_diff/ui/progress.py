"""
Progress monitoring for plain console output.
Single responsibility: provide user feedback while queries are compared.
"""

import sys
import time
from typing import Any

from .rich_progress import RichProgressMonitor


class ProgressMonitor:
    """
    Simple progress monitoring for console output.
    """

    def __init__(self, verbose: bool = True, stream=None):
        """
        Initialize progress monitor.

        Args:
            verbose: Whether to show every query outcome
            stream: Output stream (stdout by default)
        """
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self.total = 0
        self.current = 0
        self.start_time = None

    def _print(self, message: str):
        print(message, file=self.stream)

    def start(self, title: str, total: int):
        """
        Start tracking a run.

        Args:
            title: Run title
            total: Number of queries
        """
        self.total = total
        self.current = 0
        self.start_time = time.time()
        self._print(f"\n[START] {title}")
        self._print(f"  Total queries: {total:,}")

    def advance(self, outcome: Any):
        """Record one finished query."""
        self.current += 1
        if self.verbose or outcome.status != "pass":
            self._print(f"  [{outcome.status.upper()}] query {outcome.index}"
                        f" ({self.current}/{self.total})"
                        + (f": {outcome.reason}" if outcome.reason else ""))

    def show_summary(self, report: Any):
        """Print pass/fail totals."""
        elapsed = time.time() - self.start_time if self.start_time else 0.0
        self._print(f"\n{'='*60}")
        self._print(f"Database: {report.database}")
        self._print(f"Passed: {report.passed:,}  Failed: {report.failed:,}"
                    f"  Errors: {report.errors:,}")
        self._print(f"Elapsed: {elapsed:.1f}s")
        self._print(f"{'='*60}\n")

    def log_error(self, message: str):
        self._print(f"❌ {message}")

    def stop(self):
        pass


def get_progress_monitor(use_rich: bool = True, verbose: bool = True) -> Any:
    """
    Get appropriate progress monitor.

    Args:
        use_rich: Whether to use Rich
        verbose: Whether to show passing queries too

    Returns:
        Progress monitor instance
    """
    if use_rich:
        return RichProgressMonitor(verbose=verbose)
    return ProgressMonitor(verbose=verbose)
