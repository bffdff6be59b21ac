"""
Rich progress monitoring.
Single responsibility: rich terminal UI for a comparison run.
"""

from datetime import datetime
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from ..utils.logger import get_logger


logger = get_logger()

STATUS_STYLES = {"pass": "green", "fail": "red", "error": "yellow"}


class RichProgressMonitor:
    """
    Progress bar plus result table using Rich.
    """

    def __init__(self, verbose: bool = True, console: Optional[Console] = None):
        """
        Initialize Rich progress monitor.

        Args:
            verbose: Print passing queries as well as failures
            console: Console to draw on (a new one by default)
        """
        self.verbose = verbose
        self.console = console or Console()
        self.progress = None
        self.task_id = None
        self.start_time = None

    def start(self, title: str, total: int):
        """
        Show a header and start the progress bar.

        Args:
            title: Run title
            total: Number of queries
        """
        self.start_time = datetime.now()

        self.console.print(Panel(
            Text(title, justify="center", style="bold cyan"),
            box=box.DOUBLE,
            style="cyan"
        ))

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console
        )
        self.progress.start()
        self.task_id = self.progress.add_task("Comparing queries", total=total)

        logger.debug("rich_progress.started", total=total)

    def advance(self, outcome: Any):
        """Record one finished query."""
        if self.progress is not None:
            self.progress.update(self.task_id, advance=1)

        if self.verbose or outcome.status != "pass":
            style = STATUS_STYLES.get(outcome.status, "white")
            line = Text(f"{outcome.status.upper():5} query {outcome.index}", style=style)
            if outcome.reason:
                line.append(f"  {outcome.reason}", style="dim")
            self.console.print(line)

    def show_summary(self, report: Any):
        """
        Display per-query results in a table.

        Args:
            report: Pipeline report
        """
        self.stop()

        table = Table(title=f"Push-down comparison: {report.database}", box=box.ROUNDED)
        table.add_column("Query", style="cyan", no_wrap=True)
        table.add_column("Status")
        table.add_column("Rows", style="blue", justify="right")
        table.add_column("Detail", style="dim")

        for outcome in report.outcomes:
            table.add_row(
                str(outcome.index),
                Text(outcome.status.upper(),
                     style=STATUS_STYLES.get(outcome.status, "white")),
                f"{outcome.row_count:,}" if outcome.row_count is not None else "—",
                outcome.reason or "—"
            )

        self.console.print()
        self.console.print(table)

        elapsed = ""
        if self.start_time:
            elapsed = f" in {(datetime.now() - self.start_time).total_seconds():.1f} seconds"
        style = "bold green" if report.success else "bold red"
        self.console.print(Panel(
            Text(f"{report.passed} passed, {report.failed} failed, "
                 f"{report.errors} errors{elapsed}",
                 justify="center", style=style),
            box=box.DOUBLE,
            style=style
        ))

    def log_error(self, message: str):
        """Display error message."""
        self.console.print(Text(f"✗ {message}", style="bold red"))

    def stop(self):
        """Stop the progress bar."""
        if self.progress:
            self.progress.stop()
            self.progress = None
