"""User interface and progress monitoring."""

from .progress import ProgressMonitor, get_progress_monitor
from .rich_progress import RichProgressMonitor

__all__ = [
    "ProgressMonitor",
    "RichProgressMonitor",
    "get_progress_monitor",
]
