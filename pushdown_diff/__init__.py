"""
Push-Down Diff - result-set equivalence harness for row and columnar backends.
"""

__version__ = "1.0.0"

from .core import (
    ResultSet,
    ResultSetComparator,
    ComparisonResult,
    ReplicaReadinessPoller,
    rows_from_cursor,
    rows_from_frame,
    render,
    write_query_result,
)
from .adapters.backend import Backend
from .config.manager import ConfigManager, HarnessConfig, BackendConfig
from .pipeline.runner import PushDownPipeline, PipelineReport, write_report
from .ui.progress import get_progress_monitor
from .utils.logger import get_logger

__all__ = [
    "ResultSet",
    "ResultSetComparator",
    "ComparisonResult",
    "ReplicaReadinessPoller",
    "rows_from_cursor",
    "rows_from_frame",
    "render",
    "write_query_result",
    "Backend",
    "ConfigManager",
    "HarnessConfig",
    "BackendConfig",
    "PushDownPipeline",
    "PipelineReport",
    "write_report",
    "get_progress_monitor",
    "get_logger",
]
