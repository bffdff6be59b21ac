"""
Structured logging utility.
Single responsibility: provide consistent logging across the harness.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import json


LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40, "CRITICAL": 50}


class StructuredLogger:
    """
    Structured logger for consistent application logging.

    Events are dotted names (``replica.poll.waiting``) with keyword context.
    Console output is human readable, file output is JSON lines.
    """

    def __init__(self, name: str = "pushdown-diff",
                 log_file: Optional[Path] = None,
                 level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name
            log_file: Optional file path for JSON-lines logging
            level: Minimum level written to the console
        """
        self.name = name
        self.log_file = log_file
        self.level = level

    def set_level(self, level: str):
        """Change the minimum console level."""
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.level = level

    def set_log_file(self, log_file: Optional[Path]):
        """Start (or stop, with None) mirroring entries to a file."""
        self.log_file = Path(log_file) if log_file else None

    def _format_message(self, level: str, message: str,
                        **kwargs) -> Dict[str, Any]:
        """
        Format log message with metadata.

        Args:
            level: Log level (INFO, DEBUG, ERROR, etc.)
            message: Log message
            **kwargs: Additional context fields

        Returns:
            Formatted log entry
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "logger": self.name,
            "message": message
        }

        if kwargs:
            entry["context"] = kwargs

        return entry

    def _output(self, entry: Dict[str, Any]):
        """
        Output log entry to console and optionally file.

        Args:
            entry: Log entry dictionary
        """
        level = entry["level"]

        if LEVELS[level] >= LEVELS[self.level]:
            timestamp = entry["timestamp"].split("T")[1][:8]
            print(f"[{timestamp}] {level:5} | {entry['message']}", file=sys.stderr)

            if "context" in entry:
                for key, value in entry["context"].items():
                    print(f"  {key}={value}", file=sys.stderr)

        # File gets every level
        if self.log_file:
            with open(self.log_file, "a") as f:
                f.write(json.dumps(entry, default=str) + "\n")

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._output(self._format_message("INFO", message, **kwargs))

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._output(self._format_message("DEBUG", message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._output(self._format_message("WARN", message, **kwargs))

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._output(self._format_message("ERROR", message, **kwargs))

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._output(self._format_message("CRITICAL", message, **kwargs))


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "pushdown-diff") -> StructuredLogger:
    """
    Get or create logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = StructuredLogger(name)
    return _logger
