"""
Configuration management.
Single responsibility: load, validate, and manage harness configuration.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

from ..core.comparator import NULL_FIRST, NULL_ORDERINGS
from ..core.replica import DEFAULT_TIMEOUT
from ..core.result_set import DEFAULT_BATCH_SIZE
from ..utils.logger import get_logger


logger = get_logger()

ROW_BACKEND = "row"
PUSHDOWN_BACKEND = "pushdown"


@dataclass
class BackendConfig:
    """Configuration for a single backend."""

    name: str
    connection: str
    session_sql: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("Backend name is required")
        if not self.connection:
            raise ValueError(f"Backend '{self.name}' needs a connection")


@dataclass
class HarnessConfig:
    """Configuration for a push-down comparison run."""

    database: str
    backends: Dict[str, BackendConfig]
    queries: str
    setup_sql: Optional[str] = None
    replica_tables: List[str] = field(default_factory=list)
    replica_timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = 0.0
    null_ordering: str = NULL_FIRST
    batch_size: int = DEFAULT_BATCH_SIZE
    report_dir: str = "data/reports"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.database:
            raise ValueError("Database name is required")
        if not self.queries:
            raise ValueError("Query file is required")
        for required in (ROW_BACKEND, PUSHDOWN_BACKEND):
            if required not in self.backends:
                raise ValueError(f"Backend '{required}' is required")
        if self.null_ordering not in NULL_ORDERINGS:
            raise ValueError(
                f"null_ordering must be one of {NULL_ORDERINGS}, "
                f"got '{self.null_ordering}'"
            )
        if self.replica_timeout < 0 or self.poll_interval < 0:
            raise ValueError("replica_timeout and poll_interval must be non-negative")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")

    @property
    def row_backend(self) -> BackendConfig:
        return self.backends[ROW_BACKEND]

    @property
    def pushdown_backend(self) -> BackendConfig:
        return self.backends[PUSHDOWN_BACKEND]


class ConfigManager:
    """
    Manage harness configuration.

    Relative paths inside the file resolve against the file's directory.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path or "pushdown.yaml")
        self.config: Dict[str, Any] = {}
        self.harness: Optional[HarnessConfig] = None

    def load(self) -> HarnessConfig:
        """
        Load configuration from file.

        Returns:
            Parsed harness configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If config is invalid YAML
            ValueError: If required settings are missing or invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")

        logger.info("config.loading", file=str(self.config_path))

        with open(self.config_path) as f:
            self.config = yaml.safe_load(f) or {}

        try:
            self.harness = self._parse(self.config)
        except (TypeError, ValueError) as e:
            logger.error("config.invalid",
                         file=str(self.config_path),
                         error=str(e))
            raise ValueError(f"Invalid configuration {self.config_path}: {e}") from e

        logger.info("config.loaded",
                    database=self.harness.database,
                    backends=len(self.harness.backends),
                    replica_tables=len(self.harness.replica_tables))

        return self.harness

    def resolve(self, path: Optional[str]) -> Optional[Path]:
        """Resolve a path from the config relative to the config file."""
        if path is None:
            return None
        p = Path(path)
        if p.is_absolute():
            return p
        return self.config_path.parent / p

    def _parse(self, cfg: Dict[str, Any]) -> HarnessConfig:
        backends = {}
        for name, backend in (cfg.get("backends") or {}).items():
            backend = backend or {}
            backends[name] = BackendConfig(
                name=name,
                connection=backend.get("connection", ""),
                session_sql=list(backend.get("session_sql") or [])
            )

        return HarnessConfig(
            database=cfg.get("database", ""),
            backends=backends,
            queries=cfg.get("queries", ""),
            setup_sql=cfg.get("setup_sql"),
            replica_tables=list(cfg.get("replica_tables") or []),
            replica_timeout=float(cfg.get("replica_timeout", DEFAULT_TIMEOUT)),
            poll_interval=float(cfg.get("poll_interval", 0.0)),
            null_ordering=cfg.get("null_ordering", NULL_FIRST),
            batch_size=int(cfg.get("batch_size", DEFAULT_BATCH_SIZE)),
            report_dir=cfg.get("report_dir", "data/reports"),
            log_file=cfg.get("log_file")
        )

    def save(self, path: Optional[Path] = None):
        """
        Save configuration to file.

        Args:
            path: Output path (uses original path if not specified)
        """
        if self.harness is None:
            raise ValueError("No configuration loaded")

        output_path = Path(path or self.config_path)
        logger.info("config.saving", file=str(output_path))

        harness = self.harness
        config_dict = {
            "database": harness.database,
            "backends": {
                name: {
                    "connection": backend.connection,
                    "session_sql": backend.session_sql
                }
                for name, backend in harness.backends.items()
            },
            "queries": harness.queries,
            "replica_tables": harness.replica_tables,
            "replica_timeout": harness.replica_timeout,
            "poll_interval": harness.poll_interval,
            "null_ordering": harness.null_ordering,
            "batch_size": harness.batch_size,
            "report_dir": harness.report_dir
        }
        if harness.setup_sql:
            config_dict["setup_sql"] = harness.setup_sql
        if harness.log_file:
            config_dict["log_file"] = harness.log_file

        with open(output_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False)

        logger.info("config.saved", file=str(output_path))
