#!/usr/bin/env python3
"""
Push-Down Diff - Main Entry Point
Checks that the push-down backend returns the same rows as the row backend.
"""

import argparse
import sys
from pathlib import Path
from datetime import datetime
import traceback

import yaml

from pushdown_diff import (
    __version__,
    ConfigManager,
    PushDownPipeline,
    get_progress_monitor,
    get_logger,
    write_report,
)
from pushdown_diff.core.errors import PushDownError


logger = get_logger()


SAMPLE_CONFIG = """# Push-Down Diff Configuration
# ============================

database: test

backends:
  # Row-store execution path
  row:
    connection: "data/{db}.duckdb"
    session_sql: []
  # Push-down (columnar replica) execution path
  pushdown:
    connection: "data/{db}.duckdb"
    session_sql: []

setup_sql: sql/schema.sql      # optional, run on the row backend
queries: sql/queries.sql       # statements separated by ';'

replica_tables: []             # tables to wait for before comparing
replica_timeout: 300
poll_interval: 0.0

null_ordering: first           # or "legacy"
batch_size: 1024
report_dir: data/reports
"""


def create_sample_config(output_path: Path):
    """
    Create a sample configuration file.

    Args:
        output_path: Where to save the config
    """
    output_path.write_text(SAMPLE_CONFIG)
    print(f"Sample configuration created: {output_path}")


def run(config_path: Path, verbose: bool = False, use_rich: bool = True,
        report_dir: Path = None) -> bool:
    """
    Load the config, run the pipeline and write the report.

    Returns:
        True if every query matched
    """
    manager = ConfigManager(config_path)
    config = manager.load()

    if config.log_file:
        logger.set_log_file(manager.resolve(config.log_file))

    progress = get_progress_monitor(use_rich, verbose=verbose)
    pipeline = PushDownPipeline(config, base_dir=config_path.parent, progress=progress)

    try:
        report = pipeline.run()
    except (PushDownError, FileNotFoundError) as e:
        logger.error("pipeline.failed",
                     error=str(e),
                     traceback=traceback.format_exc())
        progress.stop()
        progress.log_error(f"Pipeline failed: {e}")
        return False

    output_dir = Path(report_dir) if report_dir else manager.resolve(config.report_dir)
    write_report(report, output_dir / f"{config.database}_{datetime.now().strftime('%Y%m%d_%H%M%S')}")

    return report.success


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Push-Down Diff - compare row and push-down query results"
    )

    parser.add_argument(
        "config",
        nargs="?",
        default="pushdown.yaml",
        help="Configuration file (default: pushdown.yaml)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show passing queries and debug logs"
    )

    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable Rich progress bars"
    )

    parser.add_argument(
        "--report-dir",
        help="Override report_dir from the configuration"
    )

    parser.add_argument(
        "--create-sample",
        action="store_true",
        help="Create sample configuration file"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Push-Down Diff v{__version__}"
    )

    args = parser.parse_args()

    if args.create_sample:
        create_sample_config(Path("pushdown_sample.yaml"))
        return 0

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}")
        print("Use --create-sample to create a sample configuration")
        return 1

    if args.verbose:
        logger.set_level("DEBUG")

    try:
        success = run(config_path,
                      verbose=args.verbose,
                      use_rich=not args.no_rich,
                      report_dir=args.report_dir)
    except (ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
