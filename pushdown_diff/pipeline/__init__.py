"""Comparison pipeline."""

from .runner import PushDownPipeline, PipelineReport, QueryOutcome, write_report

__all__ = ["PushDownPipeline", "PipelineReport", "QueryOutcome", "write_report"]
