"""
Data models for the memmark package.

- config: configuration dataclasses loaded from TOML and the command line
- runtime: per-tick and per-run state (process sets, samples, sessions)
"""

from .config import AppConfig, MonitorConfig
from .runtime import (
    CSV_COLUMNS,
    METRIC_FIELDS,
    LoopState,
    MetricSample,
    ProcessSet,
    SamplingSession,
    StopReason,
)

__all__ = [
    "AppConfig",
    "MonitorConfig",
    "CSV_COLUMNS",
    "METRIC_FIELDS",
    "LoopState",
    "MetricSample",
    "ProcessSet",
    "SamplingSession",
    "StopReason",
]
