"""
Configuration data models.

This module contains the configuration structures loaded from `config.toml`
and overridden from the command line.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MonitorConfig:
    """
    Configuration for the sampler's behavior, loaded from `config.toml`.
    """

    # [monitor.collection]
    interval_ms: int
    # None means "run until the target exits".
    duration_ms: Optional[int]
    # Linux PSS/swap via smaps; costly on large trees, so off by default.
    enable_smaps: bool
    # Upper bound on collectors evaluated concurrently within one tick.
    collector_workers: int
    # Per-process timeout for the macOS vmmap tool.
    vmmap_timeout_seconds: float

    # [monitor.output]
    # CSV destination; "-" streams to stdout.
    out_path: str
    # Chart destination; None disables chart rendering.
    chart_path: Optional[str]

    # [monitor.logging]
    log_level: str

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.duration_ms is None:
            return None
        return self.duration_ms / 1000.0


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
