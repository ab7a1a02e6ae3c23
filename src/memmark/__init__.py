"""
memmark: memory sampling for a process and all of its descendants.

The package samples the memory of a process tree at a fixed interval and
writes one aggregated CSV row per tick. It can attach to a running process or
launch a command and follow it until it exits.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- system: Process discovery and external command helpers
- collectors: Per-platform memory metric collectors
- monitoring: One-tick sampling of a process tree
- storage: CSV output
- orchestration: Sampling loop, signal handling, child process lifecycle
- cli: Command-line interface and session runner
- plotter: Chart rendering from a CSV file

Usage:
    From command line:
        memmark --pid 1234 --interval 500ms --out run.csv
        memmark --duration 30s --chart run.html -- make -j8

    Programmatically:
        from memmark import MonitorRunner, get_config
        runner = MonitorRunner(get_config().monitor, pid=1234)
        exit_status = runner.run()
"""

# Defined before the submodule imports; the CLI reads it at import time.
__version__ = "0.1.0"

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .cli.orchestrator import MonitorRunner
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    MonitorConfig,
    MetricSample,
    SamplingSession,
    LoopState,
    StopReason,
    CSV_COLUMNS,
    METRIC_FIELDS,
)

__all__ = [
    "__version__",
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "MonitorRunner",
    "main_cli",
    # Models
    "AppConfig",
    "MonitorConfig",
    "MetricSample",
    "SamplingSession",
    "LoopState",
    "StopReason",
    "CSV_COLUMNS",
    "METRIC_FIELDS",
]
