"""
Configuration validation utilities.

This module turns the raw `[monitor]` table of `config.toml` into a validated
MonitorConfig.
"""

import logging
from typing import Any, Dict, Optional

from ..models.config import MonitorConfig
from ..validation import (
    ValidationError,
    validate_bool,
    validate_duration,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _sub_table(data: Dict[str, Any], key: str, field_name: str) -> Dict[str, Any]:
    """Return the TOML sub-table at ``key``, or an empty one when it is unset."""
    table = data.get(key, {})
    if not isinstance(table, dict):
        raise ValidationError(
            f"{field_name} must be a table, got {type(table).__name__}",
            field_name=field_name,
            value=table,
        )
    return table


def validate_interval(value: Any, field_name: str = "interval") -> int:
    """Parse an interval duration; it must be at least one millisecond."""
    interval_ms = validate_duration(value, field_name=field_name)
    if interval_ms < 1:
        raise ValidationError(
            f"{field_name} must be at least 1ms, got {value!r}",
            field_name=field_name,
            value=value,
        )
    return interval_ms


def validate_optional_duration(value: Any, field_name: str = "duration") -> Optional[int]:
    """Parse an optional duration; empty or zero means no limit."""
    if value is None or str(value).strip() == "":
        return None
    duration_ms = validate_duration(value, field_name=field_name)
    return duration_ms or None


def validate_log_level(value: Any, field_name: str = "log_level") -> str:
    return validate_enum_choice(value, LOG_LEVELS, field_name=field_name, case_sensitive=False)


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Missing keys fall back to the built-in defaults, so an empty dictionary
    produces the default configuration.

    Args:
        monitor_data: Raw `[monitor]` table from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(monitor_data, dict):
        raise ValidationError(
            f"monitor must be a table, got {type(monitor_data).__name__}",
            field_name="monitor",
            value=monitor_data,
        )

    collection_settings = _sub_table(monitor_data, "collection", "monitor.collection")
    output_settings = _sub_table(monitor_data, "output", "monitor.output")
    logging_settings = _sub_table(monitor_data, "logging", "monitor.logging")

    interval_ms = validate_interval(
        collection_settings.get("interval", "1s"),
        field_name="monitor.collection.interval",
    )

    duration_ms = validate_optional_duration(
        collection_settings.get("duration", ""),
        field_name="monitor.collection.duration",
    )

    enable_smaps = validate_bool(
        collection_settings.get("enable_smaps", False),
        field_name="monitor.collection.enable_smaps",
    )

    collector_workers = validate_positive_integer(
        collection_settings.get("collector_workers", 4),
        min_value=1,
        max_value=64,
        field_name="monitor.collection.collector_workers",
    )

    vmmap_timeout_seconds = validate_positive_float(
        collection_settings.get("vmmap_timeout_seconds", 10.0),
        min_value=0.1,
        max_value=300.0,
        field_name="monitor.collection.vmmap_timeout_seconds",
    )

    out_path = output_settings.get("out", "memmark.csv")
    if not isinstance(out_path, str) or not out_path.strip():
        raise ValidationError(
            "monitor.output.out must be a non-empty string",
            field_name="monitor.output.out",
            value=out_path,
        )

    chart_path = output_settings.get("chart", "")
    if not isinstance(chart_path, str):
        raise ValidationError(
            "monitor.output.chart must be a string",
            field_name="monitor.output.chart",
            value=chart_path,
        )

    log_level = validate_log_level(
        logging_settings.get("level", "INFO"),
        field_name="monitor.logging.level",
    )

    return MonitorConfig(
        interval_ms=interval_ms,
        duration_ms=duration_ms,
        enable_smaps=enable_smaps,
        collector_workers=collector_workers,
        vmmap_timeout_seconds=vmmap_timeout_seconds,
        out_path=out_path,
        chart_path=chart_path or None,
        log_level=log_level,
    )
