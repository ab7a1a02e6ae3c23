"""
Configuration management for the memmark package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

from .loader import load_main_config, load_toml_file
from .manager import (
    DEFAULT_CONFIG_FILE_PATH,
    clear_config_cache,
    get_config,
    is_config_loaded,
    set_config_path,
)
from .validators import (
    validate_interval,
    validate_log_level,
    validate_monitor_config,
    validate_optional_duration,
)

__all__ = [
    "DEFAULT_CONFIG_FILE_PATH",
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "load_toml_file",
    "load_main_config",
    "validate_interval",
    "validate_log_level",
    "validate_monitor_config",
    "validate_optional_duration",
]
