"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_monitor_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default configuration file, relative to the repository root. A missing
# default file is not an error; built-in defaults apply instead.
DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"

_CONFIG_FILE_PATH = DEFAULT_CONFIG_FILE_PATH
_CONFIG_PATH_EXPLICIT = False


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Unlike the default path, an explicitly set file must exist when the
    configuration is loaded.

    Args:
        config_path: Path to the config.toml file
    """
    global _CONFIG_FILE_PATH, _CONFIG_PATH_EXPLICIT, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG_PATH_EXPLICIT = True
    _CONFIG = None
    logger.debug(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """
    Clear the cached configuration and restore the default path.
    """
    global _CONFIG, _CONFIG_FILE_PATH, _CONFIG_PATH_EXPLICIT
    _CONFIG = None
    _CONFIG_FILE_PATH = DEFAULT_CONFIG_FILE_PATH
    _CONFIG_PATH_EXPLICIT = False
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path, required: bool) -> AppConfig:
    """
    Load and validate the application configuration.

    Args:
        config_path: Path to the config.toml file
        required: Whether a missing file is an error

    Returns:
        Fully validated AppConfig instance

    Raises:
        FileNotFoundError: If a required configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    if not required and not config_path.exists():
        logger.debug(f"No configuration file at {config_path}; using built-in defaults")
        return AppConfig(monitor=validate_monitor_config({}))

    try:
        main_config_data = load_main_config(config_path)
        monitor_config = validate_monitor_config(main_config_data.get("monitor", {}))
        logger.debug(f"Loaded configuration from {config_path}")
        return AppConfig(monitor=monitor_config)
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.DEBUG,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance

    Raises:
        FileNotFoundError: If an explicitly set configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH, required=_CONFIG_PATH_EXPLICIT)
    return _CONFIG


def is_config_loaded() -> bool:
    """
    Check if configuration has been loaded and cached.
    """
    return _CONFIG is not None
