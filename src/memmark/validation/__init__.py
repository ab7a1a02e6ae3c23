"""
Validation and error handling for the memmark package.

This module provides input validation and error handling with consistent
error reporting across the application.
"""

from .exceptions import (
    ErrorSeverity,
    TargetNotFoundError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)
from .validators import (
    validate_bool,
    validate_duration,
    validate_enum_choice,
    validate_pid,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    "ErrorSeverity",
    "TargetNotFoundError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "validate_bool",
    "validate_duration",
    "validate_enum_choice",
    "validate_pid",
    "validate_positive_float",
    "validate_positive_integer",
]
