"""
Input validation functions.

Validators for the values that reach the tool from the command line and from
the TOML configuration file. Each returns the normalised value or raises
ValidationError.
"""

import re
from typing import Any, List, Optional

from .exceptions import ValidationError

# Multipliers from a duration unit to milliseconds.
_DURATION_UNITS_MS = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 3600 * 1000,
}

_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)(ms|s|m|h)?$")


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated float value

    Raises:
        ValidationError: If validation fails
    """
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Returns:
        The matching entry from ``choices``.

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)
    for choice in choices:
        if str_value == choice or (not case_sensitive and str_value.lower() == choice.lower()):
            return choice
    raise ValidationError(
        f"{field_name} must be one of {choices}, got {value}",
        field_name=field_name,
        value=value
    )


def validate_bool(value: Any, field_name: str = "value") -> bool:
    """Validate that a configuration value is a real boolean."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def validate_duration(value: Any, field_name: str = "duration") -> int:
    """
    Parse a human duration string into milliseconds.

    Accepts ``<number><unit>`` where unit is one of ``ms``, ``s``, ``m`` or
    ``h`` and the number may carry a decimal part. A bare number is taken as
    seconds, so ``"2.5"`` and ``"2.5s"`` both give 2500.

    Examples:
        >>> validate_duration("200ms")
        200
        >>> validate_duration("2m")
        120000

    Raises:
        ValidationError: If the string does not match the duration syntax.
    """
    text = str(value).strip()
    match = _DURATION_RE.match(text)
    if not match:
        raise ValidationError(
            f"Invalid {field_name}: {value!r} (expected e.g. 200ms, 1s, 2.5m, 1h)",
            field_name=field_name,
            value=value
        )
    number, unit = match.group(1), match.group(2) or "s"
    return int(float(number) * _DURATION_UNITS_MS[unit])


def validate_pid(value: Any, field_name: str = "pid") -> int:
    """Validate a process identifier: a positive integer."""
    return validate_positive_integer(value, min_value=1, field_name=field_name)
