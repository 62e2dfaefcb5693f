"""
Validation utilities for MCP tool arguments.

Provides standardized validation functions that return (value, error) tuples.
"""

import math
import os

# Set IMESSAGE_MAX_LIMIT to override (e.g., for full history analysis)
MAX_MESSAGE_LIMIT = int(os.getenv("IMESSAGE_MAX_LIMIT", "500"))
MAX_SEARCH_RESULTS = int(os.getenv("IMESSAGE_MAX_SEARCH", "500"))
MIN_LIMIT = 1

MAX_DAYS_BACK = 3650
MAX_HOURS_BACK = 24 * 365


def validate_positive_int(
    value,
    name: str,
    min_val: int = MIN_LIMIT,
    max_val: int = MAX_MESSAGE_LIMIT
) -> tuple[int | None, str | None]:
    """
    Validate that a value is a positive integer within bounds.

    Args:
        value: Value to validate
        name: Parameter name for error messages
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Tuple of (validated_value, error_message). If valid, error_message is None.
    """
    if value is None:
        return None, None

    if isinstance(value, bool):
        return None, f"Invalid {name}: must be an integer, got bool"

    try:
        int_value = int(value)
    except (TypeError, ValueError):
        return None, f"Invalid {name}: must be an integer, got {type(value).__name__}"

    if int_value < min_val:
        return None, f"Invalid {name}: must be at least {min_val}, got {int_value}"

    if int_value > max_val:
        return None, f"Invalid {name}: must be at most {max_val}, got {int_value}"

    return int_value, None


def validate_non_empty_string(value, name: str, strip: bool = True) -> tuple[str | None, str | None]:
    """
    Validate that a value is a non-empty string.

    Whitespace-only values are rejected. With ``strip=False`` the value is
    returned as given.

    Returns:
        Tuple of (validated_value, error_message). If valid, error_message is None.
    """
    if value is None:
        return None, f"Missing required parameter: {name}"

    if not isinstance(value, str):
        return None, f"Invalid {name}: must be a string, got {type(value).__name__}"

    stripped = value.strip()
    if not stripped:
        return None, f"Invalid {name}: cannot be empty"

    return (stripped if strip else value), None


def validate_bool(value, name: str, default: bool) -> tuple[bool, str | None]:
    """Accept a real bool, or the strings "true"/"false"."""
    if value is None:
        return default, None
    if isinstance(value, bool):
        return value, None
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true", None
    return default, f"Invalid {name}: must be a boolean, got {type(value).__name__}"


def validate_int_arg(
    arguments: dict,
    name: str,
    default: int,
    max_val: int = MAX_MESSAGE_LIMIT
) -> tuple[int, str | None]:
    """
    Extract and validate an integer argument, falling back to ``default``.

    Returns:
        Tuple of (value, error_message).
    """
    raw = arguments.get(name, default)
    value, error = validate_positive_int(raw, name, max_val=max_val)
    if error:
        return default, error
    return value if value is not None else default, None


def validate_limit(
    arguments: dict,
    default: int = 20,
    max_val: int = MAX_MESSAGE_LIMIT
) -> tuple[int, str | None]:
    """Extract and validate the common ``limit`` argument."""
    return validate_int_arg(arguments, "limit", default, max_val=max_val)


def validate_window_arg(
    arguments: dict,
    name: str,
    default: float,
    max_val: float
) -> tuple[float, str | None]:
    """
    Extract a positive look-back window (days or hours), fractions allowed.

    Whole numbers come back as ``int`` so responses echo ``24``, not ``24.0``.

    Returns:
        Tuple of (value, error_message).
    """
    raw = arguments.get(name)
    if raw is None:
        return default, None

    if isinstance(raw, bool):
        return default, f"Invalid {name}: must be a number, got bool"

    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default, f"Invalid {name}: must be a number, got {type(raw).__name__}"

    if not math.isfinite(value) or value <= 0:
        return default, f"Invalid {name}: must be greater than 0, got {raw}"

    if value > max_val:
        return default, f"Invalid {name}: must be at most {max_val}, got {raw}"

    return (int(value) if value.is_integer() else value), None
