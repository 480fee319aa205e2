"""
Safe environment variable parsing with validation.

Provides type-safe functions for reading environment variables with
bounds checking and whitelist validation.

Usage Pattern
-------------
Instead of unsafe direct environment access:

    # DANGEROUS - no validation
    target = float(os.environ.get("RECALLFORGE_TARGET_RETENTION", "0.9"))

Use safe getters:

    # SAFE - bounds checked
    from recallforge.core.env import get_env_float
    target = get_env_float("RECALLFORGE_TARGET_RETENTION", min_value=0.0, max_value=1.0)
"""

from __future__ import annotations

import os
from typing import FrozenSet, Optional

from recallforge.core.logging import get_logger

logger = get_logger(__name__)


# Whitelists for configuration values
RETENTION_STRATEGIES: FrozenSet[str] = frozenset(
    ["exponential", "piecewise-linear", "piecewise_linear"]
)

FAILURE_POLICIES: FrozenSet[str] = frozenset(["reset", "decrement"])

LOG_LEVELS: FrozenSet[str] = frozenset(
    ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
)


def get_env_int(
    name: str,
    default: Optional[int] = None,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> Optional[int]:
    """
    Get integer from environment variable with bounds validation.

    Args:
        name: Environment variable name.
        default: Default value if not set or invalid.
        min_value: Minimum allowed value (clamped if exceeded).
        max_value: Maximum allowed value (clamped if exceeded).

    Returns:
        Validated integer or default.
    """
    value = os.environ.get(name)
    if value is None:
        return default

    try:
        int_value = int(value)
    except ValueError:
        logger.warning(
            f"Invalid integer value for {name}={value}: Returning default {default}"
        )
        return default

    if min_value is not None and int_value < min_value:
        return min_value
    if max_value is not None and int_value > max_value:
        return max_value

    return int_value


def get_env_float(
    name: str,
    default: Optional[float] = None,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> Optional[float]:
    """
    Get float from environment variable with bounds validation.

    Out-of-range values are rejected (default returned) rather than clamped,
    since a clamped probability is rarely what the operator meant.

    Args:
        name: Environment variable name.
        default: Default value if not set or invalid.
        min_value: Minimum allowed value.
        max_value: Maximum allowed value.

    Returns:
        Validated float or default.

    Example:
        >>> get_env_float("RECALLFORGE_TARGET_RETENTION", min_value=0.0, max_value=1.0)
        None  # If not set
    """
    value = os.environ.get(name)
    if value is None:
        return default

    try:
        float_value = float(value)
    except ValueError:
        logger.warning(
            f"Invalid float value for {name}={value}: Returning default {default}"
        )
        return default

    out_of_range = (min_value is not None and float_value < min_value) or (
        max_value is not None and float_value > max_value
    )
    if out_of_range:
        logger.warning(
            f"Value for {name}={value} outside [{min_value}, {max_value}]: "
            f"Returning default {default}"
        )
        return default

    return float_value


def get_env_whitelist(
    name: str,
    allowed: FrozenSet[str],
    default: Optional[str] = None,
    case_sensitive: bool = False,
) -> Optional[str]:
    """
    Get string from environment variable validated against a whitelist.

    Args:
        name: Environment variable name.
        allowed: Set of allowed values.
        default: Default value if not set or not allowed.
        case_sensitive: Whether comparison is case sensitive.

    Returns:
        Allowed value (normalized to the whitelist spelling) or default.
    """
    value = os.environ.get(name)
    if value is None:
        return default

    candidate = value.strip()
    for option in allowed:
        if candidate == option or (
            not case_sensitive and candidate.lower() == option.lower()
        ):
            return option

    logger.warning(
        f"Value for {name}={value} not in {sorted(allowed)}: Returning default {default}"
    )
    return default


def get_env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get a non-empty string from the environment."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()
