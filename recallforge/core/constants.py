"""
Centralized Constants for RecallForge.

This module defines the default constants used throughout RecallForge.
Configuration dataclasses take their defaults from here; the scheduling
core re-exports the SM-2 values.

Usage
-----
    from recallforge.core.constants import (
        INITIAL_EASINESS_FACTOR,
        MIN_EASINESS_FACTOR,
    )

Organization
------------
Constants are grouped by domain:
- Rating Scale
- SM-2 Scheduling
- Retention
- Mastery
- Storage
"""

from typing import Tuple

# ============================================================================
# Rating Scale
# ============================================================================

#: Lowest recall quality (complete blackout)
MIN_RATING: int = 0

#: Highest recall quality (perfect recall)
MAX_RATING: int = 5

#: Ratings at or above this value count as successful recall
SUCCESS_THRESHOLD: int = 3

#: Bounds of the application's 1-5 difficulty scale (1 = very easy)
DIFFICULTY_RANGE: Tuple[int, int] = (1, 5)

# ============================================================================
# SM-2 Scheduling
# ============================================================================

INITIAL_EASINESS_FACTOR: float = 2.5
MIN_EASINESS_FACTOR: float = 1.3
FIRST_SUCCESS_INTERVAL: int = 1
SECOND_SUCCESS_INTERVAL: int = 6
FAIL_RESET_INTERVAL: int = 1

#: Upper bound on any scheduled interval (100 years)
MAXIMUM_INTERVAL_DAYS: int = 36500

#: Failure policies: reset repetition count to zero, or step it back by one
FAILURE_POLICY_RESET: str = "reset"
FAILURE_POLICY_DECREMENT: str = "decrement"

# ============================================================================
# Retention
# ============================================================================

RETENTION_EXPONENTIAL: str = "exponential"
RETENTION_PIECEWISE_LINEAR: str = "piecewise-linear"

#: Number of lowest-retention cards highlighted in a retention report
DEFAULT_FOCUS_COUNT: int = 5

#: Default horizon (days) for forgetting curve projections
DEFAULT_CURVE_DAYS: int = 30

# ============================================================================
# Mastery
# ============================================================================

MASTERY_REPETITION_CAP: int = 10
MASTERY_INTERVAL_CAP_DAYS: int = 30
MASTERY_REPETITION_WEIGHT: float = 0.5
MASTERY_DIFFICULTY_WEIGHT: float = 0.3
MASTERY_INTERVAL_WEIGHT: float = 0.2

#: Difficulty assumed for cards that were never rated
NEUTRAL_DIFFICULTY: int = 3

# ============================================================================
# Storage
# ============================================================================

DEFAULT_DATA_DIR: str = ".data"
DEFAULT_DATABASE_NAME: str = "reviews.db"
CONFIG_FILENAMES: Tuple[str, ...] = ("recallforge.yaml", "config.yaml")
