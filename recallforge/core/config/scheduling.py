"""
Scheduler configuration.

Provides the tunable SM-2 parameters: easiness factor bounds, the fixed
first/second success intervals, the rating scale boundaries, the failure
policy, and the optional target-retention adjustment.
"""

from dataclasses import dataclass
from typing import Optional

from recallforge.core.constants import (
    FAIL_RESET_INTERVAL,
    FAILURE_POLICY_DECREMENT,
    FAILURE_POLICY_RESET,
    FIRST_SUCCESS_INTERVAL,
    INITIAL_EASINESS_FACTOR,
    MAX_RATING,
    MAXIMUM_INTERVAL_DAYS,
    MIN_EASINESS_FACTOR,
    MIN_RATING,
    SECOND_SUCCESS_INTERVAL,
    SUCCESS_THRESHOLD,
)
from recallforge.core.exceptions import ConfigValidationError

FAILURE_POLICIES = (FAILURE_POLICY_RESET, FAILURE_POLICY_DECREMENT)


@dataclass(frozen=True)
class SchedulerConfig:
    """SM-2 scheduler configuration.

    Attributes:
        initial_easiness_factor: EF assigned to new cards
        min_easiness_factor: Floor the EF can never drop below
        first_interval_days: Interval after the first successful recall
        second_interval_days: Interval after the second successful recall
        fail_interval_days: Interval after a failed recall
        success_threshold: Lowest quality counted as a successful recall
        failure_policy: "reset" (rep -> 0) or "decrement" (rep -> rep - 1)
        maximum_interval_days: Upper bound on any interval
        target_retention: Optional retention target that shortens (> 0.9)
            or stretches (< 0.8) intervals; None disables the adjustment
    """

    initial_easiness_factor: float = INITIAL_EASINESS_FACTOR
    min_easiness_factor: float = MIN_EASINESS_FACTOR
    first_interval_days: int = FIRST_SUCCESS_INTERVAL
    second_interval_days: int = SECOND_SUCCESS_INTERVAL
    fail_interval_days: int = FAIL_RESET_INTERVAL
    success_threshold: int = SUCCESS_THRESHOLD
    failure_policy: str = FAILURE_POLICY_RESET
    maximum_interval_days: int = MAXIMUM_INTERVAL_DAYS
    target_retention: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate scheduler parameters."""
        if not 0 < self.min_easiness_factor <= self.initial_easiness_factor:
            raise ConfigValidationError(
                "scheduler.min_easiness_factor must be positive and not exceed "
                f"initial_easiness_factor ({self.min_easiness_factor} > "
                f"{self.initial_easiness_factor})",
                field="scheduler.min_easiness_factor",
                value=self.min_easiness_factor,
            )
        if min(self.first_interval_days, self.fail_interval_days) < 1:
            raise ConfigValidationError(
                "scheduler intervals must be at least 1 day",
                field="scheduler.first_interval_days",
            )
        if self.second_interval_days < self.first_interval_days:
            raise ConfigValidationError(
                "scheduler.second_interval_days must not be shorter than "
                "first_interval_days",
                field="scheduler.second_interval_days",
                value=self.second_interval_days,
            )
        if self.maximum_interval_days < self.second_interval_days:
            raise ConfigValidationError(
                "scheduler.maximum_interval_days must cover second_interval_days",
                field="scheduler.maximum_interval_days",
                value=self.maximum_interval_days,
            )
        if not MIN_RATING < self.success_threshold <= MAX_RATING:
            raise ConfigValidationError(
                f"scheduler.success_threshold must be in {MIN_RATING + 1}-{MAX_RATING}",
                field="scheduler.success_threshold",
                value=self.success_threshold,
            )
        if self.failure_policy not in FAILURE_POLICIES:
            raise ConfigValidationError(
                f"scheduler.failure_policy must be one of {FAILURE_POLICIES}, "
                f"got: {self.failure_policy}",
                field="scheduler.failure_policy",
                value=self.failure_policy,
            )
        if self.target_retention is not None and not 0 < self.target_retention < 1:
            raise ConfigValidationError(
                "scheduler.target_retention must be between 0 and 1",
                field="scheduler.target_retention",
                value=self.target_retention,
            )
