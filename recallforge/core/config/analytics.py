"""
Analytics configuration.

Provides configuration for retention estimation (forgetting-curve strategy,
report sizes) and mastery scoring (factor caps, weights, and the thresholds
used by learning statistics).
"""

from dataclasses import dataclass

from recallforge.core.constants import (
    DEFAULT_CURVE_DAYS,
    DEFAULT_FOCUS_COUNT,
    MASTERY_DIFFICULTY_WEIGHT,
    MASTERY_INTERVAL_CAP_DAYS,
    MASTERY_INTERVAL_WEIGHT,
    MASTERY_REPETITION_CAP,
    MASTERY_REPETITION_WEIGHT,
    NEUTRAL_DIFFICULTY,
    RETENTION_EXPONENTIAL,
)
from recallforge.core.env import RETENTION_STRATEGIES
from recallforge.core.exceptions import ConfigValidationError


@dataclass
class RetentionConfig:
    """Retention estimation configuration."""

    strategy: str = RETENTION_EXPONENTIAL  # exponential, piecewise-linear
    focus_count: int = DEFAULT_FOCUS_COUNT
    curve_days: int = DEFAULT_CURVE_DAYS

    def __post_init__(self) -> None:
        self.strategy = self.strategy.strip().lower()
        if self.strategy not in RETENTION_STRATEGIES:
            raise ConfigValidationError(
                f"retention.strategy must be one of {sorted(RETENTION_STRATEGIES)}, "
                f"got: {self.strategy}",
                field="retention.strategy",
                value=self.strategy,
            )
        if self.focus_count < 0 or self.curve_days < 1:
            raise ConfigValidationError(
                "retention.focus_count must be >= 0 and curve_days >= 1",
                field="retention",
            )


@dataclass
class MasteryConfig:
    """Mastery scoring configuration.

    The three weights combine the normalized repetition, difficulty and
    interval factors. The remaining fields drive card classification in
    learning statistics.
    """

    repetition_cap: int = MASTERY_REPETITION_CAP
    interval_cap_days: int = MASTERY_INTERVAL_CAP_DAYS
    repetition_weight: float = MASTERY_REPETITION_WEIGHT
    difficulty_weight: float = MASTERY_DIFFICULTY_WEIGHT
    interval_weight: float = MASTERY_INTERVAL_WEIGHT
    neutral_difficulty: int = NEUTRAL_DIFFICULTY
    mastered_repetitions: int = 5
    mastered_threshold: float = 0.7
    struggling_easiness: float = 2.0
    struggling_repetitions: int = 3

    def __post_init__(self) -> None:
        if self.repetition_cap < 1 or self.interval_cap_days < 1:
            raise ConfigValidationError(
                "mastery caps must be at least 1", field="mastery.repetition_cap"
            )
        weights = (self.repetition_weight, self.difficulty_weight, self.interval_weight)
        if any(weight < 0 for weight in weights):
            raise ConfigValidationError(
                f"mastery weights must be non-negative, got: {weights}",
                field="mastery.weights",
                value=weights,
            )
        if not 1 <= self.neutral_difficulty <= 5:
            raise ConfigValidationError(
                "mastery.neutral_difficulty must be in 1-5",
                field="mastery.neutral_difficulty",
                value=self.neutral_difficulty,
            )
