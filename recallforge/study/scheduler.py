"""SM-2 spaced repetition scheduler.

Implements the SuperMemo SM-2 algorithm for calculating the next review of a
card from its current state and a recall-quality rating.

The scheduler is a pure function of its inputs: the current time is passed
in explicitly and a new CardState is returned; nothing is persisted here."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Union

from recallforge.core.config.scheduling import SchedulerConfig
from recallforge.core.constants import (
    FAIL_RESET_INTERVAL,
    FAILURE_POLICY_DECREMENT,
    FIRST_SUCCESS_INTERVAL,
    INITIAL_EASINESS_FACTOR,
    MAX_RATING,
    MIN_EASINESS_FACTOR,
    SECOND_SUCCESS_INTERVAL,
)
from recallforge.core.logging import get_logger
from recallforge.study.models import CardState, Rating, ReviewEvent, validate_state

logger = get_logger(__name__)

DEFAULT_CONFIG = SchedulerConfig()

# Target-retention adjustment bounds
HIGH_TARGET_RETENTION = 0.9
LOW_TARGET_RETENTION = 0.8
HIGH_TARGET_SHRINK = 0.9
LOW_TARGET_STRETCH = 1.1
HIGH_TARGET_MIN_INTERVAL = 4


def get_initial_easiness_factor(config: Optional[SchedulerConfig] = None) -> float:
    """Get the easiness factor assigned to new cards.

    Returns:
        Initial easiness factor (2.5 unless configured otherwise).
    """
    return (config or DEFAULT_CONFIG).initial_easiness_factor


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's round() uses banker's rounding, which would schedule a 2.5 day
    interval as 2 days.
    """
    return int(math.floor(value + 0.5))


def update_easiness_factor(
    easiness_factor: float,
    quality: int,
    min_easiness_factor: float = MIN_EASINESS_FACTOR,
) -> float:
    """Calculate new easiness factor based on quality.

    SM-2 easiness factor formula:
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

    Where:
        EF = current easiness factor
        q = quality rating (0-5)
        EF' = new easiness factor

    Args:
        easiness_factor: Current easiness factor.
        quality: Rating from 0-5.
        min_easiness_factor: Floor for the result.

    Returns:
        New easiness factor (never below min_easiness_factor).

    Examples:
        >>> update_easiness_factor(2.5, 5)
        2.6
        >>> update_easiness_factor(1.3, 0)
        1.3
    """
    diff = MAX_RATING - quality
    adjustment = 0.1 - diff * (0.08 + diff * 0.02)
    return max(min_easiness_factor, easiness_factor + adjustment)


def next_repetition_count(
    repetition_count: int, successful: bool, failure_policy: str
) -> int:
    """Repetition count after a review.

    Successes increment the count. Failures reset it to zero, or step it back
    by one under the "decrement" policy.
    """
    if successful:
        return repetition_count + 1
    if failure_policy == FAILURE_POLICY_DECREMENT:
        return max(repetition_count - 1, 0)
    return 0


def next_interval(
    new_repetition_count: int,
    previous_interval: int,
    easiness_factor: float,
    successful: bool,
    config: Optional[SchedulerConfig] = None,
) -> int:
    """Calculate the interval in days for the next review.

    Args:
        new_repetition_count: Repetition count after this review.
        previous_interval: Interval that led to this review.
        easiness_factor: Easiness factor after this review.
        successful: Whether the recall succeeded.
        config: Scheduler configuration.

    Returns:
        Interval in days, within [1, maximum_interval_days].

    Examples:
        >>> next_interval(1, 0, 2.6, True)
        1
        >>> next_interval(2, 1, 2.7, True)
        6
        >>> next_interval(3, 6, 2.8, True)
        17
        >>> next_interval(0, 15, 2.0, False)
        1
    """
    cfg = config or DEFAULT_CONFIG

    if not successful:
        interval = cfg.fail_interval_days
    elif new_repetition_count <= 1:
        interval = cfg.first_interval_days
    elif new_repetition_count == 2:
        interval = cfg.second_interval_days
    else:
        interval = round_half_up(previous_interval * easiness_factor)

    return max(1, min(interval, cfg.maximum_interval_days))


def adjust_for_target_retention(
    interval: int, quality: int, target_retention: Optional[float]
) -> int:
    """Adjust a successful interval toward a retention target.

    High targets (> 0.9) shorten intervals longer than 4 days by 10%, never
    below 4. Low targets (< 0.8) stretch intervals of well-known cards
    (quality >= 4) by 10%.
    """
    if target_retention is None:
        return interval
    if target_retention > HIGH_TARGET_RETENTION and interval > HIGH_TARGET_MIN_INTERVAL:
        return max(HIGH_TARGET_MIN_INTERVAL, round_half_up(interval * HIGH_TARGET_SHRINK))
    if target_retention < LOW_TARGET_RETENTION and quality >= 4:
        return round_half_up(interval * LOW_TARGET_STRETCH)
    return interval


def schedule_next_review(
    state: CardState,
    rating: Union[Rating, int],
    now: datetime,
    config: Optional[SchedulerConfig] = None,
) -> CardState:
    """Compute a card's state after a review.

    1. Update the easiness factor with the SM-2 formula (all ratings),
       clamped to the floor.
    2. On failure (rating below the success threshold) apply the failure
       policy and schedule the fail interval (1 day).
    3. On success increment the repetition count; the interval is 1 day
       for the first success, 6 for the second, then
       round(previous interval * EF').
    4. next_review_date = now + interval days.

    Args:
        state: Current card state (must satisfy its invariants).
        rating: Recall quality on the 0-5 scale.
        now: Time of the review.
        config: Scheduler configuration.

    Returns:
        New CardState; the input is not modified.

    Raises:
        InvalidRatingError: If rating is outside 0-5.
        InvalidStateError: If state violates its invariants.

    Examples:
        >>> state = CardState.new(now)
        >>> state = schedule_next_review(state, Rating.PERFECT, now)
        >>> state.repetition_count, state.interval_days
        (1, 1)
    """
    cfg = config or DEFAULT_CONFIG
    quality = Rating.parse(rating)
    validate_state(state, cfg.min_easiness_factor)

    successful = int(quality) >= cfg.success_threshold
    new_ef = update_easiness_factor(
        state.easiness_factor, int(quality), cfg.min_easiness_factor
    )
    new_reps = next_repetition_count(
        state.repetition_count, successful, cfg.failure_policy
    )
    interval = next_interval(new_reps, state.interval_days, new_ef, successful, cfg)

    if successful:
        interval = adjust_for_target_retention(
            interval, int(quality), cfg.target_retention
        )
        interval = max(1, min(interval, cfg.maximum_interval_days))

    logger.debug(
        "Scheduled review",
        quality=int(quality),
        successful=successful,
        repetitions=new_reps,
        interval_days=interval,
        easiness=f"{new_ef:.2f}",
    )

    return replace(
        state,
        easiness_factor=new_ef,
        repetition_count=new_reps,
        interval_days=interval,
        last_reviewed_at=now,
        next_review_date=now + timedelta(days=interval),
        last_difficulty=quality.to_difficulty(),
    )


def apply_review(
    state: CardState,
    event: ReviewEvent,
    config: Optional[SchedulerConfig] = None,
) -> CardState:
    """Apply a ReviewEvent to a state (see schedule_next_review)."""
    return schedule_next_review(state, event.rating, event.occurred_at, config)


__all__ = [
    "INITIAL_EASINESS_FACTOR",
    "MIN_EASINESS_FACTOR",
    "FIRST_SUCCESS_INTERVAL",
    "SECOND_SUCCESS_INTERVAL",
    "FAIL_RESET_INTERVAL",
    "get_initial_easiness_factor",
    "round_half_up",
    "update_easiness_factor",
    "next_repetition_count",
    "next_interval",
    "adjust_for_target_retention",
    "schedule_next_review",
    "apply_review",
]
