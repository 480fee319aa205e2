"""Retention estimation.

Estimates the probability that a learner still remembers a card, modelled
as decay over the whole days elapsed since its last review.

Two forgetting curves are available:

- exponential (default): exp(-d / (max(rep, 1) * EF))
- piecewise-linear: linear decay to 0.5 at the scheduled interval, then a
  steeper decay scaled by the easiness factor once the card is overdue

Both are non-increasing in elapsed days, return 1.0 on the day of the
review and are clamped to [0, 1]."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from recallforge.core.constants import DEFAULT_CURVE_DAYS, DEFAULT_FOCUS_COUNT
from recallforge.core.exceptions import ValidationError
from recallforge.core.logging import get_logger
from recallforge.study.models import CardState, Flashcard, RetentionSnapshot

logger = get_logger(__name__)


class RetentionStrategy(Enum):
    """Named forgetting-curve models."""

    EXPONENTIAL = "exponential"
    PIECEWISE_LINEAR = "piecewise-linear"

    @classmethod
    def parse(cls, value: Union["RetentionStrategy", str]) -> "RetentionStrategy":
        """Resolve a strategy from its name.

        Accepts "exponential", "piecewise-linear" and "piecewise_linear"
        in any case.

        Raises:
            ValidationError: If the name is unknown
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower().replace("_", "-")
        for strategy in cls:
            if strategy.value == name:
                return strategy
        raise ValidationError(
            f"Unknown retention strategy: {value!r}",
            field="strategy",
            value=value,
            how_to_fix=[f"Use one of: {', '.join(s.value for s in cls)}"],
        )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _exponential(state: CardState, days: int) -> float:
    strength = max(state.repetition_count, 1) * state.easiness_factor
    return math.exp(-days / strength)


def _piecewise_linear(state: CardState, days: int) -> float:
    interval = max(state.interval_days, 1)
    if days <= interval:
        return 1.0 - days / (interval * 2)
    overdue = days - interval
    # Overdue decay starts from 1.0; cap at the due-date value (0.5)
    decayed = max(0.0, 1.0 - overdue / (interval * state.easiness_factor))
    return min(0.5, decayed)


_CURVES = {
    RetentionStrategy.EXPONENTIAL: _exponential,
    RetentionStrategy.PIECEWISE_LINEAR: _piecewise_linear,
}


def retention_after(
    state: CardState,
    days: int,
    strategy: Union[RetentionStrategy, str] = RetentionStrategy.EXPONENTIAL,
) -> float:
    """Retention of a reviewed card after a given number of whole days.

    Negative day counts are treated as 0.
    """
    curve = _CURVES[RetentionStrategy.parse(strategy)]
    return _clamp(curve(state, max(0, days)))


def snapshot(
    state: CardState,
    now: datetime,
    strategy: Union[RetentionStrategy, str] = RetentionStrategy.EXPONENTIAL,
) -> RetentionSnapshot:
    """Estimate retention for a card at `now`.

    A card that was never reviewed has nothing to retain: it reports 0.0
    and days_since_review None.

    Args:
        state: Card scheduling state
        now: Evaluation time
        strategy: Forgetting-curve model

    Returns:
        RetentionSnapshot with the estimate and elapsed whole days
    """
    days = state.days_since_review(now)
    if days is None:
        return RetentionSnapshot(estimated_retention=0.0, days_since_review=None)
    return RetentionSnapshot(
        estimated_retention=retention_after(state, days, strategy),
        days_since_review=days,
    )


def estimate_retention(
    state: CardState,
    now: datetime,
    strategy: Union[RetentionStrategy, str] = RetentionStrategy.EXPONENTIAL,
) -> float:
    """Estimated probability of recall at `now`, in [0, 1]."""
    return snapshot(state, now, strategy).estimated_retention


def forgetting_curve(
    state: CardState,
    days: int = DEFAULT_CURVE_DAYS,
    strategy: Union[RetentionStrategy, str] = RetentionStrategy.EXPONENTIAL,
) -> List[Tuple[int, float]]:
    """Project retention for each day from the last review.

    Args:
        state: Card scheduling state
        days: Number of days to project (inclusive of day 0)
        strategy: Forgetting-curve model

    Returns:
        List of (day, retention) points, day 0 first
    """
    if days < 0:
        raise ValidationError(
            f"days must be non-negative, got {days}", field="days", value=days
        )
    resolved = RetentionStrategy.parse(strategy)
    return [(day, retention_after(state, day, resolved)) for day in range(days + 1)]


@dataclass
class CardRetention:
    """Retention estimate for one card in a report."""

    card_id: str
    front: str
    topic_id: Optional[str]
    retention: float
    days_since_review: Optional[int]
    next_review_date: datetime


@dataclass
class RetentionReport:
    """Retention overview across a set of cards.

    Attributes:
        items: Per-card estimates, in input order
        average_retention: Mean retention over all cards
        retention_by_topic: Mean retention per topic (untagged cards excluded)
        lowest_retention: Minimum retention, 0.0 for an empty report
        focus_cards: Lowest-retention cards, weakest first
        strategy: Model used for the estimates
    """

    items: List[CardRetention] = field(default_factory=list)
    average_retention: float = 0.0
    retention_by_topic: Dict[str, float] = field(default_factory=dict)
    lowest_retention: float = 0.0
    focus_cards: List[CardRetention] = field(default_factory=list)
    strategy: RetentionStrategy = RetentionStrategy.EXPONENTIAL

    def to_dict(self) -> Dict[str, object]:
        """Serialize for JSON output."""
        return {
            "strategy": self.strategy.value,
            "average_retention": round(self.average_retention, 4),
            "lowest_retention": round(self.lowest_retention, 4),
            "retention_by_topic": {
                topic: round(value, 4)
                for topic, value in self.retention_by_topic.items()
            },
            "focus_cards": [
                {
                    "card_id": item.card_id,
                    "front": item.front,
                    "topic_id": item.topic_id,
                    "retention": round(item.retention, 4),
                    "days_since_review": item.days_since_review,
                }
                for item in self.focus_cards
            ],
            "card_count": len(self.items),
        }


def build_retention_report(
    cards: Sequence[Flashcard],
    now: datetime,
    strategy: Union[RetentionStrategy, str] = RetentionStrategy.EXPONENTIAL,
    focus_count: int = DEFAULT_FOCUS_COUNT,
) -> RetentionReport:
    """Build a retention overview for a set of cards.

    Args:
        cards: Cards to evaluate
        now: Evaluation time
        strategy: Forgetting-curve model
        focus_count: Number of weakest cards to highlight

    Returns:
        RetentionReport (all zeros for empty input)
    """
    resolved = RetentionStrategy.parse(strategy)
    report = RetentionReport(strategy=resolved)
    if not cards:
        return report

    by_topic: Dict[str, List[float]] = defaultdict(list)
    for card in cards:
        snap = snapshot(card.state, now, resolved)
        report.items.append(
            CardRetention(
                card_id=card.card_id,
                front=card.front,
                topic_id=card.topic_id,
                retention=snap.estimated_retention,
                days_since_review=snap.days_since_review,
                next_review_date=card.state.next_review_date,
            )
        )
        if card.topic_id is not None:
            by_topic[card.topic_id].append(snap.estimated_retention)

    values = [item.retention for item in report.items]
    report.average_retention = sum(values) / len(values)
    report.lowest_retention = min(values)
    report.retention_by_topic = {
        topic: sum(scores) / len(scores) for topic, scores in sorted(by_topic.items())
    }
    ranked = sorted(report.items, key=lambda item: (item.retention, item.card_id))
    report.focus_cards = ranked[: max(focus_count, 0)]

    logger.debug(
        "Built retention report",
        cards=len(report.items),
        strategy=resolved.value,
        average=f"{report.average_retention:.3f}",
    )
    return report


__all__ = [
    "RetentionStrategy",
    "CardRetention",
    "RetentionReport",
    "retention_after",
    "snapshot",
    "estimate_retention",
    "forgetting_curve",
    "build_retention_report",
]
