"""Mastery scoring.

Per-card mastery combines three normalized factors:

    repetition = min(repetition_count / 10, 1)
    difficulty = (6 - difficulty_rating) / 5
    interval   = min(interval_days / 30, 1)

    mastery = 0.5 * repetition + 0.3 * difficulty + 0.2 * interval

Topic mastery is the arithmetic mean over the topic's cards. An empty topic
has mastery 0.0. The mean is a sum/count reduction, so batch callers can
split a card list, accumulate each part with MasteryAccumulator and merge
the partial results."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from recallforge.core.config.analytics import MasteryConfig
from recallforge.core.exceptions import InvalidStateError
from recallforge.study.models import CardState, CardStatus, Flashcard, TopicMastery

DEFAULT_CONFIG = MasteryConfig()

# classify_card thresholds
LEARNING_EASINESS = 2.0
LEARNING_REPETITIONS = 3
MATURE_EASINESS = 2.5
MATURE_REPETITIONS = 7


def compute_card_mastery(
    repetition_count: int,
    difficulty_rating: int,
    interval_days: int,
    config: Optional[MasteryConfig] = None,
) -> float:
    """Compute mastery for one card.

    Args:
        repetition_count: Consecutive successful reviews
        difficulty_rating: Last difficulty on the 1-5 scale (1 = very easy)
        interval_days: Current review interval
        config: Caps and weights

    Returns:
        Mastery in [0, 1]

    Raises:
        InvalidStateError: If any input is negative

    Examples:
        >>> compute_card_mastery(10, 1, 30)
        1.0
        >>> compute_card_mastery(0, 5, 0)
        0.06
    """
    cfg = config or DEFAULT_CONFIG
    for name, value in (
        ("repetition_count", repetition_count),
        ("difficulty_rating", difficulty_rating),
        ("interval_days", interval_days),
    ):
        if value < 0:
            raise InvalidStateError(
                f"{name} must be non-negative, got {value}", field=name, value=value
            )

    repetition_factor = min(repetition_count / cfg.repetition_cap, 1.0)
    difficulty_factor = (6 - difficulty_rating) / 5
    interval_factor = min(interval_days / cfg.interval_cap_days, 1.0)

    score = (
        cfg.repetition_weight * repetition_factor
        + cfg.difficulty_weight * difficulty_factor
        + cfg.interval_weight * interval_factor
    )
    return max(0.0, min(1.0, score))


def card_mastery(state: CardState, config: Optional[MasteryConfig] = None) -> float:
    """Mastery of a card state.

    Cards that were never rated use the neutral difficulty (3).
    """
    cfg = config or DEFAULT_CONFIG
    difficulty = (
        state.last_difficulty
        if state.last_difficulty is not None
        else cfg.neutral_difficulty
    )
    return compute_card_mastery(
        state.repetition_count, difficulty, state.interval_days, cfg
    )


@dataclass
class MasteryAccumulator:
    """Partial sum of card mastery scores.

    Accumulators for disjoint card sets merge into the accumulator of
    their union; the order of merging does not matter.
    """

    total: float = 0.0
    count: int = 0

    def add(self, score: float) -> "MasteryAccumulator":
        self.total += score
        self.count += 1
        return self

    def add_state(
        self, state: CardState, config: Optional[MasteryConfig] = None
    ) -> "MasteryAccumulator":
        return self.add(card_mastery(state, config))

    def merge(self, other: "MasteryAccumulator") -> "MasteryAccumulator":
        """Return the combined accumulator (inputs are left unchanged)."""
        return MasteryAccumulator(self.total + other.total, self.count + other.count)

    @property
    def mean(self) -> float:
        """Mean mastery, 0.0 when nothing was accumulated."""
        if self.count == 0:
            return 0.0
        return self.total / self.count


def aggregate_topic_mastery(
    cards: Iterable[CardState], config: Optional[MasteryConfig] = None
) -> float:
    """Mean mastery over a topic's cards.

    Args:
        cards: Card states tagged with the topic
        config: Caps and weights

    Returns:
        Mean mastery in [0, 1], 0.0 for an empty topic
    """
    acc = MasteryAccumulator()
    for state in cards:
        acc.add_state(state, config)
    return acc.mean


def mastery_by_topic(
    flashcards: Sequence[Flashcard],
    topic_ids: Optional[Iterable[str]] = None,
    config: Optional[MasteryConfig] = None,
) -> List[TopicMastery]:
    """Aggregate mastery per topic.

    Args:
        flashcards: Cards to group by topic_id (untagged cards are skipped)
        topic_ids: Topics to always report, even with no cards
        config: Caps and weights

    Returns:
        TopicMastery per topic, requested topics first, then the rest sorted
    """
    groups: Dict[str, MasteryAccumulator] = OrderedDict()
    for topic_id in topic_ids or ():
        groups.setdefault(topic_id, MasteryAccumulator())

    extra: Dict[str, MasteryAccumulator] = {}
    for card in flashcards:
        if card.topic_id is None:
            continue
        target = groups if card.topic_id in groups else extra
        target.setdefault(card.topic_id, MasteryAccumulator()).add_state(
            card.state, config
        )

    ordered = list(groups.items()) + sorted(extra.items())
    return [
        TopicMastery(topic_id=topic_id, mastery_score=acc.mean, card_count=acc.count)
        for topic_id, acc in ordered
    ]


def classify_card(state: CardState) -> CardStatus:
    """Classify a card by its scheduling state.

    - NEW: no successful repetitions yet
    - LEARNING: EF < 2.0 or fewer than 3 repetitions
    - MATURE: EF >= 2.5 and at least 7 repetitions
    - REVIEWING: everything else
    """
    if state.repetition_count == 0:
        return CardStatus.NEW
    if (
        state.easiness_factor < LEARNING_EASINESS
        or state.repetition_count < LEARNING_REPETITIONS
    ):
        return CardStatus.LEARNING
    if (
        state.easiness_factor >= MATURE_EASINESS
        and state.repetition_count >= MATURE_REPETITIONS
    ):
        return CardStatus.MATURE
    return CardStatus.REVIEWING


__all__ = [
    "MasteryAccumulator",
    "compute_card_mastery",
    "card_mastery",
    "aggregate_topic_mastery",
    "mastery_by_topic",
    "classify_card",
]
