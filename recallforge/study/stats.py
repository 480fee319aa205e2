"""Learning statistics aggregator.

Summarizes study progress over a set of flashcards:
- Cards due, new, learning, mastered and struggling
- Average easiness, retention and mastery
- Learning efficiency and a recommended daily review load
- Per-topic breakdown"""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from recallforge.core.config import Config
from recallforge.core.logging import get_logger
from recallforge.study.mastery import MasteryAccumulator, card_mastery, classify_card
from recallforge.study.models import CardStatus, Flashcard
from recallforge.study.retention import estimate_retention

logger = get_logger(__name__)

# Recommended daily reviews are kept within these bounds
MIN_DAILY_REVIEWS = 5
MAX_DAILY_REVIEWS = 20
DAILY_REVIEW_FRACTION = 0.2


@dataclass
class TopicStats:
    """Statistics for a single topic.

    Attributes:
        topic_id: Topic identifier
        total_cards: Total cards in topic
        due_cards: Cards due for review
        mastery: Mean card mastery
        average_easiness: Mean easiness factor
        average_retention: Mean estimated retention
    """

    topic_id: str
    total_cards: int = 0
    due_cards: int = 0
    mastery: float = 0.0
    average_easiness: float = 0.0
    average_retention: float = 0.0


@dataclass
class LearningStats:
    """Aggregate learning statistics."""

    total_cards: int = 0
    due_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    mastered_cards: int = 0
    struggling_cards: int = 0
    average_easiness: float = 0.0
    average_retention: float = 0.0
    average_mastery: float = 0.0
    learning_efficiency: float = 0.0
    recommended_daily_reviews: int = 0
    status_distribution: Dict[CardStatus, int] = field(default_factory=dict)
    topics: List[TopicStats] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "total_cards": self.total_cards,
            "due_cards": self.due_cards,
            "new_cards": self.new_cards,
            "learning_cards": self.learning_cards,
            "mastered_cards": self.mastered_cards,
            "struggling_cards": self.struggling_cards,
            "average_easiness": round(self.average_easiness, 4),
            "average_retention": round(self.average_retention, 4),
            "average_mastery": round(self.average_mastery, 4),
            "learning_efficiency": round(self.learning_efficiency, 4),
            "recommended_daily_reviews": self.recommended_daily_reviews,
            "status_distribution": {
                status.value: count
                for status, count in self.status_distribution.items()
            },
            "topics": [
                {
                    "topic_id": topic.topic_id,
                    "total_cards": topic.total_cards,
                    "due_cards": topic.due_cards,
                    "mastery": round(topic.mastery, 4),
                    "average_easiness": round(topic.average_easiness, 4),
                    "average_retention": round(topic.average_retention, 4),
                }
                for topic in self.topics
            ],
        }


def learning_efficiency(mastered: int, struggling: int) -> float:
    """Share of mastered cards among mastered and struggling cards.

    Returns 1.0 when only mastered cards exist and 0.0 when neither does.
    """
    if mastered + struggling == 0:
        return 0.0
    return mastered / (mastered + struggling)


def recommended_daily_reviews(total_cards: int, efficiency: float) -> int:
    """Daily review load: a fifth of the unmastered share, within 5-20."""
    if total_cards == 0:
        return 0
    wanted = math.ceil(total_cards * (1 - efficiency) * DAILY_REVIEW_FRACTION)
    return max(MIN_DAILY_REVIEWS, min(MAX_DAILY_REVIEWS, wanted))


class StatsAggregator:
    """Aggregates learning statistics from flashcards.

    Collects metrics for the stats dashboard.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        """Initialize stats aggregator.

        Args:
            config: Application config (mastery thresholds, retention strategy)
        """
        self.config = config or Config()

    def collect(self, flashcards: Sequence[Flashcard], now: datetime) -> LearningStats:
        """Get comprehensive learning statistics.

        Args:
            flashcards: Cards to summarize
            now: Evaluation time

        Returns:
            LearningStats with all metrics (zeros for no cards)
        """
        stats = LearningStats()
        if not flashcards:
            return stats

        mastery_cfg = self.config.mastery
        strategy = self.config.retention.strategy

        statuses: Counter = Counter()
        mastery = MasteryAccumulator()
        retention_total = 0.0
        easiness_total = 0.0
        by_topic: Dict[str, List[Flashcard]] = defaultdict(list)

        for card in flashcards:
            state = card.state
            score = card_mastery(state, mastery_cfg)
            mastery.add(score)
            retention_total += estimate_retention(state, now, strategy)
            easiness_total += state.easiness_factor
            statuses[classify_card(state)] += 1

            if state.is_due(now):
                stats.due_cards += 1
            if (
                state.repetition_count >= mastery_cfg.mastered_repetitions
                and score >= mastery_cfg.mastered_threshold
            ):
                stats.mastered_cards += 1
            if (
                state.easiness_factor < mastery_cfg.struggling_easiness
                and state.repetition_count >= mastery_cfg.struggling_repetitions
            ):
                stats.struggling_cards += 1
            if card.topic_id is not None:
                by_topic[card.topic_id].append(card)

        total = len(flashcards)
        stats.total_cards = total
        stats.new_cards = statuses[CardStatus.NEW]
        stats.learning_cards = statuses[CardStatus.LEARNING]
        stats.average_easiness = easiness_total / total
        stats.average_retention = retention_total / total
        stats.average_mastery = mastery.mean
        stats.learning_efficiency = learning_efficiency(
            stats.mastered_cards, stats.struggling_cards
        )
        stats.recommended_daily_reviews = recommended_daily_reviews(
            total, stats.learning_efficiency
        )
        stats.status_distribution = {status: statuses[status] for status in CardStatus}
        stats.topics = [
            self._topic_stats(topic_id, cards, now)
            for topic_id, cards in sorted(by_topic.items())
        ]

        logger.debug(
            "Collected learning stats",
            cards=total,
            due=stats.due_cards,
            mastered=stats.mastered_cards,
        )
        return stats

    def _topic_stats(
        self, topic_id: str, cards: List[Flashcard], now: datetime
    ) -> TopicStats:
        """Get statistics for one topic."""
        strategy = self.config.retention.strategy
        acc = MasteryAccumulator()
        for card in cards:
            acc.add_state(card.state, self.config.mastery)
        count = len(cards)
        return TopicStats(
            topic_id=topic_id,
            total_cards=count,
            due_cards=sum(1 for card in cards if card.state.is_due(now)),
            mastery=acc.mean,
            average_easiness=sum(c.state.easiness_factor for c in cards) / count,
            average_retention=sum(
                estimate_retention(c.state, now, strategy) for c in cards
            )
            / count,
        )


__all__ = [
    "TopicStats",
    "LearningStats",
    "StatsAggregator",
    "learning_efficiency",
    "recommended_daily_reviews",
]
