"""Domain models for spaced repetition.

Defines the closed rating scale, the per-card scheduling state and the
derived value objects produced by retention and mastery estimation.

All models are immutable: the scheduler returns a new CardState on every
review and never mutates its input."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Union

from recallforge.core.constants import (
    DIFFICULTY_RANGE,
    INITIAL_EASINESS_FACTOR,
    MAX_RATING,
    MIN_EASINESS_FACTOR,
    MIN_RATING,
    SUCCESS_THRESHOLD,
)
from recallforge.core.exceptions import InvalidRatingError, InvalidStateError

SECONDS_PER_DAY = 86400


class Rating(IntEnum):
    """Recall quality on the SM-2 0-5 scale.

    - 0: Complete blackout, no recall
    - 1: Incorrect, but correct answer remembered
    - 2: Incorrect, but correct answer seemed easy to recall
    - 3: Correct with serious difficulty
    - 4: Correct with some hesitation
    - 5: Perfect recall
    """

    BLACKOUT = 0
    INCORRECT = 1
    INCORRECT_EASY = 2
    HARD = 3
    GOOD = 4
    PERFECT = 5

    @property
    def is_success(self) -> bool:
        """True for ratings at or above the default success threshold."""
        return self.is_success_at(SUCCESS_THRESHOLD)

    def is_success_at(self, threshold: int) -> bool:
        """True for ratings at or above a configured success threshold."""
        return self.value >= threshold

    @classmethod
    def parse(cls, value: Union["Rating", int]) -> "Rating":
        """Validate a raw rating at the boundary.

        Args:
            value: Rating or plain integer on the 0-5 scale

        Returns:
            The matching Rating

        Raises:
            InvalidRatingError: If value is not an integer in 0-5
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRatingError(
                f"Rating must be an integer {MIN_RATING}-{MAX_RATING}, "
                f"got {value!r}",
                field="rating",
                value=value,
            )
        if not MIN_RATING <= value <= MAX_RATING:
            raise InvalidRatingError(
                f"Rating must be an integer {MIN_RATING}-{MAX_RATING}, got {value}",
                field="rating",
                value=value,
            )
        return cls(value)

    @classmethod
    def from_difficulty(cls, difficulty: int) -> "Rating":
        """Convert a 1-5 difficulty rating (1 = very easy) to recall quality.

        Raises:
            InvalidRatingError: If difficulty is not an integer in 1-5
        """
        low, high = DIFFICULTY_RANGE
        if (
            isinstance(difficulty, bool)
            or not isinstance(difficulty, int)
            or not low <= difficulty <= high
        ):
            raise InvalidRatingError(
                f"Difficulty must be an integer {low}-{high}, got {difficulty!r}",
                field="difficulty",
                value=difficulty,
            )
        return cls(6 - difficulty)

    def to_difficulty(self) -> int:
        """Convert to the 1-5 difficulty scale (blackout maps to 5)."""
        return min(DIFFICULTY_RANGE[1], 6 - self.value)


class CardStatus(Enum):
    """Card classification derived from its scheduling state."""

    NEW = "new"  # Never successfully reviewed
    LEARNING = "learning"  # EF < 2.0 or reps < 3
    REVIEWING = "reviewing"  # Normal state
    MATURE = "mature"  # EF >= 2.5 and reps >= 7


@dataclass(frozen=True)
class CardState:
    """SM-2 scheduling state owned 1:1 by a flashcard.

    Attributes:
        easiness_factor: Interval growth multiplier (never below the floor)
        repetition_count: Consecutive successful reviews since the last reset
        interval_days: Gap used to compute next_review_date
        last_reviewed_at: Time of the last review, None if never reviewed
        next_review_date: When the card is due
        last_difficulty: 1-5 difficulty of the last review, None if never rated
    """

    easiness_factor: float
    repetition_count: int
    interval_days: int
    next_review_date: datetime
    last_reviewed_at: Optional[datetime] = None
    last_difficulty: Optional[int] = None

    @classmethod
    def new(
        cls,
        now: datetime,
        initial_easiness_factor: float = INITIAL_EASINESS_FACTOR,
    ) -> "CardState":
        """Create the state of a freshly created card (due immediately)."""
        return cls(
            easiness_factor=initial_easiness_factor,
            repetition_count=0,
            interval_days=0,
            next_review_date=now,
        )

    @property
    def is_new(self) -> bool:
        """True if the card has never been reviewed."""
        return self.last_reviewed_at is None

    def is_due(self, now: datetime) -> bool:
        """Check whether the card should be shown at `now`."""
        return self.next_review_date <= now

    def days_since_review(self, now: datetime) -> Optional[int]:
        """Whole days elapsed since the last review.

        Returns None for a never-reviewed card. Negative elapsed time
        (clock skew between writers) counts as zero.
        """
        if self.last_reviewed_at is None:
            return None
        elapsed = (now - self.last_reviewed_at).total_seconds()
        return max(0, math.floor(elapsed / SECONDS_PER_DAY))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "easiness_factor": round(self.easiness_factor, 4),
            "repetition_count": self.repetition_count,
            "interval_days": self.interval_days,
            "last_reviewed_at": (
                self.last_reviewed_at.isoformat() if self.last_reviewed_at else None
            ),
            "next_review_date": self.next_review_date.isoformat(),
            "last_difficulty": self.last_difficulty,
        }


def validate_state(
    state: CardState, min_easiness_factor: float = MIN_EASINESS_FACTOR
) -> CardState:
    """Check a CardState against its invariants.

    Args:
        state: State loaded from storage or built by a caller
        min_easiness_factor: Configured easiness floor

    Returns:
        The same state, for chaining

    Raises:
        InvalidStateError: On the first violated invariant
    """
    ef = state.easiness_factor
    if not isinstance(ef, (int, float)) or math.isnan(ef) or math.isinf(ef):
        raise InvalidStateError(
            f"easiness_factor must be a finite number, got {ef!r}",
            field="easiness_factor",
            value=ef,
        )
    # Tolerate float noise from values round-tripped through storage
    if ef < min_easiness_factor - 1e-9:
        raise InvalidStateError(
            f"easiness_factor {ef} is below the floor {min_easiness_factor}",
            field="easiness_factor",
            value=ef,
        )
    if state.repetition_count < 0:
        raise InvalidStateError(
            f"repetition_count must be non-negative, got {state.repetition_count}",
            field="repetition_count",
            value=state.repetition_count,
        )
    if state.interval_days < 0:
        raise InvalidStateError(
            f"interval_days must be non-negative, got {state.interval_days}",
            field="interval_days",
            value=state.interval_days,
        )
    if state.last_reviewed_at is not None and state.interval_days < 1:
        raise InvalidStateError(
            "a reviewed card must have interval_days >= 1, "
            f"got {state.interval_days}",
            field="interval_days",
            value=state.interval_days,
        )
    low, high = DIFFICULTY_RANGE
    if state.last_difficulty is not None and not low <= state.last_difficulty <= high:
        raise InvalidStateError(
            f"last_difficulty must be in {low}-{high}, got {state.last_difficulty}",
            field="last_difficulty",
            value=state.last_difficulty,
        )
    return state


@dataclass(frozen=True)
class ReviewEvent:
    """A single rating given by the learner. Consumed once by the scheduler."""

    rating: Rating
    occurred_at: datetime


@dataclass(frozen=True)
class RetentionSnapshot:
    """Estimated probability of recall at a point in time."""

    estimated_retention: float
    days_since_review: Optional[int]


@dataclass(frozen=True)
class TopicMastery:
    """Aggregated mastery for one topic."""

    topic_id: str
    mastery_score: float
    card_count: int = 0


@dataclass(frozen=True)
class Flashcard:
    """A flashcard and the scheduling state it owns.

    Attributes:
        card_id: Unique identifier
        front: Question/term
        back: Answer/definition
        topic_id: Topic the card belongs to (None if untagged)
        state: SM-2 scheduling state
        created_at: Creation time
    """

    card_id: str
    front: str
    back: str
    state: CardState
    topic_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        front: str,
        back: str,
        now: datetime,
        topic_id: Optional[str] = None,
        card_id: Optional[str] = None,
        initial_easiness_factor: float = INITIAL_EASINESS_FACTOR,
    ) -> "Flashcard":
        """Create a new flashcard that is due immediately."""
        return cls(
            card_id=card_id or uuid.uuid4().hex,
            front=front,
            back=back,
            topic_id=topic_id,
            state=CardState.new(now, initial_easiness_factor),
            created_at=now,
        )

    def with_state(self, state: CardState) -> "Flashcard":
        """Return a copy carrying a new scheduling state."""
        return replace(self, state=state)


@dataclass(frozen=True)
class ReviewLogEntry:
    """Persisted record of one review, kept by storage adapters."""

    card_id: str
    rating: int
    reviewed_at: datetime
    interval_before: int
    interval_after: int
    easiness_before: float
    easiness_after: float

    def is_successful(self, threshold: int = SUCCESS_THRESHOLD) -> bool:
        return self.rating >= threshold


def to_naive_utc(value: datetime) -> datetime:
    """Normalize a timestamp to naive UTC.

    Stored timestamps are naive UTC. Aware values are converted; naive values
    are assumed to already follow the convention.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def sort_by_due_date(cards: List[Flashcard]) -> List[Flashcard]:
    """Order cards by due date, ties broken by card id."""
    return sorted(cards, key=lambda card: (card.state.next_review_date, card.card_id))


__all__ = [
    "Rating",
    "CardStatus",
    "CardState",
    "ReviewEvent",
    "RetentionSnapshot",
    "TopicMastery",
    "Flashcard",
    "ReviewLogEntry",
    "validate_state",
    "sort_by_due_date",
    "to_naive_utc",
    "utc_now",
]
