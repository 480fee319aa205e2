"""Session tracker with undo stack for review sessions.

Tracks review session state with in-memory undo functionality so that a
learner can correct a recent rating. Undo history is session-only and not
persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from recallforge.core.constants import SUCCESS_THRESHOLD
from recallforge.study.models import CardState


@dataclass
class ReviewAction:
    """Represents a single review action that can be undone.

    Attributes:
        card_id: ID of the reviewed card
        quality: SM-2 quality (0-5 scale)
        timestamp: When the review occurred
        prev_state: Card state before this review (for undo)
    """

    card_id: str
    quality: int
    timestamp: datetime = field(default_factory=datetime.now)
    prev_state: Optional[CardState] = None


class SessionTracker:
    """Tracks a review session with undo capability.

    Attributes:
        start_time: When the session started
        actions: List of review actions (undo stack)
        max_undo: Maximum number of undoable actions
    """

    DEFAULT_MAX_UNDO = 50

    def __init__(
        self,
        max_undo: int = DEFAULT_MAX_UNDO,
        success_threshold: int = SUCCESS_THRESHOLD,
    ) -> None:
        self.start_time = datetime.now()
        self.actions: List[ReviewAction] = []
        self.max_undo = max_undo
        self.success_threshold = success_threshold
        self._rating_counts: Dict[int, int] = {}

    def record_review(
        self,
        card_id: str,
        quality: int,
        prev_state: Optional[CardState] = None,
        timestamp: Optional[datetime] = None,
    ) -> ReviewAction:
        """Record a review action.

        Args:
            card_id: ID of the reviewed card
            quality: SM-2 quality (0-5)
            prev_state: Card state before review (for undo)
            timestamp: Review time, defaults to now

        Returns:
            The recorded ReviewAction
        """
        action = ReviewAction(
            card_id=card_id,
            quality=int(quality),
            prev_state=prev_state,
        )
        if timestamp is not None:
            action.timestamp = timestamp

        self.actions.append(action)
        self._rating_counts[action.quality] = (
            self._rating_counts.get(action.quality, 0) + 1
        )

        # Oldest actions fall off the undo stack; session counts are kept
        if len(self.actions) > self.max_undo:
            self.actions.pop(0)

        return action

    def undo(self) -> Optional[ReviewAction]:
        """Undo the most recent review.

        Returns:
            The undone ReviewAction, or None if stack is empty
        """
        if not self.actions:
            return None

        action = self.actions.pop()

        if action.quality in self._rating_counts:
            self._rating_counts[action.quality] -= 1
            if self._rating_counts[action.quality] <= 0:
                del self._rating_counts[action.quality]

        return action

    def can_undo(self) -> bool:
        return len(self.actions) > 0

    def get_last_action(self) -> Optional[ReviewAction]:
        """Get the most recent action without removing it."""
        if not self.actions:
            return None
        return self.actions[-1]

    @property
    def cards_reviewed(self) -> int:
        """Total cards reviewed this session."""
        return sum(self._rating_counts.values())

    @property
    def rating_counts(self) -> Dict[int, int]:
        return self._rating_counts.copy()

    @property
    def correct_count(self) -> int:
        """Count of successful ratings."""
        return sum(
            count
            for quality, count in self._rating_counts.items()
            if quality >= self.success_threshold
        )

    @property
    def accuracy(self) -> float:
        """Percentage of successful ratings."""
        total = self.cards_reviewed
        if total == 0:
            return 0.0
        return (self.correct_count / total) * 100

    @property
    def session_duration_seconds(self) -> float:
        return (datetime.now() - self.start_time).total_seconds()

    def get_session_stats(self) -> Dict[str, Any]:
        """Get comprehensive session statistics."""
        return {
            "start_time": self.start_time.isoformat(),
            "duration_seconds": self.session_duration_seconds,
            "cards_reviewed": self.cards_reviewed,
            "correct_count": self.correct_count,
            "accuracy": round(self.accuracy, 1),
            "rating_breakdown": self._rating_counts.copy(),
            "undo_available": self.can_undo(),
            "undo_stack_size": len(self.actions),
        }

    def reset(self) -> None:
        """Reset the session tracker for a new session."""
        self.start_time = datetime.now()
        self.actions.clear()
        self._rating_counts.clear()


__all__ = ["ReviewAction", "SessionTracker"]
