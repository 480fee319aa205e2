"""Review service.

Application-level workflow around the pure scheduler: load a card from the
injected repository, schedule it, persist the new state and log the review.
The service also keeps the session undo stack.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from recallforge.core.config import Config
from recallforge.core.exceptions import StorageError, ValidationError
from recallforge.core.logging import ReviewLogger, get_logger
from recallforge.study.due_check import select_due_cards
from recallforge.study.models import (
    Flashcard,
    Rating,
    ReviewLogEntry,
    to_naive_utc,
    utc_now,
)
from recallforge.study.scheduler import schedule_next_review
from recallforge.study.session_tracker import SessionTracker

if TYPE_CHECKING:
    from recallforge.storage.base import CardRepository

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class ReviewService:
    """Coordinates reviews between the scheduler and a card repository.

    Example:
        service = ReviewService(InMemoryCardRepository())
        card = service.add_card("mitochondria", "powerhouse of the cell")
        card = service.review(card.card_id, Rating.GOOD)
    """

    def __init__(
        self,
        repository: "CardRepository",
        config: Optional[Config] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.repository = repository
        self.config = config or Config()
        self.clock: Clock = clock or utc_now
        self.session = SessionTracker(
            success_threshold=self.config.scheduler.success_threshold
        )
        self.session_id = uuid.uuid4().hex[:8]
        self._review_log = ReviewLogger(self.session_id)

    def add_card(
        self,
        front: str,
        back: str,
        topic_id: Optional[str] = None,
        card_id: Optional[str] = None,
    ) -> Flashcard:
        """Create and store a new card, due immediately.

        Raises:
            ValidationError: If front or back is empty
        """
        if not front.strip() or not back.strip():
            raise ValidationError(
                "Card front and back must not be empty",
                field="front" if not front.strip() else "back",
            )
        card = Flashcard.create(
            front=front.strip(),
            back=back.strip(),
            now=to_naive_utc(self.clock()),
            topic_id=topic_id,
            card_id=card_id,
            initial_easiness_factor=self.config.scheduler.initial_easiness_factor,
        )
        self.repository.save(card)
        logger.info("Card added", card_id=card.card_id, topic=topic_id)
        return card

    def review(
        self,
        card_id: str,
        rating: Union[Rating, int],
        now: Optional[datetime] = None,
    ) -> Flashcard:
        """Apply a rating to a stored card.

        Args:
            card_id: Card to review
            rating: Recall quality on the 0-5 scale
            now: Review time, defaults to the service clock

        Returns:
            The card with its new scheduling state

        Raises:
            CardNotFoundError: If the card does not exist
            InvalidRatingError: If the rating is out of range
            InvalidStateError: If the stored state is corrupt
            StorageError: If either write fails. The history entry is
                written first and removed again when the card save fails;
                the two writes are not one transaction.
        """
        quality = Rating.parse(rating)
        reviewed_at = to_naive_utc(now or self.clock())
        card = self.repository.get(card_id)

        new_state = schedule_next_review(
            card.state, quality, reviewed_at, self.config.scheduler
        )
        updated = card.with_state(new_state)
        # A failed save removes the history entry again.
        self.repository.record_review(
            ReviewLogEntry(
                card_id=card_id,
                rating=int(quality),
                reviewed_at=reviewed_at,
                interval_before=card.state.interval_days,
                interval_after=new_state.interval_days,
                easiness_before=card.state.easiness_factor,
                easiness_after=new_state.easiness_factor,
            )
        )
        try:
            self.repository.save(updated)
        except StorageError:
            self.repository.remove_last_review(card_id)
            raise
        self.session.record_review(
            card_id, int(quality), prev_state=card.state, timestamp=reviewed_at
        )
        self._review_log.log_review(
            card_id,
            quality=int(quality),
            interval_days=new_state.interval_days,
            repetitions=new_state.repetition_count,
        )
        return updated

    def undo_last(self) -> Optional[Flashcard]:
        """Undo the most recent review of this session.

        Returns:
            The card restored to its previous state, or None if there is
            nothing to undo
        """
        action = self.session.undo()
        if action is None or action.prev_state is None:
            return None

        card = self.repository.get(action.card_id)
        restored = card.with_state(action.prev_state)
        self.repository.save(restored)
        self.repository.remove_last_review(action.card_id)
        self._review_log.log_undo(action.card_id)
        return restored

    def due_cards(
        self,
        topic_id: Optional[str] = None,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Flashcard]:
        """Cards due now, most overdue first."""
        return select_due_cards(
            self.repository.list_cards(topic_id),
            to_naive_utc(now or self.clock()),
            topic_id=topic_id,
            limit=limit,
        )

    def finish(self) -> None:
        """Log the end of the review session."""
        self._review_log.finish()


__all__ = ["ReviewService"]
