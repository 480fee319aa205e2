"""
Base Interface for Card Storage.

This module defines the CardRepository interface that all storage adapters
must implement. The scheduling core never touches storage itself: the review
service loads a card, hands its state to the scheduler and saves the result.

Architecture Context
--------------------
    ┌─────────────────┐     ┌─────────────────┐
    │  ReviewService  │     │      CLI        │
    └────────┬────────┘     └────────┬────────┘
             └───────────┬───────────┘
              ┌──────────┴──────────┐
              │   CardRepository    │
              │   (abstract base)   │
              └──────────┬──────────┘
             ┌───────────┴───────────┐
             ↓                       ↓
       ┌───────────┐           ┌───────────┐
       │ In-memory │           │  SQLite   │
       └───────────┘           └───────────┘

Interface Contract
------------------
- get(): Retrieve by ID, raising CardNotFoundError if absent
- save(): Insert or replace a card
- delete(): Remove a card and its history
- list_cards(): All cards, optionally for one topic
- list_due(): Cards due at a given time, most overdue first
- record_review(): Append to the review history
- review_history(): Review log, oldest first
- remove_last_review(): Drop the newest entry for a card

Adapters assume at most one writer per card at a time.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from recallforge.study.models import Flashcard, ReviewLogEntry, sort_by_due_date


class CardRepository(ABC):
    """Abstract storage for flashcards and their review history."""

    @abstractmethod
    def get(self, card_id: str) -> Flashcard:
        """Get a card by ID.

        Raises:
            CardNotFoundError: If no card has this ID
        """

    @abstractmethod
    def save(self, card: Flashcard) -> None:
        """Insert or replace a card."""

    @abstractmethod
    def delete(self, card_id: str) -> bool:
        """Delete a card. Returns False if it did not exist."""

    @abstractmethod
    def list_cards(self, topic_id: Optional[str] = None) -> List[Flashcard]:
        """List cards, optionally restricted to one topic."""

    @abstractmethod
    def record_review(self, entry: ReviewLogEntry) -> None:
        """Append an entry to the review history."""

    @abstractmethod
    def remove_last_review(self, card_id: str) -> bool:
        """Drop the newest history entry for a card (used by undo)."""

    @abstractmethod
    def review_history(self, card_id: Optional[str] = None) -> List[ReviewLogEntry]:
        """Get review history, oldest first."""

    def list_due(
        self, now: datetime, topic_id: Optional[str] = None
    ) -> List[Flashcard]:
        """Cards due at `now`, ordered by next review date."""
        due = [card for card in self.list_cards(topic_id) if card.state.is_due(now)]
        return sort_by_due_date(due)

    def count(self) -> int:
        return len(self.list_cards())
