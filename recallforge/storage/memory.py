"""
In-memory card storage.

Dict-backed repository for tests and short-lived sessions. Nothing is
persisted; each instance owns its own data.
"""

from typing import Dict, List, Optional

from recallforge.core.exceptions import CardNotFoundError
from recallforge.storage.base import CardRepository
from recallforge.study.models import Flashcard, ReviewLogEntry


class InMemoryCardRepository(CardRepository):
    """Card repository kept in process memory."""

    def __init__(self) -> None:
        self._cards: Dict[str, Flashcard] = {}
        self._history: List[ReviewLogEntry] = []

    def get(self, card_id: str) -> Flashcard:
        try:
            return self._cards[card_id]
        except KeyError:
            raise CardNotFoundError(card_id) from None

    def save(self, card: Flashcard) -> None:
        self._cards[card.card_id] = card

    def delete(self, card_id: str) -> bool:
        if card_id not in self._cards:
            return False
        del self._cards[card_id]
        self._history = [e for e in self._history if e.card_id != card_id]
        return True

    def list_cards(self, topic_id: Optional[str] = None) -> List[Flashcard]:
        cards = list(self._cards.values())
        if topic_id is not None:
            cards = [card for card in cards if card.topic_id == topic_id]
        return cards

    def record_review(self, entry: ReviewLogEntry) -> None:
        self._history.append(entry)

    def remove_last_review(self, card_id: str) -> bool:
        for index in range(len(self._history) - 1, -1, -1):
            if self._history[index].card_id == card_id:
                del self._history[index]
                return True
        return False

    def review_history(self, card_id: Optional[str] = None) -> List[ReviewLogEntry]:
        if card_id is None:
            return list(self._history)
        return [entry for entry in self._history if entry.card_id == card_id]

    def clear(self) -> None:
        """Remove all cards and history."""
        self._cards.clear()
        self._history.clear()
