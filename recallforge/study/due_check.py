"""Due cards checker.

Selects and counts the cards that should be shown at a given time, and
builds the short notification the CLI prints when reviews are waiting.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from rich.console import Console

from recallforge.core.exceptions import ValidationError
from recallforge.study.models import Flashcard, sort_by_due_date

if TYPE_CHECKING:
    from recallforge.storage.base import CardRepository


def select_due_cards(
    flashcards: Sequence[Flashcard],
    now: datetime,
    topic_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Flashcard]:
    """Pick the cards due at `now`, most overdue first.

    Args:
        flashcards: Candidate cards
        now: Evaluation time
        topic_id: Restrict to one topic
        limit: Maximum number of cards to return

    Returns:
        Due cards ordered by next_review_date (ties by card id)
    """
    if limit is not None and limit < 0:
        raise ValidationError(
            f"limit must be non-negative, got {limit}", field="limit", value=limit
        )

    due = [
        card
        for card in flashcards
        if card.state.is_due(now) and (topic_id is None or card.topic_id == topic_id)
    ]
    ordered = sort_by_due_date(due)
    if limit is not None:
        return ordered[:limit]
    return ordered


def count_due_cards(repository: "CardRepository", now: datetime) -> Tuple[int, int]:
    """Count due cards.

    Args:
        repository: Card storage
        now: Evaluation time

    Returns:
        Tuple of (due_count, total_count)
    """
    cards = repository.list_cards()
    due_count = sum(1 for card in cards if card.state.is_due(now))
    return (due_count, len(cards))


def get_due_notification(due_count: int) -> Optional[str]:
    """Get notification message for due cards.

    Args:
        due_count: Number of due cards

    Returns:
        Notification string or None if no cards due

    Examples:
        >>> get_due_notification(5)
        '5 cards are due for review. Run `recallforge review`'
    """
    if due_count <= 0:
        return None

    if due_count == 1:
        return "1 card is due for review. Run `recallforge review`"
    return f"{due_count} cards are due for review. Run `recallforge review`"


def show_due_notification(
    repository: "CardRepository",
    now: datetime,
    console: Optional[Console] = None,
    quiet: bool = False,
) -> None:
    """Show due cards notification if applicable.

    Args:
        repository: Card storage
        now: Evaluation time
        console: Rich console to print to
        quiet: If True, suppress output
    """
    if quiet:
        return

    due_count, _ = count_due_cards(repository, now)
    notification = get_due_notification(due_count)
    if notification is None:
        return

    (console or Console()).print(f"[dim]{notification}[/dim]")


__all__ = [
    "select_due_cards",
    "count_due_cards",
    "get_due_notification",
    "show_due_notification",
]
