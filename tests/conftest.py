"""
Shared pytest fixtures and configuration for RecallForge tests.

This file is automatically discovered by pytest and provides fixtures
that can be used across all test files.

Fixture Organization
--------------------
- **t0**: Fixed reference time; the core never reads the wall clock
- **make_state / make_card**: Builders for card states and flashcards
- **memory_repo / sqlite_repo**: Storage adapters
- **clean_env**: Removes RECALLFORGE_* overrides for every test
"""

import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

import pytest

from recallforge.storage.memory import InMemoryCardRepository
from recallforge.storage.sqlite import SQLiteCardRepository
from recallforge.study.models import CardState, Flashcard


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment overrides out of the tests."""
    for name in list(os.environ):
        if name.startswith("RECALLFORGE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def t0() -> datetime:
    """Reference review time."""
    return datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def make_state(t0: datetime) -> Callable[..., CardState]:
    """Build a CardState reviewed `days_ago` days before t0.

    Example:
        state = make_state(repetition_count=3, interval_days=15, days_ago=2)
    """

    def _make(
        easiness_factor: float = 2.5,
        repetition_count: int = 0,
        interval_days: int = 1,
        days_ago: Optional[float] = 0,
        last_difficulty: Optional[int] = None,
    ) -> CardState:
        if days_ago is None:
            return CardState.new(t0, easiness_factor)
        reviewed = t0 - timedelta(days=days_ago)
        return CardState(
            easiness_factor=easiness_factor,
            repetition_count=repetition_count,
            interval_days=interval_days,
            next_review_date=reviewed + timedelta(days=interval_days),
            last_reviewed_at=reviewed,
            last_difficulty=last_difficulty,
        )

    return _make


@pytest.fixture
def make_card(t0: datetime) -> Callable[..., Flashcard]:
    """Build a Flashcard, optionally with a prepared state."""

    def _make(
        card_id: str = "card-1",
        topic_id: Optional[str] = "biology",
        state: Optional[CardState] = None,
        front: str = "What is ATP?",
        back: str = "Adenosine triphosphate",
    ) -> Flashcard:
        card = Flashcard.create(front, back, t0, topic_id=topic_id, card_id=card_id)
        if state is not None:
            card = card.with_state(state)
        return card

    return _make


@pytest.fixture
def memory_repo() -> InMemoryCardRepository:
    return InMemoryCardRepository()


@pytest.fixture
def sqlite_repo(tmp_path: Path) -> SQLiteCardRepository:
    return SQLiteCardRepository(tmp_path / ".data" / "reviews.db")
