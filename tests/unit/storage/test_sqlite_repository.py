"""Tests for the SQLite card repository."""

import sqlite3
from datetime import timedelta

import pytest

from recallforge.core.exceptions import CardNotFoundError, InvalidStateError, StorageError
from recallforge.storage.sqlite import SQLiteCardRepository
from recallforge.study.models import ReviewLogEntry
from recallforge.study.scheduler import schedule_next_review


class TestSQLiteCardRepository:
    def test_creates_database(self, sqlite_repo) -> None:
        assert sqlite_repo.db_path.exists()
        with sqlite3.connect(sqlite_repo.db_path) as conn:
            tables = {
                row[0]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        assert {"cards", "review_history"} <= tables

    def test_save_and_get(self, sqlite_repo, make_card, make_state) -> None:
        card = make_card("c1", state=make_state(repetition_count=2, interval_days=6))
        sqlite_repo.save(card)
        assert sqlite_repo.get("c1") == card

    def test_save_replaces(self, sqlite_repo, make_card, t0) -> None:
        card = make_card("c1")
        sqlite_repo.save(card)
        reviewed = card.with_state(schedule_next_review(card.state, 5, t0))
        sqlite_repo.save(reviewed)

        assert sqlite_repo.count() == 1
        assert sqlite_repo.get("c1").state == reviewed.state

    def test_get_missing(self, sqlite_repo) -> None:
        with pytest.raises(CardNotFoundError):
            sqlite_repo.get("missing")

    def test_persists_across_instances(self, sqlite_repo, make_card) -> None:
        sqlite_repo.save(make_card("c1", "bio"))
        reopened = SQLiteCardRepository(sqlite_repo.db_path)
        assert [c.card_id for c in reopened.list_cards("bio")] == ["c1"]

    def test_list_due(self, sqlite_repo, make_card, make_state, t0) -> None:
        sqlite_repo.save(make_card("later", state=make_state(interval_days=4)))
        sqlite_repo.save(make_card("now"))
        assert [c.card_id for c in sqlite_repo.list_due(t0)] == ["now"]
        assert [c.card_id for c in sqlite_repo.list_due(t0 + timedelta(days=5))] == [
            "now",
            "later",
        ]

    def test_history(self, sqlite_repo, make_card, t0) -> None:
        sqlite_repo.save(make_card("a"))
        sqlite_repo.record_review(ReviewLogEntry("a", 4, t0, 0, 1, 2.5, 2.5))
        sqlite_repo.record_review(ReviewLogEntry("a", 5, t0, 1, 6, 2.5, 2.6))

        history = sqlite_repo.review_history("a")
        assert [e.rating for e in history] == [4, 5]
        assert history[1].easiness_after == pytest.approx(2.6)
        assert history[0].reviewed_at == t0

        assert sqlite_repo.remove_last_review("a")
        assert [e.rating for e in sqlite_repo.review_history()] == [4]

    def test_delete(self, sqlite_repo, make_card) -> None:
        sqlite_repo.save(make_card("a"))
        assert sqlite_repo.delete("a")
        assert not sqlite_repo.delete("a")
        assert sqlite_repo.count() == 0

    def test_corrupt_row_rejected(self, sqlite_repo, make_card) -> None:
        sqlite_repo.save(make_card("a"))
        with sqlite3.connect(sqlite_repo.db_path) as conn:
            conn.execute("UPDATE cards SET interval_days = -4 WHERE card_id = 'a'")
        with pytest.raises(InvalidStateError):
            sqlite_repo.get("a")

    def test_unusable_path(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StorageError):
            SQLiteCardRepository(blocker / "reviews.db")
