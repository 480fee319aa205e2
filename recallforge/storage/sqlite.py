"""
SQLite card storage.

Stores cards and their review history in a single SQLite file
(``.data/reviews.db`` by default). A connection is opened per call so that
the repository can be shared by short-lived CLI invocations.

Schema
------
    cards           one row per flashcard, scheduling state inline
    review_history  append-only review log

sqlite3 errors are wrapped in StorageError.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional

from recallforge.core.exceptions import CardNotFoundError, StorageError
from recallforge.core.logging import get_logger
from recallforge.storage.base import CardRepository
from recallforge.storage.mapping import (
    card_from_record,
    card_to_record,
    format_timestamp,
    parse_timestamp,
)
from recallforge.study.models import Flashcard, ReviewLogEntry

logger = get_logger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS cards (
        card_id TEXT PRIMARY KEY,
        front TEXT NOT NULL,
        back TEXT NOT NULL,
        topic_id TEXT,
        created_at TEXT,
        easiness_factor REAL NOT NULL DEFAULT 2.5,
        repetition_count INTEGER NOT NULL DEFAULT 0,
        interval_days INTEGER NOT NULL DEFAULT 0,
        next_review_date TEXT NOT NULL,
        last_reviewed_at TEXT,
        last_difficulty INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS review_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        card_id TEXT NOT NULL,
        quality INTEGER NOT NULL,
        reviewed_at TEXT NOT NULL,
        interval_before INTEGER,
        interval_after INTEGER,
        easiness_before REAL,
        easiness_after REAL,
        FOREIGN KEY (card_id) REFERENCES cards(card_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_cards_topic ON cards(topic_id)",
    "CREATE INDEX IF NOT EXISTS idx_history_card ON review_history(card_id)",
)

_CARD_COLUMNS = (
    "card_id",
    "front",
    "back",
    "topic_id",
    "created_at",
    "easiness_factor",
    "repetition_count",
    "interval_days",
    "next_review_date",
    "last_reviewed_at",
    "last_difficulty",
)


class SQLiteCardRepository(CardRepository):
    """SQLite database for cards and review history."""

    def __init__(self, db_path: Path) -> None:
        """Initialize database and schema.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._init_database()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, committing on success."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(
                f"Could not open review database {self.db_path}: {e}"
            ) from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Review database error: {e}") from e
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Could not create data directory {self.db_path.parent}: {e}",
                how_to_fix=["Check permissions on the project data directory"],
            ) from e

        with self._connect() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
        logger.debug("Review database ready", path=str(self.db_path))

    def get(self, card_id: str) -> Flashcard:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM cards WHERE card_id = ?", (card_id,)
            ).fetchone()
        if row is None:
            raise CardNotFoundError(card_id)
        return card_from_record(dict(row))

    def save(self, card: Flashcard) -> None:
        """Save or update a card."""
        record = card_to_record(card)
        placeholders = ", ".join("?" for _ in _CARD_COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO cards ({', '.join(_CARD_COLUMNS)}) "
                f"VALUES ({placeholders})",
                tuple(record[column] for column in _CARD_COLUMNS),
            )

    def delete(self, card_id: str) -> bool:
        with self._connect() as conn:
            conn.execute("DELETE FROM review_history WHERE card_id = ?", (card_id,))
            cursor = conn.execute("DELETE FROM cards WHERE card_id = ?", (card_id,))
            return cursor.rowcount > 0

    def list_cards(self, topic_id: Optional[str] = None) -> List[Flashcard]:
        """Get all cards, optionally for one topic."""
        query = "SELECT * FROM cards"
        params: tuple = ()
        if topic_id is not None:
            query += " WHERE topic_id = ?"
            params = (topic_id,)
        with self._connect() as conn:
            rows = conn.execute(query + " ORDER BY card_id", params).fetchall()
        return [card_from_record(dict(row)) for row in rows]

    def record_review(self, entry: ReviewLogEntry) -> None:
        """Record a review in history."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO review_history
                (card_id, quality, reviewed_at, interval_before, interval_after,
                 easiness_before, easiness_after)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.card_id,
                    entry.rating,
                    format_timestamp(entry.reviewed_at),
                    entry.interval_before,
                    entry.interval_after,
                    entry.easiness_before,
                    entry.easiness_after,
                ),
            )

    def remove_last_review(self, card_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                DELETE FROM review_history WHERE id = (
                    SELECT MAX(id) FROM review_history WHERE card_id = ?
                )
                """,
                (card_id,),
            )
            return cursor.rowcount > 0

    def review_history(self, card_id: Optional[str] = None) -> List[ReviewLogEntry]:
        query = "SELECT * FROM review_history"
        params: tuple = ()
        if card_id is not None:
            query += " WHERE card_id = ?"
            params = (card_id,)
        with self._connect() as conn:
            rows = conn.execute(query + " ORDER BY id", params).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def count(self) -> int:
        with self._connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM cards").fetchone()[0])

    @staticmethod
    def _row_to_entry(row: Any) -> ReviewLogEntry:
        return ReviewLogEntry(
            card_id=row["card_id"],
            rating=int(row["quality"]),
            reviewed_at=parse_timestamp(row["reviewed_at"], "reviewed_at"),
            interval_before=int(row["interval_before"] or 0),
            interval_after=int(row["interval_after"] or 0),
            easiness_before=float(row["easiness_before"] or 0.0),
            easiness_after=float(row["easiness_after"] or 0.0),
        )
