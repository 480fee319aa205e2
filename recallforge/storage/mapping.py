"""
Record Mapping for Storage Adapters.

Converts between the canonical Flashcard model and the flat dictionaries
stored by adapters or exchanged with other tools.

Records written by older tools use camelCase keys (``easinessFactor``,
``repetitionCount``) and may leave scheduling fields out entirely. Both
spellings are read; missing fields take the values of a new card:

    easiness factor   -> 2.5
    repetition count  -> 0
    interval          -> 0
    next review date  -> created_at (due immediately)

Timestamps are ISO-8601 strings. Offsets are honoured on read and every
parsed value is normalized to naive UTC, so records written with a trailing
``Z`` compare cleanly with timestamps produced by the service clock.
"""

from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from recallforge.core.constants import INITIAL_EASINESS_FACTOR
from recallforge.core.exceptions import InvalidStateError
from recallforge.study.models import (
    CardState,
    Flashcard,
    to_naive_utc,
    utc_now,
    validate_state,
)

RECORD_STYLES = ("snake", "camel")

# snake_case field -> camelCase alias
_CAMEL_ALIASES: Dict[str, str] = {
    "card_id": "id",
    "topic_id": "topicId",
    "created_at": "createdAt",
    "easiness_factor": "easinessFactor",
    "repetition_count": "repetitionCount",
    "interval_days": "intervalDays",
    "next_review_date": "nextReviewDate",
    "last_reviewed_at": "lastReviewedAt",
    "last_difficulty": "lastDifficulty",
}

_SECONDARY_ALIASES: Dict[str, tuple] = {
    "card_id": ("cardId", "id"),
    "easiness_factor": ("ease_factor", "easeFactor"),
    "repetition_count": ("repetitions",),
    "interval_days": ("interval",),
    "next_review_date": ("next_review", "nextReview"),
    "last_reviewed_at": ("last_reviewed", "lastReviewed"),
    "topic_id": ("topic",),
}


def _lookup(record: Mapping[str, Any], name: str) -> Any:
    """Read a field by its snake_case name or any known alias."""
    if record.get(name) is not None:
        return record[name]
    for alias in (_CAMEL_ALIASES.get(name),) + _SECONDARY_ALIASES.get(name, ()):
        if alias and record.get(alias) is not None:
            return record[alias]
    return None


def parse_timestamp(value: Any, field: str) -> Optional[datetime]:
    """Parse an ISO-8601 string (or accept a datetime) as naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidStateError(
            f"{field} is not an ISO-8601 timestamp: {value!r}",
            field=field,
            value=value,
        ) from e
    return to_naive_utc(parsed)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def card_from_record(record: Mapping[str, Any], now: Optional[datetime] = None) -> Flashcard:
    """Build a Flashcard from a stored record.

    Args:
        record: Flat mapping in snake_case or camelCase
        now: Fallback due date for records without one or a creation time

    Returns:
        Validated Flashcard

    Raises:
        InvalidStateError: If the record is incomplete or violates the
            scheduling invariants
    """
    card_id = _lookup(record, "card_id")
    if card_id is None:
        raise InvalidStateError("record has no card id", field="card_id")

    created_at = parse_timestamp(_lookup(record, "created_at"), "created_at")
    next_review = parse_timestamp(
        _lookup(record, "next_review_date"), "next_review_date"
    )
    if next_review is None:
        next_review = created_at or (to_naive_utc(now) if now else utc_now())

    easiness = _lookup(record, "easiness_factor")
    repetitions = _lookup(record, "repetition_count")
    interval = _lookup(record, "interval_days")
    difficulty = _lookup(record, "last_difficulty")

    try:
        state = CardState(
            easiness_factor=float(
                easiness if easiness is not None else INITIAL_EASINESS_FACTOR
            ),
            repetition_count=int(repetitions if repetitions is not None else 0),
            interval_days=int(interval if interval is not None else 0),
            next_review_date=next_review,
            last_reviewed_at=parse_timestamp(
                _lookup(record, "last_reviewed_at"), "last_reviewed_at"
            ),
            last_difficulty=int(difficulty) if difficulty is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise InvalidStateError(
            f"record {card_id} has malformed scheduling fields: {e}",
            field="state",
        ) from e

    validate_state(state)
    return Flashcard(
        card_id=str(card_id),
        front=str(record.get("front", "")),
        back=str(record.get("back", "")),
        state=state,
        topic_id=_lookup(record, "topic_id"),
        created_at=created_at,
    )


def card_to_record(card: Flashcard, style: str = "snake") -> Dict[str, Any]:
    """Flatten a Flashcard into a record.

    Args:
        card: Card to serialize
        style: "snake" for snake_case keys, "camel" for camelCase keys

    Returns:
        Flat dict with ISO-8601 timestamps
    """
    if style not in RECORD_STYLES:
        raise ValueError(f"style must be one of {RECORD_STYLES}, got: {style}")

    state = card.state
    record: Dict[str, Any] = {
        "card_id": card.card_id,
        "front": card.front,
        "back": card.back,
        "topic_id": card.topic_id,
        "created_at": format_timestamp(card.created_at),
        "easiness_factor": state.easiness_factor,
        "repetition_count": state.repetition_count,
        "interval_days": state.interval_days,
        "next_review_date": format_timestamp(state.next_review_date),
        "last_reviewed_at": format_timestamp(state.last_reviewed_at),
        "last_difficulty": state.last_difficulty,
    }
    if style == "camel":
        return {_CAMEL_ALIASES.get(key, key): value for key, value in record.items()}
    return record


__all__ = [
    "RECORD_STYLES",
    "card_from_record",
    "card_to_record",
    "parse_timestamp",
    "format_timestamp",
]
