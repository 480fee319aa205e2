"""Tests for study domain models.

Tests the rating scale, card state helpers and state validation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from recallforge.core.exceptions import InvalidRatingError, InvalidStateError
from recallforge.study.models import (
    CardState,
    Flashcard,
    Rating,
    ReviewLogEntry,
    sort_by_due_date,
    to_naive_utc,
    utc_now,
    validate_state,
)


class TestRating:
    """Test the closed 0-5 rating scale."""

    def test_success_threshold(self) -> None:
        assert [r.is_success for r in Rating] == [False, False, False, True, True, True]

    def test_configured_success_threshold(self) -> None:
        assert not Rating.HARD.is_success_at(4)
        assert Rating.GOOD.is_success_at(4)
        assert Rating.INCORRECT_EASY.is_success_at(2)

    def test_parse_accepts_int(self) -> None:
        assert Rating.parse(4) is Rating.GOOD

    def test_parse_passes_rating_through(self) -> None:
        assert Rating.parse(Rating.HARD) is Rating.HARD

    @pytest.mark.parametrize("value", [-1, 6, 3.0, "4", False])
    def test_parse_rejects(self, value) -> None:
        with pytest.raises(InvalidRatingError) as exc_info:
            Rating.parse(value)
        assert exc_info.value.field == "rating"
        assert exc_info.value.error_code == "RF-VAL-001"

    @pytest.mark.parametrize(
        "difficulty, quality", [(1, 5), (2, 4), (3, 3), (4, 2), (5, 1)]
    )
    def test_from_difficulty(self, difficulty: int, quality: int) -> None:
        assert Rating.from_difficulty(difficulty) == quality

    @pytest.mark.parametrize("difficulty", [0, 6, 2.5])
    def test_from_difficulty_rejects(self, difficulty) -> None:
        with pytest.raises(InvalidRatingError):
            Rating.from_difficulty(difficulty)

    def test_to_difficulty(self) -> None:
        assert Rating.PERFECT.to_difficulty() == 1
        assert Rating.HARD.to_difficulty() == 3
        assert Rating.INCORRECT.to_difficulty() == 5
        assert Rating.BLACKOUT.to_difficulty() == 5


class TestCardState:
    """Test CardState helpers."""

    def test_new_card_is_due_immediately(self, t0) -> None:
        state = CardState.new(t0)
        assert state.is_new
        assert state.is_due(t0)
        assert state.easiness_factor == 2.5
        assert state.repetition_count == 0
        assert state.interval_days == 0

    def test_not_due_before_next_review(self, make_state, t0) -> None:
        state = make_state(interval_days=6, days_ago=1)
        assert not state.is_due(t0)
        assert state.is_due(t0 + timedelta(days=5))

    def test_days_since_review_floors(self, make_state, t0) -> None:
        state = make_state(days_ago=2.9)
        assert state.days_since_review(t0) == 2

    def test_days_since_review_clock_skew(self, make_state, t0) -> None:
        state = make_state(days_ago=-3)
        assert state.days_since_review(t0) == 0

    def test_days_since_review_never_reviewed(self, t0) -> None:
        assert CardState.new(t0).days_since_review(t0) is None

    def test_to_dict(self, make_state, t0) -> None:
        data = make_state(repetition_count=2, interval_days=6, last_difficulty=2).to_dict()
        assert data["repetition_count"] == 2
        assert data["last_reviewed_at"] == t0.isoformat()
        assert data["last_difficulty"] == 2


class TestValidateState:
    def test_valid_state_returned(self, make_state) -> None:
        state = make_state(repetition_count=3, interval_days=15)
        assert validate_state(state) is state

    def test_float_noise_at_floor(self, t0) -> None:
        validate_state(CardState(1.3 - 1e-12, 0, 0, t0))

    def test_custom_floor(self, t0) -> None:
        with pytest.raises(InvalidStateError):
            validate_state(CardState(1.4, 0, 0, t0), min_easiness_factor=1.5)

    def test_bad_difficulty(self, make_state) -> None:
        with pytest.raises(InvalidStateError, match="last_difficulty"):
            validate_state(make_state(last_difficulty=7))


class TestFlashcard:
    def test_create(self, t0) -> None:
        card = Flashcard.create("front", "back", t0, topic_id="chem")
        assert card.card_id
        assert card.created_at == t0
        assert card.state.next_review_date == t0
        assert card.topic_id == "chem"

    def test_create_with_id(self, t0) -> None:
        assert Flashcard.create("f", "b", t0, card_id="abc").card_id == "abc"

    def test_with_state_returns_copy(self, make_card, make_state) -> None:
        card = make_card()
        updated = card.with_state(make_state(repetition_count=1))
        assert updated.state.repetition_count == 1
        assert card.state.repetition_count == 0

    def test_sort_by_due_date(self, make_card, make_state, t0) -> None:
        late = make_card("b", state=make_state(interval_days=5))
        early = make_card("c", state=make_state(interval_days=1))
        tie = make_card("a", state=make_state(interval_days=1))
        assert [c.card_id for c in sort_by_due_date([late, early, tie])] == [
            "a",
            "c",
            "b",
        ]


def test_review_log_entry_success(t0) -> None:
    entry = ReviewLogEntry("c1", 3, t0, 1, 6, 2.5, 2.36)
    assert entry.is_successful()
    assert not entry.is_successful(threshold=4)
    assert not ReviewLogEntry("c1", 2, t0, 6, 1, 2.5, 2.18).is_successful()


class TestTimestamps:
    def test_aware_converted_to_naive_utc(self) -> None:
        aware = datetime(2024, 3, 1, 11, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(aware) == datetime(2024, 3, 1, 9, 0)

    def test_naive_unchanged(self, t0) -> None:
        assert to_naive_utc(t0) is t0

    def test_utc_now_is_naive(self) -> None:
        assert utc_now().tzinfo is None
