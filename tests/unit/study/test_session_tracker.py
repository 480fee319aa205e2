"""Tests for session_tracker module.

Tests the session tracking and undo functionality:
- Recording reviews
- Undo stack
- Session statistics
- Rating counts
"""

from datetime import datetime

from recallforge.study.models import CardState
from recallforge.study.session_tracker import ReviewAction, SessionTracker


class TestReviewAction:
    def test_action_has_timestamp(self) -> None:
        action = ReviewAction(card_id="card_1", quality=4)
        assert isinstance(action.timestamp, datetime)
        assert action.prev_state is None

    def test_action_prev_state(self, t0) -> None:
        prev = CardState.new(t0)
        action = ReviewAction(card_id="card_1", quality=4, prev_state=prev)
        assert action.prev_state is prev


class TestSessionTracker:
    def test_tracker_creation(self) -> None:
        tracker = SessionTracker()
        assert tracker.cards_reviewed == 0
        assert not tracker.can_undo()
        assert tracker.accuracy == 0.0

    def test_record_review(self, t0) -> None:
        tracker = SessionTracker()
        action = tracker.record_review("card_1", 5, timestamp=t0)
        assert action.timestamp == t0
        assert tracker.cards_reviewed == 1
        assert tracker.get_last_action() is action

    def test_rating_counts_and_accuracy(self) -> None:
        tracker = SessionTracker()
        for quality in (5, 4, 3, 1):
            tracker.record_review("c", quality)
        assert tracker.rating_counts == {5: 1, 4: 1, 3: 1, 1: 1}
        assert tracker.correct_count == 3
        assert tracker.accuracy == 75.0

    def test_undo_pops_latest(self) -> None:
        tracker = SessionTracker()
        tracker.record_review("a", 4)
        tracker.record_review("b", 2)

        undone = tracker.undo()

        assert undone.card_id == "b"
        assert tracker.cards_reviewed == 1
        assert 2 not in tracker.rating_counts

    def test_undo_empty(self) -> None:
        assert SessionTracker().undo() is None

    def test_undo_stack_bounded(self) -> None:
        tracker = SessionTracker(max_undo=2)
        for card_id in ("a", "b", "c"):
            tracker.record_review(card_id, 4)
        assert [a.card_id for a in tracker.actions] == ["b", "c"]
        assert tracker.cards_reviewed == 3

    def test_custom_success_threshold(self) -> None:
        tracker = SessionTracker(success_threshold=4)
        tracker.record_review("a", 3)
        tracker.record_review("b", 4)
        assert tracker.correct_count == 1

    def test_session_stats(self) -> None:
        tracker = SessionTracker()
        tracker.record_review("a", 5)
        stats = tracker.get_session_stats()
        assert stats["cards_reviewed"] == 1
        assert stats["accuracy"] == 100.0
        assert stats["undo_available"] is True

    def test_reset(self) -> None:
        tracker = SessionTracker()
        tracker.record_review("a", 5)
        tracker.reset()
        assert tracker.cards_reviewed == 0
        assert tracker.actions == []
