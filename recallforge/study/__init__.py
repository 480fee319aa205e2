"""Study package.

Provides the spaced repetition core and the study utilities built on it:
- models: Rating scale, card state and derived value objects
- scheduler: SM-2 spaced repetition algorithm
- retention: Forgetting-curve retention estimates and reports
- mastery: Card and topic mastery scoring
- stats: Learning statistics aggregator
- due_check: Due card selection and notification
- session_tracker: Review session tracking with undo
- service: Review workflow over an injected card repository
"""

from __future__ import annotations

from recallforge.study.models import (
    CardState,
    CardStatus,
    Flashcard,
    Rating,
    RetentionSnapshot,
    ReviewEvent,
    ReviewLogEntry,
    TopicMastery,
    utc_now,
    validate_state,
)

from recallforge.study.scheduler import (
    apply_review,
    schedule_next_review,
    update_easiness_factor,
    next_interval,
    INITIAL_EASINESS_FACTOR,
    MIN_EASINESS_FACTOR,
    FIRST_SUCCESS_INTERVAL,
    SECOND_SUCCESS_INTERVAL,
    FAIL_RESET_INTERVAL,
)

from recallforge.study.retention import (
    RetentionReport,
    RetentionStrategy,
    build_retention_report,
    estimate_retention,
    forgetting_curve,
    snapshot,
)

from recallforge.study.mastery import (
    MasteryAccumulator,
    aggregate_topic_mastery,
    card_mastery,
    classify_card,
    compute_card_mastery,
    mastery_by_topic,
)

from recallforge.study.stats import (
    LearningStats,
    TopicStats,
    StatsAggregator,
)

from recallforge.study.due_check import (
    count_due_cards,
    get_due_notification,
    select_due_cards,
)

from recallforge.study.session_tracker import (
    SessionTracker,
    ReviewAction,
)

from recallforge.study.service import ReviewService

__all__ = [
    # Models
    "CardState",
    "CardStatus",
    "Flashcard",
    "Rating",
    "RetentionSnapshot",
    "ReviewEvent",
    "ReviewLogEntry",
    "TopicMastery",
    "validate_state",
    "utc_now",
    # Scheduler
    "apply_review",
    "schedule_next_review",
    "update_easiness_factor",
    "next_interval",
    "INITIAL_EASINESS_FACTOR",
    "MIN_EASINESS_FACTOR",
    "FIRST_SUCCESS_INTERVAL",
    "SECOND_SUCCESS_INTERVAL",
    "FAIL_RESET_INTERVAL",
    # Retention
    "RetentionReport",
    "RetentionStrategy",
    "build_retention_report",
    "estimate_retention",
    "forgetting_curve",
    "snapshot",
    # Mastery
    "MasteryAccumulator",
    "aggregate_topic_mastery",
    "card_mastery",
    "classify_card",
    "compute_card_mastery",
    "mastery_by_topic",
    # Stats
    "LearningStats",
    "TopicStats",
    "StatsAggregator",
    # Due check
    "count_due_cards",
    "get_due_notification",
    "select_due_cards",
    # Session tracker
    "SessionTracker",
    "ReviewAction",
    # Service
    "ReviewService",
]
