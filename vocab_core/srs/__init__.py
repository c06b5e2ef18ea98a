"""
SRS - Spaced Repetition for Vocabulary Progress

Progress tracking for the review scheduler:
- Interval strategies (ease-factor growth or streak buckets)
- Mastery state machine: new -> learning -> reviewing -> mastered
- Transactional progress updates with status-transition reports

Quick start:
    from vocab_core import srs

    db = srs.ProgressDatabase.from_env()
    db.init_db()

    # Pure update (no DB calls)
    progress, transition = srs.apply_answer(progress, srs.AnswerEvent(item_id="w1", correct=True))

    # Transactional update
    updater = srs.ProgressUpdater(db)
    report = updater.record_answers("learner-1", [{"item_id": "w1", "correct": True}])
"""

# Core algorithms
from vocab_core.srs.intervals import (
    IntervalStrategy,
    EaseFactorStrategy,
    StreakBucketStrategy,
    STRATEGIES,
    advance_counters,
    get_strategy,
    next_state,
)
from vocab_core.srs.mastery import (
    StatusTransition,
    TransitionKind,
    classify,
    is_status_upgrade,
)
from vocab_core.srs.updater import (
    AnswerResult,
    BatchReport,
    ProgressUpdater,
    apply_answer,
)

# Database API
from vocab_core.srs.database import (
    ProgressDatabase,
    ProgressUnitOfWork,
    create_database_engine,
)

# State and constants
from vocab_core.srs.progress_state import (
    ItemProgress,
    ItemSnapshot,
    SpacedRepState,
    calculate_accuracy,
    initialize_new_progress,
)
from vocab_core.srs.constants import (
    MasteryStatus,
    MasteryThresholds,
    ReviewIntervalConfig,
    STATUS_ORDER,
    MASTERY_THRESHOLDS,
    REVIEW_INTERVAL_CONFIG,
)
from vocab_core.schemas import AnswerEvent, LearningMode


__all__ = [
    # Core algorithms
    "IntervalStrategy",
    "EaseFactorStrategy",
    "StreakBucketStrategy",
    "STRATEGIES",
    "advance_counters",
    "get_strategy",
    "next_state",
    "StatusTransition",
    "TransitionKind",
    "classify",
    "is_status_upgrade",
    "AnswerResult",
    "BatchReport",
    "ProgressUpdater",
    "apply_answer",

    # Database operations
    "ProgressDatabase",
    "ProgressUnitOfWork",
    "create_database_engine",

    # State
    "ItemProgress",
    "ItemSnapshot",
    "SpacedRepState",
    "calculate_accuracy",
    "initialize_new_progress",

    # Enums and parameters
    "MasteryStatus",
    "MasteryThresholds",
    "ReviewIntervalConfig",
    "STATUS_ORDER",
    "MASTERY_THRESHOLDS",
    "REVIEW_INTERVAL_CONFIG",
    "AnswerEvent",
    "LearningMode",
]
