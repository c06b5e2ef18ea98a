"""
Adaptive review scheduler for vocabulary learning.

Quick start:
    from vocab_core import ReviewScheduler
    from vocab_core.srs import ProgressDatabase

    db = ProgressDatabase.from_env()
    db.init_db()

    scheduler = ReviewScheduler(db)
    session = scheduler.get_session("learner-1")
    result = scheduler.record_answer("learner-1", session[0].item_id, correct=True, mode="eng_to_jpn")
"""

from vocab_core.errors import (
    SchedulerError,
    ValidationError,
    PersistenceError,
    NotFoundError,
    InvalidStateError,
)
from vocab_core.service import ReviewScheduler

__all__ = [
    "ReviewScheduler",
    "SchedulerError",
    "ValidationError",
    "PersistenceError",
    "NotFoundError",
    "InvalidStateError",
]
