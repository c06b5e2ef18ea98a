"""
Review scheduler facade.

Ties the session builder and the progress updater together behind the three
calls an application needs: build a session, record one answer, record a
batch of answers.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from vocab_core.config import SchedulerSettings
from vocab_core.errors import ValidationError
from vocab_core.session_builders.pool_types import SessionItem
from vocab_core.session_builders.word_builder import create_session
from vocab_core.srs.constants import MASTERY_THRESHOLDS, MasteryStatus, MasteryThresholds
from vocab_core.srs.database import ProgressDatabase
from vocab_core.srs.mastery import classify as classify_status
from vocab_core.srs.updater import AnswerResult, BatchReport, ProgressUpdater

logger = logging.getLogger(__name__)


class ReviewScheduler:
    """
    Adaptive review scheduler for one vocabulary catalog.

    Args:
        database: Progress store
        settings: Session and strategy settings (defaults to SchedulerSettings())
        rng: Random source for pattern choice, new-item sampling and shuffling
        clock: Returns the current UTC datetime (answers are stamped with it)
        thresholds: Mastery cutoffs
    """

    def __init__(
        self,
        database: ProgressDatabase,
        settings: Optional[SchedulerSettings] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        thresholds: MasteryThresholds = MASTERY_THRESHOLDS
    ):
        self.database = database
        self.settings = settings or SchedulerSettings()
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.thresholds = thresholds
        self.updater = ProgressUpdater(
            database,
            strategy=self.settings.interval_strategy,
            recommendation_strategy=self.settings.recommendation_strategy,
            thresholds=thresholds,
            clock=self.clock,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "ReviewScheduler":
        """Scheduler over DATABASE_URL with settings from the environment."""
        return cls(ProgressDatabase.from_env(), settings=SchedulerSettings.from_env(), **kwargs)

    def get_session(
        self,
        learner_id: str,
        size: Optional[int] = None,
        pattern_name: Optional[str] = None
    ) -> list[SessionItem]:
        """
        Build a study session.

        Args:
            learner_id: Learner identifier
            size: Number of items (defaults to the configured session size)
            pattern_name: Composition pattern; a random one when None

        Returns:
            Shuffled list of SessionItem (shorter than `size` when the learner
            does not have enough items)

        Raises:
            ValidationError: for an empty learner id, bad size or unknown pattern
            PersistenceError: on storage failure
        """
        if not learner_id:
            raise ValidationError("learner_id is required")
        return create_session(
            self.database,
            learner_id,
            session_size=size,
            pattern_name=pattern_name,
            settings=self.settings,
            rng=self.rng,
        )

    def record_answer(
        self,
        learner_id: str,
        item_id: str,
        correct: bool,
        mode: Optional[str] = None,
        response_time_ms: Optional[int] = None
    ) -> AnswerResult:
        """Record a single answer (one transaction)."""
        return self.updater.record_answer(
            learner_id, item_id, correct, mode=mode, response_time_ms=response_time_ms
        )

    def record_answer_batch(self, learner_id: str, answers: Iterable[Any]) -> BatchReport:
        """Record a batch of answers atomically; see ProgressUpdater.record_answers."""
        return self.updater.record_answers(learner_id, answers)

    def classify(
        self,
        total_reviews: int,
        correct_answers: int,
        streak: int,
        previous: Optional[MasteryStatus] = None
    ) -> MasteryStatus:
        return classify_status(
            total_reviews, correct_answers, streak, previous=previous, thresholds=self.thresholds
        )
