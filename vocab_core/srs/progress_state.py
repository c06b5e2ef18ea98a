"""
Progress State - Per-Learner Item Progress

Defines the progress record kept for each (learner, item) pair and the
spaced-repetition subset of it that the interval strategies work on.

Key concepts:
- Ease factor: multiplicative interval growth on successful recall
- Interval: days until the next scheduled review
- Streak: consecutive correct answers, reset on failure
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Optional

from vocab_core.errors import InvalidStateError
from vocab_core.srs.constants import (
    INITIAL_EASE_FACTOR,
    INITIAL_INTERVAL,
    MIN_EASE_FACTOR,
    MasteryStatus,
)


@dataclass(frozen=True)
class SpacedRepState:
    """
    Scheduling-relevant counters of one progress record.
    """
    ease_factor: float
    interval: int
    repetitions: int
    streak: int
    total_reviews: int
    correct_answers: int
    next_review_date: date

    @property
    def accuracy(self) -> float:
        return calculate_accuracy(self.correct_answers, self.total_reviews)

    def validate(self) -> None:
        """
        Raise InvalidStateError if the state breaks an invariant.
        """
        if self.ease_factor < MIN_EASE_FACTOR:
            raise InvalidStateError(f"ease_factor {self.ease_factor} below {MIN_EASE_FACTOR}")
        if self.interval < 1:
            raise InvalidStateError(f"interval {self.interval} below 1")
        if min(self.repetitions, self.streak, self.total_reviews, self.correct_answers) < 0:
            raise InvalidStateError("counters must not be negative")
        if self.correct_answers > self.total_reviews:
            raise InvalidStateError(
                f"correct_answers {self.correct_answers} exceeds total_reviews {self.total_reviews}"
            )


@dataclass
class ItemProgress:
    """
    Progress of one learner on one vocabulary item.
    """
    user_id: str
    item_id: str

    # Aggregate performance
    total_reviews: int = 0
    correct_answers: int = 0
    streak: int = 0

    # Spaced repetition
    ease_factor: float = INITIAL_EASE_FACTOR
    interval: int = INITIAL_INTERVAL
    repetitions: int = 0
    next_review_date: date = field(default_factory=date.today)
    recommended_review_date: date = field(default_factory=date.today)

    # Mastery (previous_status is the audit trail of the last update)
    status: MasteryStatus = MasteryStatus.NEW
    previous_status: Optional[MasteryStatus] = None

    last_answer_correct: Optional[bool] = None
    last_reviewed_at: Optional[datetime] = None

    # Auxiliary per-mode counters: {"eng_to_jpn": {"total": 3, "correct": 2}, ...}
    mode_stats: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        return calculate_accuracy(self.correct_answers, self.total_reviews)

    def spaced_rep_state(self) -> SpacedRepState:
        return SpacedRepState(
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
            streak=self.streak,
            total_reviews=self.total_reviews,
            correct_answers=self.correct_answers,
            next_review_date=self.next_review_date,
        )

    def copy(self) -> "ItemProgress":
        return replace(
            self,
            mode_stats={mode: dict(counts) for mode, counts in self.mode_stats.items()},
        )


@dataclass(frozen=True)
class ItemSnapshot:
    """
    A catalog item with the learner's progress on it (None if never answered).

    Candidate pools and sessions are lists of these.
    """
    item_id: str
    item: dict
    progress: Optional[ItemProgress] = None

    @property
    def status(self) -> MasteryStatus:
        if self.progress is None:
            return MasteryStatus.NEW
        return self.progress.status


def calculate_accuracy(correct_answers: int, total_reviews: int) -> float:
    """
    Fraction of correct answers (0.0 when never reviewed).
    """
    if total_reviews <= 0:
        return 0.0
    return correct_answers / total_reviews


def initialize_new_progress(
    user_id: str,
    item_id: str,
    today: Optional[date] = None
) -> ItemProgress:
    """
    Initialize progress for an item the learner has never answered.

    Args:
        user_id: Learner identifier
        item_id: Vocabulary item identifier
        today: Review dates start here (defaults to today)

    Returns:
        New ItemProgress with status NEW
    """
    today = today or datetime.now(timezone.utc).date()
    return ItemProgress(
        user_id=user_id,
        item_id=item_id,
        total_reviews=0,
        correct_answers=0,
        streak=0,
        ease_factor=INITIAL_EASE_FACTOR,
        interval=INITIAL_INTERVAL,
        repetitions=0,
        next_review_date=today,
        recommended_review_date=today,
        status=MasteryStatus.NEW,
    )
