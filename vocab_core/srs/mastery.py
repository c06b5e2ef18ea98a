"""
Mastery - Status State Machine

Classifies an item into new / learning / reviewing / mastered from its
post-answer counters and reports how the status moved.

Flow: new -> learning -> reviewing -> mastered, with regression allowed
(a mastered item drops back to learning after a failure). There is no
terminal state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from vocab_core.errors import ValidationError
from vocab_core.srs.constants import (
    MASTERY_THRESHOLDS,
    STATUS_ORDER,
    MasteryStatus,
    MasteryThresholds,
)


def classify(
    total_reviews: int,
    correct_answers: int,
    streak: int,
    previous: Optional[MasteryStatus] = None,
    thresholds: MasteryThresholds = MASTERY_THRESHOLDS
) -> MasteryStatus:
    """
    Calculate mastery status from aggregate performance.

    Rules (first match wins):
    - fewer than 3 reviews: new
    - last answer incorrect (streak == 0): learning
    - accuracy >= 0.8 and streak >= 3: mastered
    - accuracy >= 0.7 and streak >= 5: reviewing
    - otherwise: learning

    When `previous` is given, forward progress is limited to one step per
    update, so a single burst of correct answers cannot jump new -> mastered.

    Args:
        total_reviews: Reviews including the current answer
        correct_answers: Correct answers including the current answer
        streak: Consecutive correct answers including the current answer
        previous: Status before the current answer, if known
        thresholds: Cutoffs for the bands

    Returns:
        MasteryStatus

    Raises:
        ValidationError: on negative counters or correct_answers > total_reviews
    """
    if total_reviews < 0 or correct_answers < 0 or streak < 0:
        raise ValidationError("Counters must not be negative")
    if correct_answers > total_reviews:
        raise ValidationError(
            f"correct_answers ({correct_answers}) exceeds total_reviews ({total_reviews})"
        )
    if streak > correct_answers:
        raise ValidationError(f"streak ({streak}) exceeds correct_answers ({correct_answers})")

    status = _raw_status(total_reviews, correct_answers, streak, thresholds)

    if previous is not None and status.rank > previous.rank + 1:
        status = STATUS_ORDER[previous.rank + 1]

    return status


def _raw_status(
    total_reviews: int,
    correct_answers: int,
    streak: int,
    thresholds: MasteryThresholds
) -> MasteryStatus:
    if total_reviews < max(1, thresholds.min_reviews_for_learning):
        return MasteryStatus.NEW

    if streak == 0:
        return MasteryStatus.LEARNING

    accuracy = correct_answers / total_reviews

    if accuracy >= thresholds.mastered_accuracy and streak >= thresholds.mastered_streak:
        return MasteryStatus.MASTERED

    if accuracy >= thresholds.reviewing_accuracy and streak >= thresholds.reviewing_streak:
        return MasteryStatus.REVIEWING

    return MasteryStatus.LEARNING


# ---- Transitions ----

class TransitionKind(str, Enum):
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    MAINTAINED = "maintained"


def is_status_upgrade(old_status: MasteryStatus, new_status: MasteryStatus) -> bool:
    return new_status.rank > old_status.rank


@dataclass(frozen=True)
class StatusTransition:
    """
    Status movement of one item caused by an update.
    """
    item_id: str
    previous_status: MasteryStatus
    new_status: MasteryStatus

    @property
    def status_changed(self) -> bool:
        return self.previous_status != self.new_status

    @property
    def is_upgrade(self) -> bool:
        return is_status_upgrade(self.previous_status, self.new_status)

    @property
    def kind(self) -> TransitionKind:
        if not self.status_changed:
            return TransitionKind.MAINTAINED
        if self.is_upgrade:
            return TransitionKind.UPGRADE
        return TransitionKind.DOWNGRADE
