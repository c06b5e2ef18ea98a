"""
SRS Constants and Parameters

All tunable coefficients for the interval strategies and the mastery
classifier in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


# ---- Mastery Status ----

class MasteryStatus(str, Enum):
    """Coarse learning stage of one item for one learner."""
    NEW = "new"
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return STATUS_RANK[self]


# Canonical ordering used for upgrade/downgrade comparison
STATUS_ORDER: Final[tuple[MasteryStatus, ...]] = (
    MasteryStatus.NEW,
    MasteryStatus.LEARNING,
    MasteryStatus.REVIEWING,
    MasteryStatus.MASTERED,
)

STATUS_RANK: Final[dict[MasteryStatus, int]] = {
    status: index for index, status in enumerate(STATUS_ORDER)
}


# ---- Initial Progress ----

INITIAL_EASE_FACTOR = 2.5
INITIAL_INTERVAL = 1


# ---- Ease-Factor Strategy ----

MIN_EASE_FACTOR = 1.3
EASE_PENALTY = 0.2       # Subtracted from ease on every incorrect answer
FIRST_INTERVAL = 1       # Interval after the first successful repetition
SECOND_INTERVAL = 6      # Interval after the second successful repetition
MAX_INTERVAL = 365       # Cap for the multiplicative interval


# ---- Streak-Bucket Strategy ----

@dataclass(frozen=True)
class ReviewIntervalConfig:
    """
    Coefficients for the streak-bucket recommended review date.
    """
    base_intervals: tuple[int, ...] = (1, 3, 7, 14, 30)

    # Accuracy thresholds and the multipliers they select
    accuracy_critical: float = 0.5
    accuracy_low: float = 0.7
    accuracy_high: float = 0.9
    multiplier_critical: float = 0.7   # accuracy < 0.5: shorten by 30%
    multiplier_low: float = 0.85       # accuracy < 0.7: shorten by 15%
    multiplier_high: float = 1.3       # accuracy > 0.9: extend by 30%
    accuracy_min_reviews: int = 4      # Accuracy only counts once there is enough data

    # Total reviews multiplier
    reviews_threshold: int = 10
    reviews_multiplier: float = 1.2    # Extend by 20% if total_reviews >= 10

    learning_max_interval: int = 3     # Cap for items in the learning stage
    min_interval: int = 1


REVIEW_INTERVAL_CONFIG = ReviewIntervalConfig()


# ---- Mastery Classifier ----

@dataclass(frozen=True)
class MasteryThresholds:
    """
    Cutoffs for the mastery state machine.

    The learning/reviewing band is a product decision and is kept
    configurable rather than hard-coded.
    """
    min_reviews_for_learning: int = 3
    mastered_accuracy: float = 0.8
    mastered_streak: int = 3
    reviewing_accuracy: float = 0.7
    reviewing_streak: int = 5


MASTERY_THRESHOLDS = MasteryThresholds()


# ---- Analytics ----

MAX_REVIEW_DEBT_DAYS = 7          # Overdue days are capped for a manageable load
STRUGGLING_MIN_REVIEWS = 3
STRUGGLING_MAX_ACCURACY = 0.33
