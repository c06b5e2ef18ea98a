"""
Intervals - Review Interval Strategies

Pure interval calculation (no database calls).

Two policies are available behind the IntervalStrategy interface:
- "ease_factor": SM-2 style, interval grows by the ease factor
  (1 day, 6 days, then interval x ease, capped at 365)
- "streak_bucket": interval picked from streak buckets [1, 3, 7, 14, 30]
  and scaled by accuracy and review count

Both strategies fold the answer into the counters the same way; they only
differ in the interval they derive from the folded counters.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Protocol

from vocab_core.srs.constants import (
    EASE_PENALTY,
    FIRST_INTERVAL,
    MAX_INTERVAL,
    MIN_EASE_FACTOR,
    REVIEW_INTERVAL_CONFIG,
    SECOND_INTERVAL,
    MasteryStatus,
    ReviewIntervalConfig,
)
from vocab_core.srs.progress_state import SpacedRepState


class IntervalStrategy(Protocol):
    """Protocol for review interval policies."""

    name: str

    def interval_for(
        self,
        previous: SpacedRepState,
        advanced: SpacedRepState,
        was_correct: bool,
        status: Optional[MasteryStatus] = None
    ) -> int:
        """Days until the next review, given the state before and after the answer."""
        ...


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def advance_counters(current: SpacedRepState, was_correct: bool) -> SpacedRepState:
    """
    Fold one answer into the counters (interval and date untouched).

    Correct: repetitions and streak grow, ease unchanged.
    Incorrect: repetitions and streak reset, ease drops by 0.2 (floored at 1.3).
    """
    if was_correct:
        return replace(
            current,
            repetitions=current.repetitions + 1,
            streak=current.streak + 1,
            total_reviews=current.total_reviews + 1,
            correct_answers=current.correct_answers + 1,
        )

    return replace(
        current,
        repetitions=0,
        streak=0,
        ease_factor=max(MIN_EASE_FACTOR, round(current.ease_factor - EASE_PENALTY, 10)),
        total_reviews=current.total_reviews + 1,
    )


class EaseFactorStrategy:
    """
    Multiplicative interval growth driven by the ease factor.
    """
    name = "ease_factor"

    def interval_for(
        self,
        previous: SpacedRepState,
        advanced: SpacedRepState,
        was_correct: bool,
        status: Optional[MasteryStatus] = None
    ) -> int:
        if not was_correct:
            return 1

        if advanced.repetitions == 1:
            interval = FIRST_INTERVAL
        elif advanced.repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = round_half_up(previous.interval * advanced.ease_factor)

        return max(1, min(interval, MAX_INTERVAL))


class StreakBucketStrategy:
    """
    Interval from discrete streak buckets, adjusted by accuracy and experience.
    """
    name = "streak_bucket"

    def __init__(self, config: ReviewIntervalConfig = REVIEW_INTERVAL_CONFIG):
        self.config = config

    def base_interval(self, streak: int) -> int:
        """
        Base interval in days for a streak (clamped to the last bucket).
        """
        intervals = self.config.base_intervals
        return intervals[min(max(streak, 0), len(intervals) - 1)]

    def accuracy_multiplier(self, accuracy: float, total_reviews: int) -> float:
        config = self.config
        if total_reviews < config.accuracy_min_reviews:
            return 1.0
        if accuracy < config.accuracy_critical:
            return config.multiplier_critical
        if accuracy < config.accuracy_low:
            return config.multiplier_low
        if accuracy > config.accuracy_high:
            return config.multiplier_high
        return 1.0

    def interval_for(
        self,
        previous: SpacedRepState,
        advanced: SpacedRepState,
        was_correct: bool,
        status: Optional[MasteryStatus] = None
    ) -> int:
        config = self.config

        if status is None:
            from vocab_core.srs.mastery import classify
            status = classify(advanced.total_reviews, advanced.correct_answers, advanced.streak)

        reviews_multiplier = (
            config.reviews_multiplier
            if advanced.total_reviews >= config.reviews_threshold
            else 1.0
        )
        interval = math.floor(
            self.base_interval(advanced.streak)
            * self.accuracy_multiplier(advanced.accuracy, advanced.total_reviews)
            * reviews_multiplier
        )

        if status == MasteryStatus.LEARNING:
            interval = min(interval, config.learning_max_interval)

        return max(config.min_interval, interval)


STRATEGIES: dict[str, IntervalStrategy] = {
    EaseFactorStrategy.name: EaseFactorStrategy(),
    StreakBucketStrategy.name: StreakBucketStrategy(),
}


def get_strategy(strategy: "str | IntervalStrategy") -> IntervalStrategy:
    """
    Resolve a strategy by name (instances are passed through).
    """
    if not isinstance(strategy, str):
        return strategy
    try:
        return STRATEGIES[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown interval strategy {strategy!r}. Available: {', '.join(sorted(STRATEGIES))}"
        )


def next_state(
    current: SpacedRepState,
    was_correct: bool,
    strategy: "str | IntervalStrategy" = EaseFactorStrategy.name,
    status: Optional[MasteryStatus] = None,
    today: Optional[date] = None
) -> SpacedRepState:
    """
    Compute the spaced-repetition state after one answer.

    Args:
        current: State before the answer
        was_correct: Whether the answer was correct
        strategy: Interval policy (name or instance)
        status: Post-answer mastery status, if the caller already classified it
        today: Calendar day of the answer (defaults to today, UTC)

    Returns:
        New SpacedRepState; next_review_date = today + interval days

    Raises:
        InvalidStateError: if the current state breaks an invariant
    """
    current.validate()
    today = today or datetime.now(timezone.utc).date()

    advanced = advance_counters(current, was_correct)
    interval = get_strategy(strategy).interval_for(current, advanced, was_correct, status)

    return replace(
        advanced,
        interval=interval,
        next_review_date=today + timedelta(days=interval),
    )
