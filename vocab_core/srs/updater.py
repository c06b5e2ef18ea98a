"""
Updater - Apply Answers to Progress Records

Main workflow for one answer:
1. Load progress (or initialize a new record on first answer)
2. Fold the answer into the counters
3. Classify mastery from the post-answer counters
4. Compute interval / next review date (primary strategy) and
   recommended review date (recommendation strategy)
5. Save the record and report the status transition

apply_answer() is pure. ProgressUpdater wraps it in database transactions:
a single answer is one transaction, a batch of answers is one transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from vocab_core.errors import NotFoundError, ValidationError
from vocab_core.schemas import LEARNING_MODES, AnswerEvent, parse_answer
from vocab_core.srs.constants import MASTERY_THRESHOLDS, MasteryStatus, MasteryThresholds
from vocab_core.srs.database import ProgressDatabase
from vocab_core.srs.intervals import IntervalStrategy, advance_counters, get_strategy, next_state
from vocab_core.srs.mastery import StatusTransition, TransitionKind, classify
from vocab_core.srs.progress_state import ItemProgress, initialize_new_progress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerResult:
    """Updated progress plus the status transition of one answer."""
    progress: ItemProgress
    transition: StatusTransition


@dataclass
class BatchReport:
    """
    Outcome of a batch update.

    Every processed item lands in exactly one of upgrades / downgrades /
    maintained, comparing its status before the batch with its status after.
    """
    items_processed: int = 0
    answers_applied: int = 0
    upgrades: list[StatusTransition] = field(default_factory=list)
    downgrades: list[StatusTransition] = field(default_factory=list)
    maintained: list[StatusTransition] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)             # Unknown item ids
    rejected: list[ValidationError] = field(default_factory=list)  # Malformed answers

    def add(self, transition: StatusTransition) -> None:
        self.items_processed += 1
        if transition.kind == TransitionKind.UPGRADE:
            self.upgrades.append(transition)
        elif transition.kind == TransitionKind.DOWNGRADE:
            self.downgrades.append(transition)
        else:
            self.maintained.append(transition)


def _update_mode_stats(progress: ItemProgress, mode: Optional[str], correct: bool) -> None:
    if mode is None:
        return
    if mode not in LEARNING_MODES:
        logger.debug("[PROGRESS] Ignoring unknown learning mode %r", mode)
        return
    counts = progress.mode_stats.setdefault(mode, {"total": 0, "correct": 0})
    counts["total"] = counts.get("total", 0) + 1
    if correct:
        counts["correct"] = counts.get("correct", 0) + 1


def apply_answer(
    progress: ItemProgress,
    outcome: AnswerEvent,
    strategy: "str | IntervalStrategy" = "ease_factor",
    recommendation_strategy: "str | IntervalStrategy" = "streak_bucket",
    thresholds: MasteryThresholds = MASTERY_THRESHOLDS,
    now: Optional[datetime] = None
) -> tuple[ItemProgress, StatusTransition]:
    """
    Apply one answer to a progress record (no database calls).

    Counters are updated before classification, and the same post-answer
    counters feed both the classifier and the interval strategies.

    Args:
        progress: Record before the answer (not modified)
        outcome: The answer
        strategy: Policy for interval / next_review_date
        recommendation_strategy: Policy for recommended_review_date
        thresholds: Mastery cutoffs
        now: Answer timestamp (defaults to now, UTC)

    Returns:
        Tuple of (updated_progress, transition)

    Raises:
        InvalidStateError: if the stored record breaks an invariant
    """
    now = now or datetime.now(timezone.utc)
    today = now.date()
    correct = outcome.correct

    current = progress.spaced_rep_state()
    counters = advance_counters(current, correct)
    status = classify(
        counters.total_reviews,
        counters.correct_answers,
        counters.streak,
        previous=progress.status,
        thresholds=thresholds,
    )

    scheduled = next_state(current, correct, strategy=strategy, status=status, today=today)
    recommended = next_state(current, correct, strategy=recommendation_strategy, status=status, today=today)

    updated = progress.copy()
    updated.total_reviews = scheduled.total_reviews
    updated.correct_answers = scheduled.correct_answers
    updated.streak = scheduled.streak
    updated.ease_factor = scheduled.ease_factor
    updated.interval = scheduled.interval
    updated.repetitions = scheduled.repetitions
    updated.next_review_date = scheduled.next_review_date
    updated.recommended_review_date = recommended.next_review_date
    updated.previous_status = progress.status
    updated.status = status
    updated.last_answer_correct = correct
    updated.last_reviewed_at = now
    _update_mode_stats(updated, outcome.mode, correct)

    return updated, StatusTransition(
        item_id=progress.item_id,
        previous_status=progress.status,
        new_status=status,
    )


class ProgressUpdater:
    """
    Transactional progress updates against a ProgressDatabase.
    """

    def __init__(
        self,
        database: ProgressDatabase,
        strategy: "str | IntervalStrategy" = "ease_factor",
        recommendation_strategy: "str | IntervalStrategy" = "streak_bucket",
        thresholds: MasteryThresholds = MASTERY_THRESHOLDS,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.database = database
        self.strategy = get_strategy(strategy)
        self.recommendation_strategy = get_strategy(recommendation_strategy)
        self.thresholds = thresholds
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _apply(self, progress: ItemProgress, outcome: AnswerEvent) -> tuple[ItemProgress, StatusTransition]:
        return apply_answer(
            progress,
            outcome,
            strategy=self.strategy,
            recommendation_strategy=self.recommendation_strategy,
            thresholds=self.thresholds,
            now=self.clock(),
        )

    def record_answer(
        self,
        user_id: str,
        item_id: str,
        correct: bool,
        mode: Optional[str] = None,
        response_time_ms: Optional[int] = None
    ) -> AnswerResult:
        """
        Record one answer in its own transaction.

        Raises:
            ValidationError: if the learner id or answer is malformed
            NotFoundError: if the item is not in the catalog
            PersistenceError: on storage failure (nothing was written)
        """
        if not user_id:
            raise ValidationError("user_id is required", item_id=item_id)
        outcome = parse_answer({
            "item_id": item_id,
            "correct": correct,
            "mode": mode,
            "response_time_ms": response_time_ms,
        })

        with self.database.transaction() as uow:
            if not uow.existing_item_ids([outcome.item_id]):
                raise NotFoundError(f"Unknown item {outcome.item_id}")

            progress = uow.get_progress(user_id, outcome.item_id)
            if progress is None:
                progress = initialize_new_progress(user_id, outcome.item_id, today=self.clock().date())

            updated, transition = self._apply(progress, outcome)
            uow.save_progress(updated)

        logger.info(
            "[PROGRESS] %s/%s %s -> %s (streak=%d, interval=%d)",
            user_id, outcome.item_id, transition.previous_status.value,
            transition.new_status.value, updated.streak, updated.interval,
        )
        return AnswerResult(progress=updated, transition=transition)

    def record_answers(self, user_id: str, answers: Iterable[Any]) -> BatchReport:
        """
        Apply a batch of answers as one atomic transaction.

        - Answers for the same item are applied in input order
        - Unknown item ids are skipped (reported in `skipped`)
        - Malformed answers are rejected one by one (reported in `rejected`)
        - A storage failure rolls back the whole batch and raises PersistenceError

        Args:
            user_id: Learner identifier
            answers: AnswerEvent objects or dicts {item_id, correct, response_time_ms, mode}

        Returns:
            BatchReport with status transitions per item
        """
        if not user_id:
            raise ValidationError("user_id is required")

        report = BatchReport()
        outcomes: list[AnswerEvent] = []
        for raw in answers:
            try:
                outcomes.append(parse_answer(raw))
            except ValidationError as exc:
                logger.warning("[PROGRESS] Rejected answer for %s: %s", exc.item_id, exc)
                report.rejected.append(exc)

        before: dict[str, MasteryStatus] = {}
        working: dict[str, ItemProgress] = {}

        with self.database.transaction() as uow:
            known = uow.existing_item_ids(outcome.item_id for outcome in outcomes)

            for outcome in outcomes:
                item_id = outcome.item_id
                if item_id not in known:
                    if item_id not in report.skipped:
                        report.skipped.append(item_id)
                    continue

                progress = working.get(item_id)
                if progress is None:
                    progress = uow.get_progress(user_id, item_id)
                    if progress is None:
                        progress = initialize_new_progress(user_id, item_id, today=self.clock().date())
                    before[item_id] = progress.status

                updated, _ = self._apply(progress, outcome)
                uow.save_progress(updated)
                working[item_id] = updated
                report.answers_applied += 1

        for item_id, previous_status in before.items():
            report.add(StatusTransition(
                item_id=item_id,
                previous_status=previous_status,
                new_status=working[item_id].status,
            ))

        logger.info(
            "[PROGRESS] Batch for %s: %d answers, %d items (%d up, %d down, %d same), "
            "%d skipped, %d rejected",
            user_id, report.answers_applied, report.items_processed,
            len(report.upgrades), len(report.downgrades), len(report.maintained),
            len(report.skipped), len(report.rejected),
        )
        return report
