from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import LEARNER, NOW, TODAY, make_items, make_progress, save_all
from vocab_core.errors import InvalidStateError, NotFoundError, PersistenceError, ValidationError
from vocab_core.schemas import AnswerEvent
from vocab_core.srs.constants import MasteryStatus
from vocab_core.srs.database import ProgressUnitOfWork
from vocab_core.srs.progress_state import initialize_new_progress
from vocab_core.srs.updater import ProgressUpdater, apply_answer


@pytest.fixture
def updater(db, clock):
    db.add_items(make_items("w", 5))
    return ProgressUpdater(db, clock=clock)


# ---- Pure update ----

def test_apply_answer_does_not_mutate_input():
    progress = initialize_new_progress(LEARNER, "w0", today=TODAY)
    updated, transition = apply_answer(progress, AnswerEvent(item_id="w0", correct=True), now=NOW)

    assert progress.total_reviews == 0
    assert updated.total_reviews == 1
    assert updated.correct_answers == 1
    assert updated.last_answer_correct is True
    assert updated.last_reviewed_at == NOW
    assert transition.previous_status == MasteryStatus.NEW
    assert transition.new_status == MasteryStatus.NEW


def test_apply_answer_uses_post_answer_counters():
    # Third answer reaches the review minimum, so classification moves on now
    progress = make_progress("w0", MasteryStatus.NEW, total_reviews=2, correct_answers=2, streak=2, repetitions=2)
    updated, transition = apply_answer(progress, AnswerEvent(item_id="w0", correct=True), now=NOW)

    assert updated.total_reviews == 3
    assert updated.status == MasteryStatus.LEARNING
    assert updated.previous_status == MasteryStatus.NEW
    assert transition.kind.value == "upgrade"


def test_apply_answer_sets_both_review_dates():
    progress = make_progress("w0", MasteryStatus.LEARNING, total_reviews=4, correct_answers=3, streak=1,
                             repetitions=1, interval=1)
    updated, _ = apply_answer(progress, AnswerEvent(item_id="w0", correct=True), now=NOW)

    # ease_factor: repetitions 2 -> 6 days
    assert updated.interval == 6
    assert updated.next_review_date == TODAY + timedelta(days=6)
    # streak_bucket: streak 2 -> 7 days, accuracy 0.8 -> x1.0, learning cap -> 3 days
    assert updated.recommended_review_date == TODAY + timedelta(days=3)


def test_mode_stats_counted_for_known_modes_only():
    progress = initialize_new_progress(LEARNER, "w0", today=TODAY)
    progress, _ = apply_answer(progress, AnswerEvent(item_id="w0", correct=True, mode="eng_to_jpn"), now=NOW)
    progress, _ = apply_answer(progress, AnswerEvent(item_id="w0", correct=False, mode="eng_to_jpn"), now=NOW)
    progress, _ = apply_answer(progress, AnswerEvent(item_id="w0", correct=True, mode="telepathy"), now=NOW)
    progress, _ = apply_answer(progress, AnswerEvent(item_id="w0", correct=True), now=NOW)

    assert progress.mode_stats == {"eng_to_jpn": {"total": 2, "correct": 1}}
    assert progress.total_reviews == 4


# ---- Single answer ----

def test_record_answer_creates_and_updates_progress(updater, db):
    first = updater.record_answer(LEARNER, "w1", correct=True, mode="jpn_to_eng")
    second = updater.record_answer(LEARNER, "w1", correct=True)

    stored = db.require_progress(LEARNER, "w1")
    assert first.progress.repetitions == 1
    assert second.progress.repetitions == 2
    assert stored.repetitions == 2
    assert stored.interval == 6
    assert stored.mode_stats == {"jpn_to_eng": {"total": 1, "correct": 1}}


def test_record_answer_unknown_item(updater, db):
    with pytest.raises(NotFoundError):
        updater.record_answer(LEARNER, "missing", correct=True)
    assert db.load_progress(LEARNER, "missing") is None


def test_record_answer_requires_ids(updater):
    with pytest.raises(ValidationError):
        updater.record_answer("", "w1", correct=True)
    with pytest.raises(ValidationError):
        updater.record_answer(LEARNER, "", correct=True)


def test_record_answer_rejects_corrupt_record(updater, db):
    save_all(db, [make_progress("w2", MasteryStatus.LEARNING, ease_factor=1.0)])
    with pytest.raises(InvalidStateError):
        updater.record_answer(LEARNER, "w2", correct=True)
    assert db.require_progress(LEARNER, "w2").ease_factor == 1.0


# ---- Batch ----

def test_batch_reports_transitions(updater, db):
    save_all(db, [
        make_progress("w1", MasteryStatus.MASTERED),
        make_progress("w2", MasteryStatus.LEARNING, total_reviews=4, correct_answers=4, streak=4, repetitions=4),
    ])

    report = updater.record_answers(LEARNER, [
        {"wordId": "w1", "isCorrect": False, "mode": "eng_to_jpn"},
        {"item_id": "w2", "correct": True},
        {"item_id": "w3", "correct": True},
    ])

    assert report.items_processed == 3
    assert report.answers_applied == 3
    assert [t.item_id for t in report.downgrades] == ["w1"]
    assert [t.item_id for t in report.upgrades] == ["w2"]
    assert [t.item_id for t in report.maintained] == ["w3"]
    assert db.require_progress(LEARNER, "w1").status == MasteryStatus.LEARNING
    assert db.require_progress(LEARNER, "w2").status == MasteryStatus.REVIEWING


def test_batch_applies_same_item_in_order(updater, db):
    report = updater.record_answers(LEARNER, [
        AnswerEvent(item_id="w0", correct=False),
        AnswerEvent(item_id="w0", correct=True),
        AnswerEvent(item_id="w0", correct=True),
    ])

    stored = db.require_progress(LEARNER, "w0")
    assert report.items_processed == 1
    assert report.answers_applied == 3
    assert stored.total_reviews == 3
    assert stored.streak == 2
    assert stored.repetitions == 2
    assert stored.interval == 6
    assert stored.ease_factor == pytest.approx(2.3)
    assert stored.last_answer_correct is True


def test_batch_skips_unknown_and_rejects_malformed(updater, db):
    report = updater.record_answers(LEARNER, [
        {"item_id": "w1", "correct": True},
        {"item_id": "nope", "correct": True},
        {"item_id": "nope", "correct": False},
        {"item_id": "w2"},
        {"correct": True},
    ])

    assert report.answers_applied == 1
    assert report.skipped == ["nope"]
    assert len(report.rejected) == 2
    assert report.rejected[0].item_id == "w2"
    assert report.rejected[1].item_id is None
    assert db.load_progress(LEARNER, "w1") is not None
    assert db.load_progress(LEARNER, "w2") is None


def test_batch_is_all_or_nothing(updater, db, monkeypatch):
    save_all(db, [make_progress("w1", MasteryStatus.LEARNING)])
    before = db.require_progress(LEARNER, "w1")

    original = ProgressUnitOfWork.save_progress
    calls = []

    def flaky_save(self, progress):
        calls.append(progress.item_id)
        if len(calls) == 2:
            raise SQLAlchemyError("connection lost")
        return original(self, progress)

    monkeypatch.setattr(ProgressUnitOfWork, "save_progress", flaky_save)

    with pytest.raises(PersistenceError):
        updater.record_answers(LEARNER, [
            {"item_id": "w1", "correct": True},
            {"item_id": "w0", "correct": True},
            {"item_id": "w1", "correct": True},
        ])

    assert calls == ["w1", "w0"]
    after = db.require_progress(LEARNER, "w1")
    assert after.total_reviews == before.total_reviews
    assert after.streak == before.streak
    assert db.load_progress(LEARNER, "w0") is None
