from datetime import date

import pytest
from sqlalchemy import text

from conftest import LEARNER, TODAY, make_items, make_progress, save_all
from vocab_core.errors import NotFoundError, PersistenceError, ValidationError
from vocab_core.srs.constants import MasteryStatus
from vocab_core.srs.database import create_database_engine


def test_init_db_is_idempotent(db):
    db.init_db()
    assert db.add_items(make_items("w", 2)) == 2


def test_add_items_upserts(db):
    db.add_items(make_items("w", 2))
    db.add_items([{"id": "w0", "english": "dog", "japanese": "犬", "part_of_speech": "noun"}])

    item = db.get_item("w0")
    assert item["english"] == "dog"
    assert item["part_of_speech"] == "noun"
    assert db.get_item("missing") is None


def test_add_items_validates(db):
    with pytest.raises(ValidationError):
        db.add_items([{"id": "", "english": "x", "japanese": "y"}])
    assert db.get_item("") is None


def test_count_available(populated_db):
    counts = populated_db.count_available(LEARNER)
    assert counts == {
        MasteryStatus.NEW: 2,
        MasteryStatus.LEARNING: 5,
        MasteryStatus.REVIEWING: 5,
        MasteryStatus.MASTERED: 5,
    }
    assert populated_db.count_available("someone-else")[MasteryStatus.NEW] == 17


def test_tracked_new_items_are_candidates(populated_db):
    save_all(populated_db, [make_progress("n0", MasteryStatus.NEW)])
    assert populated_db.count_available(LEARNER)[MasteryStatus.NEW] == 2

    pool = populated_db.fetch_candidates(LEARNER, MasteryStatus.NEW, 10)
    assert [snapshot.item_id for snapshot in pool] == ["n1", "n0"]
    assert pool[0].progress is None
    assert pool[1].progress.total_reviews == 1


def test_fetch_candidates_orders_by_urgency(populated_db):
    save_all(populated_db, [make_progress("r4", MasteryStatus.REVIEWING, recommended_review_date=date(2026, 2, 1))])

    pool = populated_db.fetch_candidates(LEARNER, MasteryStatus.REVIEWING, 3)
    assert [snapshot.item_id for snapshot in pool] == ["r4", "r0", "r1"]
    assert populated_db.fetch_candidates(LEARNER, MasteryStatus.REVIEWING, 0) == []


def test_require_progress(populated_db):
    assert populated_db.require_progress(LEARNER, "l0").status == MasteryStatus.LEARNING
    with pytest.raises(NotFoundError):
        populated_db.require_progress(LEARNER, "n0")


def test_due_items_exclude_mastered(populated_db):
    due = populated_db.get_due_items(LEARNER, TODAY)
    # l0/l1 and r0/r1 are due on or before 2026-03-02; m0/m1 are mastered
    assert due == ["l0", "r0", "l1", "r1"]


def test_reset_progress_for_one_learner(populated_db):
    save_all(populated_db, [make_progress("n0", MasteryStatus.LEARNING, user_id="learner-2")])

    assert populated_db.reset_progress(LEARNER) == 15
    assert populated_db.get_all_progress(LEARNER) == []
    assert len(populated_db.get_all_progress("learner-2")) == 1
    assert populated_db.get_item("l0") is not None

    assert populated_db.reset_progress() == 1


def test_storage_errors_become_persistence_errors(db):
    with pytest.raises(PersistenceError):
        with db.transaction() as uow:
            uow.session.execute(text("SELECT * FROM no_such_table"))


def test_sqlite_engine_factory():
    engine = create_database_engine("sqlite://")
    assert engine.dialect.name == "sqlite"
    engine.dispose()
