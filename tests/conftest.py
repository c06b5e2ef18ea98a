import random
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from vocab_core.srs.constants import MasteryStatus
from vocab_core.srs.database import ProgressDatabase
from vocab_core.srs.progress_state import ItemProgress

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
TODAY = NOW.date()
LEARNER = "learner-1"


@pytest.fixture
def engine():
    """Shared in-memory SQLite engine (one connection for every session)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    database = ProgressDatabase(engine)
    database.init_db()
    return database


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def rng():
    return random.Random(1234)


def make_items(prefix, count, start=datetime(2026, 1, 1, tzinfo=timezone.utc)):
    """Catalog rows with strictly increasing created_at."""
    return [
        {
            "id": f"{prefix}{i}",
            "english": f"{prefix} word {i}",
            "japanese": f"単語{i}",
            "created_at": start + timedelta(minutes=i),
        }
        for i in range(count)
    ]


def make_progress(item_id, status, recommended_review_date=TODAY, user_id=LEARNER, **overrides):
    """Progress record in a given status with counters consistent with it."""
    counters = {
        MasteryStatus.NEW: dict(total_reviews=1, correct_answers=1, streak=1, repetitions=1),
        MasteryStatus.LEARNING: dict(total_reviews=4, correct_answers=2, streak=1, repetitions=1),
        MasteryStatus.REVIEWING: dict(total_reviews=10, correct_answers=7, streak=5, repetitions=5),
        MasteryStatus.MASTERED: dict(total_reviews=10, correct_answers=9, streak=6, repetitions=6),
    }[status]
    counters.update(overrides)
    fields = dict(
        user_id=user_id,
        item_id=item_id,
        next_review_date=recommended_review_date,
        recommended_review_date=recommended_review_date,
        status=status,
    )
    fields.update(counters)
    return ItemProgress(**fields)


def save_all(database, progresses):
    with database.transaction() as uow:
        for progress in progresses:
            uow.save_progress(progress)


@pytest.fixture
def populated_db(db):
    """
    Catalog of 17 items for LEARNER:
    2 untouched (new), 5 learning, 5 reviewing, 5 mastered.

    Recommended review dates increase with the item number, so r0 is the
    most urgent reviewing item.
    """
    db.add_items(make_items("n", 2) + make_items("l", 5) + make_items("r", 5) + make_items("m", 5))
    progresses = []
    for prefix, status in (
        ("l", MasteryStatus.LEARNING),
        ("r", MasteryStatus.REVIEWING),
        ("m", MasteryStatus.MASTERED),
    ):
        for i in range(5):
            progresses.append(make_progress(
                f"{prefix}{i}", status, recommended_review_date=date(2026, 3, 1) + timedelta(days=i)
            ))
    save_all(db, progresses)
    return db
