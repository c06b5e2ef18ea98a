"""
Database - Progress Database I/O Operations

Handles all database operations for vocabulary items and progress records.
Uses SQLAlchemy ORM (Postgres in production, SQLite in tests).

This module handles ONLY database I/O.
Algorithm logic is handled by the intervals, mastery and updater modules.

Writes go through ProgressDatabase.transaction(), which yields a unit of work
and commits once at the end (or rolls everything back). Storage failures
surface as PersistenceError.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Iterable, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, create_engine, delete, func, inspect, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from vocab_core.config import get_database_url
from vocab_core.errors import NotFoundError, PersistenceError, ValidationError
from vocab_core.schemas import VocabularyItemIn
from vocab_core.srs.constants import STATUS_ORDER, MasteryStatus
from vocab_core.srs.models import Base, ItemProgressRecord, VocabularyItem
from vocab_core.srs.progress_state import ItemProgress, ItemSnapshot

logger = logging.getLogger(__name__)


def create_database_engine(db_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    Server databases get a connection pool; SQLite keeps its default pool.
    """
    if db_url.startswith("sqlite"):
        return create_engine(db_url, echo=False)

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


# ---- Record conversion ----

def _to_progress(record: ItemProgressRecord) -> ItemProgress:
    return ItemProgress(
        user_id=record.user_id,
        item_id=record.item_id,
        total_reviews=record.total_reviews,
        correct_answers=record.correct_answers,
        streak=record.streak,
        ease_factor=record.ease_factor,
        interval=record.interval_days,
        repetitions=record.repetitions,
        next_review_date=record.next_review_date,
        recommended_review_date=record.recommended_review_date,
        status=MasteryStatus(record.status),
        previous_status=MasteryStatus(record.previous_status) if record.previous_status else None,
        last_answer_correct=record.last_answer_correct,
        last_reviewed_at=record.last_reviewed_at,
        mode_stats={mode: dict(counts) for mode, counts in (record.mode_stats or {}).items()},
    )


def _copy_to_record(progress: ItemProgress, record: ItemProgressRecord) -> None:
    record.total_reviews = progress.total_reviews
    record.correct_answers = progress.correct_answers
    record.streak = progress.streak
    record.ease_factor = progress.ease_factor
    record.interval_days = progress.interval
    record.repetitions = progress.repetitions
    record.next_review_date = progress.next_review_date
    record.recommended_review_date = progress.recommended_review_date
    record.status = progress.status.value
    record.previous_status = progress.previous_status.value if progress.previous_status else None
    record.last_answer_correct = progress.last_answer_correct
    record.last_reviewed_at = progress.last_reviewed_at
    # Assign a fresh dict so the JSON column is flagged as modified
    record.mode_stats = {mode: dict(counts) for mode, counts in progress.mode_stats.items()}
    record.updated_at = datetime.now(timezone.utc)


def _validate_item(raw: "VocabularyItemIn | dict") -> VocabularyItemIn:
    if isinstance(raw, VocabularyItemIn):
        return raw
    try:
        return VocabularyItemIn.model_validate(raw)
    except PydanticValidationError as exc:
        item_id = raw.get("id") if isinstance(raw, dict) else None
        raise ValidationError(f"Malformed vocabulary item: {exc.errors()[0]['msg']}", item_id=item_id) from exc


def _item_to_dict(item: VocabularyItem) -> dict:
    return {
        "id": item.id,
        "english": item.english,
        "japanese": item.japanese,
        "phonetic": item.phonetic,
        "part_of_speech": item.part_of_speech,
        "example_english": item.example_english,
        "example_japanese": item.example_japanese,
        "created_at": item.created_at,
    }


class ProgressUnitOfWork:
    """
    Reads and writes inside one open transaction.

    Obtained from ProgressDatabase.transaction(); never commits on its own.
    """

    def __init__(self, session: Session):
        self.session = session

    def existing_item_ids(self, item_ids: Iterable[str]) -> set[str]:
        """
        Return the subset of item_ids present in the catalog.
        """
        wanted = {item_id for item_id in item_ids if item_id}
        if not wanted:
            return set()
        rows = self.session.execute(
            select(VocabularyItem.id).where(VocabularyItem.id.in_(wanted))
        ).scalars()
        return set(rows)

    def get_progress(self, user_id: str, item_id: str, lock: bool = True) -> Optional[ItemProgress]:
        """
        Load a progress record, row-locked until the transaction ends.

        Returns:
            ItemProgress if found, None if the learner never answered the item
        """
        stmt = select(ItemProgressRecord).where(
            ItemProgressRecord.user_id == user_id,
            ItemProgressRecord.item_id == item_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        record = self.session.execute(stmt).scalar_one_or_none()
        if record is None:
            return None
        return _to_progress(record)

    def save_progress(self, progress: ItemProgress) -> None:
        """
        Insert or update a progress record (flushed, committed with the transaction).
        """
        record = self.session.get(ItemProgressRecord, (progress.user_id, progress.item_id))
        if record is None:
            record = ItemProgressRecord(
                user_id=progress.user_id,
                item_id=progress.item_id,
                created_at=datetime.now(timezone.utc),
            )
            self.session.add(record)
        _copy_to_record(progress, record)
        self.session.flush()


class ProgressDatabase:
    """
    Storage access for the scheduler (repository over a SQLAlchemy engine).
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_env(cls) -> "ProgressDatabase":
        """
        Build a database from DATABASE_URL (TEST_MODE selects the test database).
        """
        return cls(create_database_engine(get_database_url()))

    def get_session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[ProgressUnitOfWork]:
        """
        Run a block as one atomic transaction.

        Commits when the block exits normally. Any exception rolls back every
        write made in the block; storage errors are re-raised as PersistenceError.
        """
        session = self.get_session()
        try:
            yield ProgressUnitOfWork(session)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("[PROGRESS] Transaction rolled back: %s", exc)
            raise PersistenceError(f"Transaction aborted: {exc}") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def _read_session(self) -> Iterator[Session]:
        session = self.get_session()
        try:
            yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Read failed: {exc}") from exc
        finally:
            session.close()

    # ---- Schema ----

    def init_db(self) -> None:
        """
        Initialize database schema if tables don't exist.

        Safe to call multiple times - only creates tables if they don't exist.
        """
        try:
            existing_tables = set(inspect(self.engine).get_table_names())
            if not {"vocabulary_items", "item_progress"} <= existing_tables:
                Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Schema initialization failed: {exc}") from exc

    def reset_db(self) -> None:
        """
        DANGEROUS: Delete all data and recreate tables.

        Only use this for testing or when you want to start fresh.
        """
        try:
            Base.metadata.drop_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Schema reset failed: {exc}") from exc
        logger.warning("[PROGRESS] All tables dropped")
        self.init_db()

    def reset_progress(self, user_id: Optional[str] = None) -> int:
        """
        DANGEROUS: Delete progress records of one learner (or of everyone).

        The vocabulary catalog is kept.

        Returns:
            Number of deleted progress records
        """
        with self.transaction() as uow:
            stmt = delete(ItemProgressRecord)
            if user_id is not None:
                stmt = stmt.where(ItemProgressRecord.user_id == user_id)
            deleted = uow.session.execute(stmt).rowcount or 0
        logger.warning("[PROGRESS] Deleted %d progress records (user=%s)", deleted, user_id or "*")
        return deleted

    # ---- Catalog ----

    def add_items(self, items: Iterable["VocabularyItemIn | dict"]) -> int:
        """
        Insert or update vocabulary items in a single transaction.

        Returns:
            Number of items written

        Raises:
            ValidationError: if any item is malformed (nothing is written)
        """
        count = 0
        with self.transaction() as uow:
            for raw in items:
                item = _validate_item(raw)
                uow.session.merge(VocabularyItem(
                    id=item.id,
                    english=item.english,
                    japanese=item.japanese,
                    phonetic=item.phonetic,
                    part_of_speech=item.part_of_speech,
                    example_english=item.example_english,
                    example_japanese=item.example_japanese,
                    created_at=item.created_at or datetime.now(timezone.utc),
                ))
                count += 1
        return count

    def get_item(self, item_id: str) -> Optional[dict]:
        with self._read_session() as session:
            item = session.get(VocabularyItem, item_id)
            return _item_to_dict(item) if item is not None else None

    # ---- Progress reads ----

    def load_progress(self, user_id: str, item_id: str) -> Optional[ItemProgress]:
        """
        Load progress for one (learner, item) pair.

        Returns:
            ItemProgress if found, None if the learner never answered the item
        """
        with self._read_session() as session:
            record = session.get(ItemProgressRecord, (user_id, item_id))
            return _to_progress(record) if record is not None else None

    def require_progress(self, user_id: str, item_id: str) -> ItemProgress:
        """
        Load progress that must exist.

        Raises:
            NotFoundError: if there is no progress record for the pair
        """
        progress = self.load_progress(user_id, item_id)
        if progress is None:
            raise NotFoundError(f"Progress not found for user {user_id} and item {item_id}")
        return progress

    def get_all_progress(self, user_id: str) -> list[ItemProgress]:
        """
        All progress records of a learner, most recently reviewed first.
        """
        with self._read_session() as session:
            records = session.execute(
                select(ItemProgressRecord)
                .where(ItemProgressRecord.user_id == user_id)
                .order_by(ItemProgressRecord.updated_at.desc())
            ).scalars().all()
            return [_to_progress(record) for record in records]

    def get_due_items(self, user_id: str, today: Optional[date] = None) -> list[str]:
        """
        Item ids whose next review date has arrived (mastered items excluded).
        """
        today = today or datetime.now(timezone.utc).date()
        with self._read_session() as session:
            rows = session.execute(
                select(ItemProgressRecord.item_id)
                .where(
                    ItemProgressRecord.user_id == user_id,
                    ItemProgressRecord.status != MasteryStatus.MASTERED.value,
                    ItemProgressRecord.next_review_date <= today,
                )
                .order_by(ItemProgressRecord.next_review_date.asc(), ItemProgressRecord.item_id)
            ).scalars()
            return list(rows)

    # ---- Session candidates ----

    def count_available(self, user_id: str) -> dict[MasteryStatus, int]:
        """
        Number of items per status for a learner.

        Items without a progress record count as new.
        """
        with self._read_session() as session:
            total_items = session.execute(select(func.count(VocabularyItem.id))).scalar_one()
            rows = session.execute(
                select(ItemProgressRecord.status, func.count())
                .where(ItemProgressRecord.user_id == user_id)
                .group_by(ItemProgressRecord.status)
            ).all()

        counts = {status: 0 for status in STATUS_ORDER}
        for status, count in rows:
            counts[MasteryStatus(status)] = count

        # Untouched items are new too
        tracked = sum(counts[status] for status in STATUS_ORDER if status != MasteryStatus.NEW)
        counts[MasteryStatus.NEW] = max(0, total_items - tracked)
        return counts

    def fetch_candidates(self, user_id: str, status: MasteryStatus, limit: int) -> list[ItemSnapshot]:
        """
        Fetch an ordered candidate pool for one status.

        Ordering:
        - new: newest catalog items first (items never answered included)
        - learning / reviewing / mastered: earliest recommended review date first

        Args:
            user_id: Learner identifier
            status: Mastery status of the pool
            limit: Maximum number of candidates

        Returns:
            List of ItemSnapshot in pool order
        """
        if limit <= 0:
            return []

        if status == MasteryStatus.NEW:
            stmt = (
                select(VocabularyItem, ItemProgressRecord)
                .outerjoin(
                    ItemProgressRecord,
                    and_(
                        ItemProgressRecord.item_id == VocabularyItem.id,
                        ItemProgressRecord.user_id == user_id,
                    ),
                )
                .where(or_(
                    ItemProgressRecord.item_id.is_(None),
                    ItemProgressRecord.status == MasteryStatus.NEW.value,
                ))
                .order_by(VocabularyItem.created_at.desc(), VocabularyItem.id)
                .limit(limit)
            )
        else:
            stmt = (
                select(VocabularyItem, ItemProgressRecord)
                .join(ItemProgressRecord, ItemProgressRecord.item_id == VocabularyItem.id)
                .where(
                    ItemProgressRecord.user_id == user_id,
                    ItemProgressRecord.status == status.value,
                )
                .order_by(ItemProgressRecord.recommended_review_date.asc(), VocabularyItem.id)
                .limit(limit)
            )

        with self._read_session() as session:
            rows = session.execute(stmt).all()
            return [
                ItemSnapshot(
                    item_id=item.id,
                    item=_item_to_dict(item),
                    progress=_to_progress(record) if record is not None else None,
                )
                for item, record in rows
            ]
