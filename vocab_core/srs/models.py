"""
SQLAlchemy ORM Models for the Progress Database

Defines the vocabulary catalog and the per-learner progress records.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class VocabularyItem(Base):
    """
    One vocabulary item of the shared catalog.
    """
    __tablename__ = 'vocabulary_items'

    id = Column(String(255), primary_key=True)
    english = Column(String(255), nullable=False)
    japanese = Column(String(255), nullable=False)
    phonetic = Column(String(255), nullable=True)
    part_of_speech = Column(String(50), nullable=False, default="other")
    example_english = Column(Text, nullable=True)
    example_japanese = Column(Text, nullable=True)

    # New-item pools are fetched newest first
    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<VocabularyItem({self.id}, {self.english})>"


class ItemProgressRecord(Base):
    """
    Progress of one learner on one item.

    Created lazily on the first answer; deleted only by an explicit reset.
    """
    __tablename__ = 'item_progress'

    # Primary key: composite of user_id and item_id
    user_id = Column(String(255), primary_key=True, nullable=False)
    item_id = Column(String(255), ForeignKey('vocabulary_items.id'), primary_key=True, nullable=False)

    # Aggregate performance
    total_reviews = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)

    # Spaced repetition
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval_days = Column(Integer, nullable=False, default=1)
    repetitions = Column(Integer, nullable=False, default=0)
    next_review_date = Column(Date, nullable=False)
    recommended_review_date = Column(Date, nullable=False)

    # Mastery
    status = Column(String(20), nullable=False, default="new")
    previous_status = Column(String(20), nullable=True)

    last_answer_correct = Column(Boolean, nullable=True)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)

    # Per-mode counters: {"eng_to_jpn": {"total": 3, "correct": 2}, ...}
    mode_stats = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_item_progress_status_due', 'user_id', 'status', 'recommended_review_date'),
    )

    def __repr__(self):
        return f"<ItemProgressRecord({self.user_id}, {self.item_id}, {self.status})>"
