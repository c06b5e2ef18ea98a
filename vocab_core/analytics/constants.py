"""
Constants for learner dashboards.
"""

from __future__ import annotations

from typing import Final

from vocab_core.srs.constants import (
    MAX_REVIEW_DEBT_DAYS,
    STRUGGLING_MAX_ACCURACY,
    STRUGGLING_MIN_REVIEWS,
    MasteryStatus,
)


STATUS_LABELS: Final[dict[MasteryStatus, str]] = {
    MasteryStatus.NEW: "New",
    MasteryStatus.LEARNING: "Learning",
    MasteryStatus.REVIEWING: "Reviewing",
    MasteryStatus.MASTERED: "Mastered",
}

PROGRESS_COLUMNS: Final[list[str]] = [
    "item_id",
    "status",
    "total_reviews",
    "correct_answers",
    "streak",
    "ease_factor",
    "next_review_date",
    "last_reviewed_at",
]

__all__ = [
    "MAX_REVIEW_DEBT_DAYS",
    "STRUGGLING_MAX_ACCURACY",
    "STRUGGLING_MIN_REVIEWS",
    "STATUS_LABELS",
    "PROGRESS_COLUMNS",
]
