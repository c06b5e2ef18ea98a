"""
Metric computations for learner dashboards.
"""

from __future__ import annotations

from datetime import date

import pandas as pd

from vocab_core.analytics.constants import (
    MAX_REVIEW_DEBT_DAYS,
    STRUGGLING_MAX_ACCURACY,
    STRUGGLING_MIN_REVIEWS,
)
from vocab_core.analytics.types import ReviewStatistics
from vocab_core.srs.constants import STATUS_ORDER


def review_debt(next_review_date: date, today: date) -> int:
    """
    Days an item is overdue, capped at MAX_REVIEW_DEBT_DAYS (0 when not overdue).
    """
    days = (today - next_review_date).days
    return max(0, min(days, MAX_REVIEW_DEBT_DAYS))


def compute_review_debt(progress_df: pd.DataFrame, today: date) -> pd.Series:
    """
    Per-row review debt aligned with progress_df.
    """
    if progress_df.empty:
        return pd.Series(dtype="int64")
    days = (pd.Timestamp(today) - progress_df["next_review_date"]).dt.days
    return days.fillna(0).clip(lower=0, upper=MAX_REVIEW_DEBT_DAYS).astype("int64")


def compute_review_statistics(progress_df: pd.DataFrame, today: date) -> ReviewStatistics:
    """
    Due-today / overdue counts and the largest debt.
    """
    if progress_df.empty:
        return ReviewStatistics(due_today=0, overdue=0, max_debt=0, total_items=0)

    debt = compute_review_debt(progress_df, today)
    due_today = (progress_df["next_review_date"] == pd.Timestamp(today)) & (debt == 0)
    overdue = debt > 0

    return ReviewStatistics(
        due_today=int(due_today.sum()),
        overdue=int(overdue.sum()),
        max_debt=int(debt[overdue].max()) if overdue.any() else 0,
        total_items=len(progress_df),
    )


def compute_status_distribution(progress_df: pd.DataFrame, new_untracked: int = 0) -> pd.Series:
    """
    Item count per mastery status, indexed in status order.

    Args:
        progress_df: Progress records
        new_untracked: Catalog items without a progress record (counted as new)
    """
    index = [status.value for status in STATUS_ORDER]
    if progress_df.empty:
        counts = pd.Series(0, index=index, dtype="int64")
    else:
        counts = progress_df["status"].value_counts().reindex(index, fill_value=0).astype("int64")
    counts[STATUS_ORDER[0].value] += new_untracked
    return counts


def compute_struggling_items(progress_df: pd.DataFrame) -> pd.DataFrame:
    """
    Items with enough reviews and low accuracy, worst accuracy first.
    """
    columns = ["item_id", "status", "total_reviews", "correct_answers", "accuracy"]
    if progress_df.empty:
        return pd.DataFrame(columns=columns)

    scoped = progress_df[progress_df["total_reviews"] >= STRUGGLING_MIN_REVIEWS].copy()
    if scoped.empty:
        return pd.DataFrame(columns=columns)

    scoped["accuracy"] = scoped["correct_answers"] / scoped["total_reviews"]
    scoped = scoped[scoped["accuracy"] <= STRUGGLING_MAX_ACCURACY]
    return (
        scoped.sort_values(["accuracy", "total_reviews", "item_id"], ascending=[True, False, True])
        [columns]
        .reset_index(drop=True)
    )
