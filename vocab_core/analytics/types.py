"""
Types for learner dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class ReviewStatistics:
    """
    Review workload of one learner on a given day.
    """
    due_today: int      # Due exactly today
    overdue: int        # Past their review date
    max_debt: int       # Largest overdue gap in days (capped)
    total_items: int    # Items with a progress record


@dataclass(frozen=True)
class LearnerDashboardData:
    """
    Precomputed metrics for the progress page.
    """
    user_id: str
    statistics: ReviewStatistics
    status_distribution: pd.Series
    struggling: pd.DataFrame
    due_item_ids: list[str]
