"""
Service layer to assemble the learner progress dashboard.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from vocab_core.analytics.metrics import (
    compute_review_statistics,
    compute_status_distribution,
    compute_struggling_items,
)
from vocab_core.analytics.queries import load_progress_df
from vocab_core.analytics.types import LearnerDashboardData
from vocab_core.srs.constants import MasteryStatus
from vocab_core.srs.database import ProgressDatabase


def build_learner_dashboard(
    database: ProgressDatabase,
    user_id: str,
    today: Optional[date] = None
) -> LearnerDashboardData:
    """
    Build all KPI values needed by the progress page for one learner.
    """
    today = today or datetime.now(timezone.utc).date()
    progress_df = load_progress_df(database, user_id)

    # Catalog items never answered are reported as new
    available = database.count_available(user_id)
    tracked_new = int((progress_df["status"] == MasteryStatus.NEW.value).sum()) if not progress_df.empty else 0
    untracked = max(0, available[MasteryStatus.NEW] - tracked_new)

    return LearnerDashboardData(
        user_id=user_id,
        statistics=compute_review_statistics(progress_df, today),
        status_distribution=compute_status_distribution(progress_df, new_untracked=untracked),
        struggling=compute_struggling_items(progress_df),
        due_item_ids=database.get_due_items(user_id, today),
    )
