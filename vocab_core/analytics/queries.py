"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

import pandas as pd

from vocab_core.analytics.constants import PROGRESS_COLUMNS
from vocab_core.srs.database import ProgressDatabase


def load_progress_df(database: ProgressDatabase, user_id: str) -> pd.DataFrame:
    """
    Load a learner's progress records into a dataframe (one row per item).
    """
    records = database.get_all_progress(user_id)
    if not records:
        return pd.DataFrame(columns=PROGRESS_COLUMNS)

    df = pd.DataFrame([
        {
            "item_id": p.item_id,
            "status": p.status.value,
            "total_reviews": p.total_reviews,
            "correct_answers": p.correct_answers,
            "streak": p.streak,
            "ease_factor": p.ease_factor,
            "next_review_date": p.next_review_date,
            "last_reviewed_at": p.last_reviewed_at,
        }
        for p in records
    ])
    df["next_review_date"] = pd.to_datetime(df["next_review_date"], errors="coerce")
    return df.sort_values("item_id").reset_index(drop=True)
