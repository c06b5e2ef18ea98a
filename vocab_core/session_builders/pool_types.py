"""
Typed pool models shared across session builders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from vocab_core.srs.constants import MasteryStatus
from vocab_core.srs.progress_state import ItemProgress, ItemSnapshot


PoolOrder = Literal["created_at_desc", "recommended_review_date_asc"]

CandidatePools = dict[MasteryStatus, list[ItemSnapshot]]


@dataclass(frozen=True)
class PoolSpec:
    """
    How many candidates to fetch for one status, and in which order.
    """
    status: MasteryStatus
    count: int
    order_by: PoolOrder


@dataclass(frozen=True)
class SessionItem:
    """
    A single study step within a session.
    """
    item_id: str
    item: dict
    status: MasteryStatus
    progress: Optional[ItemProgress] = None

    @classmethod
    def from_snapshot(cls, snapshot: ItemSnapshot) -> "SessionItem":
        return cls(
            item_id=snapshot.item_id,
            item=snapshot.item,
            status=snapshot.status,
            progress=snapshot.progress.copy() if snapshot.progress is not None else None,
        )
