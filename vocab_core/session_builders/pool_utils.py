"""
Pool utilities for session builders.

Candidate pools arrive over-fetched; these helpers decide how big each fetch
is and trim each pool down to its target count.
"""

from __future__ import annotations

import random
from typing import Mapping, Optional, Sequence, TypeVar

from vocab_core.config import CANDIDATE_MULTIPLIER, NEW_CANDIDATE_MULTIPLIER
from vocab_core.session_builders.pool_types import PoolSpec
from vocab_core.srs.constants import STATUS_ORDER, MasteryStatus


T = TypeVar("T")


def candidate_query_specs(
    targets: Mapping[MasteryStatus, int],
    multiplier: int = CANDIDATE_MULTIPLIER,
    new_multiplier: int = NEW_CANDIDATE_MULTIPLIER
) -> dict[MasteryStatus, PoolSpec]:
    """
    Fetch sizes and orderings for each status pool.

    The new pool is fetched newest first with a large multiplier so the random
    pick has room to vary; the others are fetched most urgent first.
    """
    specs: dict[MasteryStatus, PoolSpec] = {}
    for status in STATUS_ORDER:
        target = targets.get(status, 0)
        if status == MasteryStatus.NEW:
            specs[status] = PoolSpec(status, target * new_multiplier, "created_at_desc")
        else:
            specs[status] = PoolSpec(status, target * multiplier, "recommended_review_date_asc")
    return specs


def select_from_pool(
    pool: Sequence[T],
    count: int,
    status: MasteryStatus,
    rng: Optional[random.Random] = None
) -> list[T]:
    """
    Trim one pool to `count` items.

    New pools are sampled uniformly at random (no duplicates); urgency-ordered
    pools keep their first `count` items in order. Short pools are taken whole.
    """
    if count <= 0 or not pool:
        return []

    take = min(count, len(pool))
    if status == MasteryStatus.NEW:
        return (rng or random).sample(list(pool), take)
    return list(pool[:take])


def select_candidates(
    pools: Mapping[MasteryStatus, Sequence[T]],
    targets: Mapping[MasteryStatus, int],
    rng: Optional[random.Random] = None
) -> list[T]:
    """
    Pick the requested number of candidates per status and concatenate them.

    Returns:
        Selected candidates grouped in STATUS_ORDER (new, learning, reviewing,
        mastered). Callers shuffle for presentation if they want to.
    """
    selected: list[T] = []
    for status in STATUS_ORDER:
        selected.extend(
            select_from_pool(pools.get(status, []), targets.get(status, 0), status, rng)
        )
    return selected
