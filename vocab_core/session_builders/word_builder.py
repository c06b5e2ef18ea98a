"""
Word session builder - pattern-driven session creation

Creates a study session of SESSION_SIZE vocabulary items:
1. Count available items per status (new / learning / reviewing / mastered)
2. Compose target counts from a session pattern (named or random),
   redistributing slots a status cannot fill
3. Fetch over-sized candidate pools per status
   - new: newest first, x100
   - learning / reviewing / mastered: earliest recommended review date first, x3
4. Trim each pool to its target (new sampled at random, others by urgency)
5. Shuffle the result for presentation
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol

from vocab_core.config import SchedulerSettings
from vocab_core.session_builders.composer import compose
from vocab_core.session_builders.patterns import select_pattern, select_random_pattern
from vocab_core.session_builders.pool_types import CandidatePools, PoolSpec, SessionItem
from vocab_core.session_builders.pool_utils import candidate_query_specs, select_candidates
from vocab_core.srs.constants import MasteryStatus
from vocab_core.srs.progress_state import ItemSnapshot

logger = logging.getLogger(__name__)


class CandidateStore(Protocol):
    """The read side of the progress store that sessions are built from."""

    def count_available(self, user_id: str) -> dict[MasteryStatus, int]:
        ...

    def fetch_candidates(self, user_id: str, status: MasteryStatus, limit: int) -> list[ItemSnapshot]:
        ...


def fetch_candidate_pools(
    store: CandidateStore,
    user_id: str,
    specs: dict[MasteryStatus, PoolSpec],
    workers: int = 1
) -> CandidatePools:
    """
    Fetch every non-empty pool; pools are independent so they may run in parallel.
    """
    wanted = [spec for spec in specs.values() if spec.count > 0]
    pools: CandidatePools = {spec.status: [] for spec in specs.values()}
    if not wanted:
        return pools

    if workers > 1 and len(wanted) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(wanted))) as executor:
            futures = {
                spec.status: executor.submit(store.fetch_candidates, user_id, spec.status, spec.count)
                for spec in wanted
            }
            for status, future in futures.items():
                pools[status] = future.result()
    else:
        for spec in wanted:
            pools[spec.status] = store.fetch_candidates(user_id, spec.status, spec.count)

    return pools


def create_session(
    store: CandidateStore,
    user_id: str,
    session_size: Optional[int] = None,
    pattern_name: Optional[str] = None,
    settings: Optional[SchedulerSettings] = None,
    rng: Optional[random.Random] = None,
    shuffle: bool = True
) -> list[SessionItem]:
    """
    Create a study session for a learner.

    Args:
        store: Progress store (count_available / fetch_candidates)
        user_id: Learner identifier
        session_size: Number of items (defaults to settings.session_size)
        pattern_name: Composition pattern; random when None
        settings: Multipliers, minimum size, fetch workers
        rng: Random source for pattern pick, new-item sampling and shuffle
        shuffle: Shuffle the final list (otherwise grouped by status)

    Returns:
        List of SessionItem, possibly shorter than session_size when the
        learner does not have enough items
    """
    settings = settings or SchedulerSettings()
    rng = rng or random.Random()
    size = session_size if session_size is not None else settings.session_size

    name = select_pattern(pattern_name) if pattern_name is not None else select_random_pattern(rng)
    available = store.count_available(user_id)
    targets = compose(available, size, name, rng)

    specs = candidate_query_specs(
        targets,
        multiplier=settings.candidate_multiplier,
        new_multiplier=settings.new_candidate_multiplier,
    )
    pools = fetch_candidate_pools(store, user_id, specs, workers=settings.fetch_workers)
    selected = select_candidates(pools, targets, rng)

    items = [SessionItem.from_snapshot(snapshot) for snapshot in selected]
    if shuffle:
        rng.shuffle(items)

    logger.info(
        "[SESSION] %s: pattern=%s targets=%s delivered=%d",
        user_id, name, {status.value: count for status, count in targets.items()}, len(items),
    )
    if len(items) < min(settings.min_session_size, size):
        logger.warning(
            "[SESSION] Under-sized session for %s: %d of %d items (available: %s)",
            user_id, len(items), size, {status.value: count for status, count in available.items()},
        )

    return items
