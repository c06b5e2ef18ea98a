import random

from vocab_core.session_builders.pool_utils import (
    candidate_query_specs,
    select_candidates,
    select_from_pool,
)
from vocab_core.srs.constants import MasteryStatus

NEW = MasteryStatus.NEW
LEARNING = MasteryStatus.LEARNING
REVIEWING = MasteryStatus.REVIEWING
MASTERED = MasteryStatus.MASTERED


def test_query_specs_overfetch():
    specs = candidate_query_specs({NEW: 2, LEARNING: 3, REVIEWING: 0, MASTERED: 1})

    assert specs[NEW].count == 200
    assert specs[NEW].order_by == "created_at_desc"
    assert specs[LEARNING].count == 9
    assert specs[REVIEWING].count == 0
    assert specs[MASTERED].order_by == "recommended_review_date_asc"


def test_new_pool_sampling_is_unique_and_exact():
    pool = [f"n{i}" for i in range(40)]
    rng = random.Random(3)
    for target in (1, 5, 40):
        picked = select_from_pool(pool, target, NEW, rng)
        assert len(picked) == target
        assert len(set(picked)) == target
        assert set(picked) <= set(pool)


def test_new_pool_sampling_is_seeded():
    pool = [f"n{i}" for i in range(40)]
    assert select_from_pool(pool, 5, NEW, random.Random(8)) == select_from_pool(pool, 5, NEW, random.Random(8))


def test_urgency_pool_keeps_order():
    pool = ["r3", "r1", "r4", "r0", "r2"]
    assert select_from_pool(pool, 3, REVIEWING) == ["r3", "r1", "r4"]


def test_short_pool_is_taken_whole():
    assert select_from_pool(["l0", "l1"], 5, LEARNING) == ["l0", "l1"]
    assert sorted(select_from_pool(["n0", "n1"], 5, NEW, random.Random(1))) == ["n0", "n1"]
    assert select_from_pool([], 3, MASTERED) == []
    assert select_from_pool(["m0"], 0, MASTERED) == []


def test_select_candidates_groups_by_status():
    pools = {
        NEW: ["n0", "n1", "n2"],
        LEARNING: ["l0", "l1"],
        REVIEWING: ["r0", "r1", "r2"],
        MASTERED: ["m0"],
    }
    targets = {NEW: 1, LEARNING: 2, REVIEWING: 2, MASTERED: 1}
    selected = select_candidates(pools, targets, random.Random(0))

    assert len(selected) == 6
    assert selected[0] in pools[NEW]
    assert selected[1:] == ["l0", "l1", "r0", "r1", "m0"]
