"""
Session composition patterns.

Each pattern defines how many items of each status go into a session of
SESSION_SIZE items. Patterns are immutable and loaded once at import.
"""

from __future__ import annotations

import math
import random
from types import MappingProxyType
from typing import Final, Mapping, Optional

from vocab_core.errors import ValidationError
from vocab_core.srs.constants import STATUS_ORDER, MasteryStatus

NEW = MasteryStatus.NEW
LEARNING = MasteryStatus.LEARNING
REVIEWING = MasteryStatus.REVIEWING
MASTERED = MasteryStatus.MASTERED


def _pattern(new: int, learning: int, reviewing: int, mastered: int) -> Mapping[MasteryStatus, int]:
    return MappingProxyType({NEW: new, LEARNING: learning, REVIEWING: reviewing, MASTERED: mastered})


SESSION_PATTERNS: Final[Mapping[str, Mapping[MasteryStatus, int]]] = MappingProxyType({
    "newFocused": _pattern(new=6, learning=2, reviewing=1, mastered=1),
    "balanced": _pattern(new=5, learning=3, reviewing=1, mastered=1),
    "reviewFocused": _pattern(new=3, learning=3, reviewing=3, mastered=1),
    "consolidationFocused": _pattern(new=2, learning=4, reviewing=3, mastered=1),
    "masteryMaintenance": _pattern(new=4, learning=2, reviewing=2, mastered=2),
})

PATTERN_NAMES: Final[tuple[str, ...]] = tuple(SESSION_PATTERNS)


def select_random_pattern(rng: Optional[random.Random] = None) -> str:
    """
    Pick a pattern name uniformly at random.
    """
    return (rng or random).choice(PATTERN_NAMES)


def select_pattern(pattern_name: str) -> str:
    """
    Validate a caller-supplied pattern name.

    Raises:
        ValidationError: if the name is not a registered pattern
    """
    if pattern_name not in SESSION_PATTERNS:
        raise ValidationError(
            f"Unknown session pattern {pattern_name!r}. Available: {', '.join(PATTERN_NAMES)}"
        )
    return pattern_name


def scale_pattern(pattern: Mapping[MasteryStatus, int], session_size: int) -> dict[MasteryStatus, int]:
    """
    Rescale pattern counts to a different session size (largest remainder).

    Ties on the remainder go to the status that comes first in STATUS_ORDER.
    """
    total = sum(pattern.get(status, 0) for status in STATUS_ORDER)
    if total == session_size or total == 0:
        return {status: pattern.get(status, 0) for status in STATUS_ORDER}

    quotas = {status: pattern.get(status, 0) * session_size / total for status in STATUS_ORDER}
    counts = {status: math.floor(quota) for status, quota in quotas.items()}
    leftover = session_size - sum(counts.values())

    by_remainder = sorted(
        STATUS_ORDER,
        key=lambda status: (-(quotas[status] - counts[status]), status.rank)
    )
    for status in by_remainder[:leftover]:
        counts[status] += 1
    return counts
