"""
Session composer.

Turns a pattern into per-status target counts that the learner's actual
availability can satisfy. Slots a status cannot fill are handed to statuses
with surplus, so the session keeps its size whenever enough items exist.
"""

from __future__ import annotations

import random
from typing import Final, Mapping, Optional

from vocab_core.config import SESSION_SIZE
from vocab_core.errors import ValidationError
from vocab_core.session_builders.patterns import (
    SESSION_PATTERNS,
    scale_pattern,
    select_pattern,
    select_random_pattern,
)
from vocab_core.srs.constants import STATUS_ORDER, MasteryStatus

# Who receives leftover slots first
REDISTRIBUTION_ORDER: Final[tuple[MasteryStatus, ...]] = (
    MasteryStatus.REVIEWING,
    MasteryStatus.LEARNING,
    MasteryStatus.NEW,
    MasteryStatus.MASTERED,
)


def compose(
    available: Mapping[MasteryStatus, int],
    session_size: int = SESSION_SIZE,
    pattern_name: Optional[str] = None,
    rng: Optional[random.Random] = None
) -> dict[MasteryStatus, int]:
    """
    Compute target counts per status for one session.

    Args:
        available: Items available per status (missing statuses count as 0)
        session_size: Requested session size
        pattern_name: Pattern to use; picked at random when None
        rng: Random source for the pattern pick

    Returns:
        Dict status -> target count. The total equals session_size, or the
        total availability when that is smaller.

    Raises:
        ValidationError: on a bad size, negative availability or unknown pattern
    """
    if session_size < 1:
        raise ValidationError(f"session_size must be at least 1, got {session_size}")

    counts = {status: int(available.get(status, 0)) for status in STATUS_ORDER}
    if any(count < 0 for count in counts.values()):
        raise ValidationError("available counts must not be negative")

    name = select_pattern(pattern_name) if pattern_name is not None else select_random_pattern(rng)
    pattern = scale_pattern(SESSION_PATTERNS[name], session_size)

    targets = {status: min(pattern[status], counts[status]) for status in STATUS_ORDER}

    shortfall = session_size - sum(targets.values())
    for status in REDISTRIBUTION_ORDER:
        if shortfall <= 0:
            break
        extra = min(shortfall, counts[status] - targets[status])
        if extra > 0:
            targets[status] += extra
            shortfall -= extra

    return targets
