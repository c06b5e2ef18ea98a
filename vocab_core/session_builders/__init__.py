"""Session builder modules: composition patterns, candidate pools and selection."""

from vocab_core.session_builders.composer import compose
from vocab_core.session_builders.patterns import (
    PATTERN_NAMES,
    SESSION_PATTERNS,
    scale_pattern,
    select_pattern,
    select_random_pattern,
)
from vocab_core.session_builders.pool_types import PoolSpec, SessionItem
from vocab_core.session_builders.pool_utils import (
    candidate_query_specs,
    select_candidates,
    select_from_pool,
)
from vocab_core.session_builders.word_builder import (
    create_session as create_word_session,
    fetch_candidate_pools,
)

__all__ = [
    "compose",
    "PATTERN_NAMES",
    "SESSION_PATTERNS",
    "scale_pattern",
    "select_pattern",
    "select_random_pattern",
    "PoolSpec",
    "SessionItem",
    "candidate_query_specs",
    "select_candidates",
    "select_from_pool",
    "create_word_session",
    "fetch_candidate_pools",
]
