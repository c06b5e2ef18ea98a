"""
Analytics package exports.
"""

from vocab_core.analytics.metrics import review_debt
from vocab_core.analytics.service import build_learner_dashboard
from vocab_core.analytics.types import LearnerDashboardData, ReviewStatistics

__all__ = [
    "review_debt",
    "build_learner_dashboard",
    "LearnerDashboardData",
    "ReviewStatistics",
]
