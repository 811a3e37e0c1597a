"""
Member Scoring Package.

This package turns monthly member metrics into a ranked leaderboard.

Modules:
- rules: point tables, clamping and tier thresholds
- scorer: pure scoring of one member's metrics
- aggregator: async fan-out over the roster
- models: leaderboard rows and per-member outcomes
"""

from member_scoring.aggregator import MemberScoreAggregator
from member_scoring.models import (
    LeaderboardResult,
    MemberOutcome,
    MetricPoints,
    MetricSet,
    ScoredMember,
)
from member_scoring.rules import (
    MAX_SCORE,
    MIN_SCORE,
    Tier,
    bdm_points,
    business_points,
    tier_of,
    total_score,
)
from member_scoring.scorer import compute_points, compute_score, rank, score_member


__all__ = [
    "MemberScoreAggregator",
    "LeaderboardResult",
    "MemberOutcome",
    "MetricPoints",
    "MetricSet",
    "ScoredMember",
    "MAX_SCORE",
    "MIN_SCORE",
    "Tier",
    "bdm_points",
    "business_points",
    "tier_of",
    "total_score",
    "compute_points",
    "compute_score",
    "rank",
    "score_member",
]
