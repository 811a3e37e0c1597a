"""
Member Scoring - Scorer.

Pure scoring of a fetched MetricSet. No I/O.
"""

from member_sources.models import Member
from member_scoring.models import MetricPoints, MetricSet, ScoredMember
from member_scoring.rules import (
    Tier,
    bdm_points,
    business_points,
    tier_of,
    total_score,
)


def compute_points(metrics: MetricSet) -> MetricPoints:
    return MetricPoints(
        attendance=metrics.attendance.points,
        bdm=bdm_points(metrics.bdm_given),
        business=business_points(metrics.business_amount),
        referrals=metrics.referrals.points,
        visitors=metrics.visitors.points,
        socials=metrics.socials.points,
    )


def compute_score(metrics: MetricSet) -> int:
    """Total score in [0, 100] for a metric set."""
    return total_score(compute_points(metrics).values())


def score_member(member: Member, metrics: MetricSet) -> ScoredMember:
    points = compute_points(metrics)
    score = total_score(points.values())
    return ScoredMember(
        member=member,
        metrics=metrics,
        points=points,
        total_score=score,
        tier=tier_of(score),
    )


def unscored_member(member: Member) -> ScoredMember:
    """Zero row for a member whose metrics could not be fetched."""
    return ScoredMember(
        member=member,
        metrics=MetricSet(),
        points=MetricPoints(),
        total_score=0,
        tier=Tier.BRONZE,
        failed=True,
    )


def rank(members: list[ScoredMember]) -> list[ScoredMember]:
    """Descending total score; ties keep their input order (sorted() is stable)."""
    return sorted(members, key=lambda scored: scored.total_score, reverse=True)
