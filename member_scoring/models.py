"""
Member Scoring - Models.

Ephemeral leaderboard structures. Nothing here is persisted; every
view load recomputes them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from member_sources.models import AttendancePoints, Member, PointsSummary, YearMonth
from member_scoring.rules import Tier


@dataclass(frozen=True)
class MetricSet:
    """Raw metrics for one member in one reporting month."""
    attendance: AttendancePoints = field(default_factory=AttendancePoints)
    bdm_given: int = 0
    business_amount: Decimal = Decimal("0")
    referrals: PointsSummary = field(default_factory=PointsSummary)
    visitors: PointsSummary = field(default_factory=PointsSummary)
    socials: PointsSummary = field(default_factory=PointsSummary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attendance": self.attendance.to_dict(),
            "bdm_given": self.bdm_given,
            "business_amount": str(self.business_amount),
            "referrals": self.referrals.to_dict(),
            "visitors": self.visitors.to_dict(),
            "socials": self.socials.to_dict(),
        }


@dataclass(frozen=True)
class MetricPoints:
    """Points earned per metric."""
    attendance: int = 0
    bdm: int = 0
    business: int = 0
    referrals: int = 0
    visitors: int = 0
    socials: int = 0

    def values(self) -> tuple[int, ...]:
        return (
            self.attendance,
            self.bdm,
            self.business,
            self.referrals,
            self.visitors,
            self.socials,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "attendance": self.attendance,
            "bdm": self.bdm,
            "business": self.business,
            "referrals": self.referrals,
            "visitors": self.visitors,
            "socials": self.socials,
        }


@dataclass(frozen=True)
class ScoredMember:
    """A leaderboard row."""
    member: Member
    metrics: MetricSet
    points: MetricPoints
    total_score: int
    tier: Tier
    failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "member": self.member.to_dict(),
            "metrics": self.metrics.to_dict(),
            "points": self.points.to_dict(),
            "total_score": self.total_score,
            "tier": self.tier.value,
            "failed": self.failed,
        }


@dataclass(frozen=True)
class MemberOutcome:
    """
    Per-member result of the fan-out: either a scored row or the error
    that stopped it.
    """
    member: Member
    scored: Optional[ScoredMember] = None
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.scored is not None

    @classmethod
    def ok(cls, scored: ScoredMember) -> "MemberOutcome":
        return cls(member=scored.member, scored=scored)

    @classmethod
    def err(cls, member: Member, reason: str) -> "MemberOutcome":
        return cls(member=member, error=reason)

    def to_dict(self) -> dict[str, Any]:
        return {
            "member": self.member.to_dict(),
            "ok": self.is_ok,
            "error": self.error,
        }


@dataclass
class LeaderboardResult:
    """Sorted leaderboard for one month plus the members that could not be scored."""
    month: YearMonth
    members: list[ScoredMember] = field(default_factory=list)
    failures: list[MemberOutcome] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.members)

    def get(self, member_id: str) -> Optional[ScoredMember]:
        for scored in self.members:
            if scored.member.id == member_id:
                return scored
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": str(self.month),
            "members": [m.to_dict() for m in self.members],
            "excluded": [f.to_dict() for f in self.failures],
        }
