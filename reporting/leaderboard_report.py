"""
Reporting - Leaderboard Report.

============================================================
RESPONSIBILITY
============================================================
Presentation helpers for the member statistics and monthly
reward views.

- Filters rows by chapter, tier and free-text search
- Summarizes members per tier (achievement categories)
- Picks monthly recognition winners
- Computes per-metric progress toward monthly targets
- Formats rupee amounts the way the console shows them

All functions are pure and keep the leaderboard order.

============================================================
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Optional, Union

from member_sources.models import is_unset_filter
from member_scoring.models import ScoredMember
from member_scoring.rules import Tier


CRORE = Decimal("10000000")
LAKH = Decimal("100000")


# ============================================================
# CURRENCY
# ============================================================

def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount: Union[int, float, Decimal], compact: bool = True) -> str:
    """
    Format a rupee amount.

    Compact form abbreviates crores (``₹1.50 Cr``) and lakhs
    (``₹2.35 L``); smaller amounts, or every amount when ``compact`` is
    False, use Indian digit grouping without decimals (``₹5,00,000``).
    """
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    value = abs(value)

    if compact and value >= CRORE:
        return f"{sign}₹{(value / CRORE).quantize(Decimal('0.01'), ROUND_HALF_UP)} Cr"
    if compact and value >= LAKH:
        return f"{sign}₹{(value / LAKH).quantize(Decimal('0.01'), ROUND_HALF_UP)} L"

    whole = value.quantize(Decimal("1"), ROUND_HALF_UP)
    return f"{sign}₹{_group_indian(str(int(whole)))}"


# ============================================================
# FILTERS
# ============================================================

def filter_members(
    members: Iterable[ScoredMember],
    chapter: Optional[str] = None,
    tier: Optional[Union[str, Tier]] = None,
    search: Optional[str] = None,
) -> list[ScoredMember]:
    """
    Apply the statistics view filters.

    ``chapter`` and ``tier`` accept ``"all"`` or empty for no filter;
    ``chapter`` matches a chapter id or name.

    Raises:
        ValueError: unknown tier name
    """
    rows = list(members)

    if not is_unset_filter(chapter):
        rows = [r for r in rows if r.member.in_chapter(chapter)]

    if isinstance(tier, Tier) or not is_unset_filter(tier):
        wanted_tier = tier if isinstance(tier, Tier) else Tier.parse(tier)
        rows = [r for r in rows if r.tier is wanted_tier]

    if search and search.strip():
        needle = search.strip().lower()
        rows = [
            r for r in rows
            if needle in r.member.name.lower() or needle in r.member.chapter.lower()
        ]

    return rows


# ============================================================
# TIER CATEGORIES
# ============================================================

@dataclass(frozen=True)
class TierCategory:
    """One achievement category card."""
    tier: Tier
    label: str
    member_count: int
    percentage: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.tier.value,
            "points": self.label,
            "member_count": self.member_count,
            "percentage": self.percentage,
        }


def summarize_tiers(members: Iterable[ScoredMember]) -> list[TierCategory]:
    """Members per tier, Platinum first, with a rounded share of the total."""
    rows = list(members)
    total = len(rows)
    categories = []
    for tier in sorted(Tier, reverse=True):
        count = sum(1 for r in rows if r.tier is tier)
        share = Decimal(count * 100) / total if total else Decimal("0")
        categories.append(TierCategory(
            tier=tier,
            label=tier.label,
            member_count=count,
            percentage=int(share.quantize(Decimal("1"), ROUND_HALF_UP)),
        ))
    return categories


# ============================================================
# MONTHLY RECOGNITION
# ============================================================

@dataclass
class Recognition:
    """An award and the member(s) holding it."""
    title: str
    members: list[ScoredMember] = field(default_factory=list)
    value: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "value": str(self.value),
            "members": [
                {"id": r.member.id, "name": r.member.name, "chapter": r.member.chapter}
                for r in self.members
            ],
        }


RECOGNITIONS: list[tuple[str, Callable[[ScoredMember], Decimal]]] = [
    ("Highest Business Given", lambda r: r.metrics.business_amount),
    ("Highest Visitor Invited", lambda r: Decimal(r.metrics.visitors.total_count)),
    ("Maximum Referrals Given", lambda r: Decimal(r.metrics.referrals.total_count)),
]


def monthly_recognition(members: Iterable[ScoredMember]) -> list[Recognition]:
    """
    Winners per award. Ties share the award; an award with no positive
    value has no winner.
    """
    rows = [r for r in members if not r.failed]
    awards = []
    for title, metric in RECOGNITIONS:
        best = max((metric(r) for r in rows), default=Decimal("0"))
        if best <= 0:
            awards.append(Recognition(title=title))
            continue
        awards.append(Recognition(
            title=title,
            members=[r for r in rows if metric(r) == best],
            value=best,
        ))
    return awards


# ============================================================
# METRIC PROGRESS
# ============================================================

@dataclass(frozen=True)
class MetricTarget:
    key: str
    title: str
    target: Decimal
    unit: str
    unit_singular: str


METRIC_TARGETS: list[MetricTarget] = [
    MetricTarget("meetings", "Meetings", Decimal("2"), "meetings", "meeting"),
    MetricTarget("bdm", "BDM", Decimal("4"), "BDMs", "BDM"),
    MetricTarget("business", "Business", Decimal("500000"), "", ""),
    MetricTarget("referrals", "Referrals", Decimal("5"), "referrals", "referral"),
    MetricTarget("visitors", "Visitors", Decimal("3"), "visitors", "visitor"),
    MetricTarget("socials", "Socials", Decimal("3"), "socials", "social"),
]


@dataclass(frozen=True)
class MetricProgress:
    """A metric card on the member's monthly reward view."""
    key: str
    title: str
    value: Decimal
    points: int
    target: Decimal
    percentage: Decimal
    subtitle: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "value": str(self.value),
            "points": self.points,
            "target": str(self.target),
            "percentage": float(self.percentage),
            "subtitle": self.subtitle,
        }


def _achieved(scored: ScoredMember) -> dict[str, tuple[Decimal, int]]:
    m, p = scored.metrics, scored.points
    return {
        "meetings": (Decimal(m.attendance.meetings_present), p.attendance),
        "bdm": (Decimal(m.bdm_given), p.bdm),
        "business": (m.business_amount, p.business),
        "referrals": (Decimal(m.referrals.total_count), p.referrals),
        "visitors": (Decimal(m.visitors.total_count), p.visitors),
        "socials": (Decimal(m.socials.total_count), p.socials),
    }


def _subtitle(target: MetricTarget, remaining: Decimal) -> str:
    if remaining <= 0:
        return "Target achieved"
    if target.key == "business":
        return f"{format_inr(remaining, compact=False)} more needed"
    unit = target.unit_singular if remaining == 1 else target.unit
    return f"{remaining} more {unit} needed"


def metric_progress(scored: ScoredMember) -> list[MetricProgress]:
    """Progress of one member toward each monthly target."""
    achieved = _achieved(scored)
    cards = []
    for target in METRIC_TARGETS:
        value, points = achieved[target.key]
        percentage = min(max(value, Decimal("0")) / target.target * 100, Decimal("100"))
        cards.append(MetricProgress(
            key=target.key,
            title=target.title,
            value=value,
            points=points,
            target=target.target,
            percentage=percentage.quantize(Decimal("0.01"), ROUND_HALF_UP),
            subtitle=_subtitle(target, target.target - value),
        ))
    return cards
