"""
Member Scoring - Point Rules.

============================================================
RESPONSIBILITY
============================================================
Pure functions turning raw monthly metrics into points, a bounded
total score and a tier.

============================================================
POINT TABLE
============================================================
Attendance   collaborator points, pass-through
BDM given    >=4 -> 20, 3 -> 15, 2 -> 10, 1 -> 5, else 0
Business     >=500,000 -> 15, >50,000 -> 10, >0 -> 5, else 0
Referrals    collaborator points, pass-through
Visitors     collaborator points, pass-through
Socials      collaborator points, pass-through

Total = clamp(sum, 0, 100). Tiers: >=76 Platinum, >=51 Gold,
>=30 Silver, else Bronze.

============================================================
"""

from decimal import Decimal
from enum import Enum
from functools import total_ordering
from typing import Iterable, Union

from member_sources.models import BdmRecord, BusinessRecord, YearMonth


MIN_SCORE = 0
MAX_SCORE = 100

Number = Union[int, Decimal]


# ============================================================
# TIERS
# ============================================================

@total_ordering
class Tier(Enum):
    """Ordered member tiers, lowest first."""
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    @property
    def label(self) -> str:
        """Score range shown on the achievement category cards."""
        return _TIER_LABELS[self]

    def __lt__(self, other: "Tier") -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def parse(cls, value: str) -> "Tier":
        """Case-insensitive lookup by display name."""
        for tier in cls:
            if tier.value.lower() == value.strip().lower():
                return tier
        raise ValueError(f"Unknown tier '{value}'")


_TIER_ORDER = [Tier.BRONZE, Tier.SILVER, Tier.GOLD, Tier.PLATINUM]

# Evaluated high -> low
TIER_THRESHOLDS: list[tuple[int, Tier]] = [
    (76, Tier.PLATINUM),
    (51, Tier.GOLD),
    (30, Tier.SILVER),
]

_TIER_LABELS = {
    Tier.PLATINUM: "76-100 points",
    Tier.GOLD: "51-75 points",
    Tier.SILVER: "30-50 points",
    Tier.BRONZE: "Below 30 points",
}


def tier_of(score: int) -> Tier:
    for threshold, tier in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return Tier.BRONZE


# ============================================================
# BDM
# ============================================================

BDM_POINTS: list[tuple[int, int]] = [
    (4, 20),
    (3, 15),
    (2, 10),
    (1, 5),
]


def bdm_points(given_count: int) -> int:
    for minimum, points in BDM_POINTS:
        if given_count >= minimum:
            return points
    return 0


def count_bdm_given(records: Iterable[BdmRecord], member_id: str, month: YearMonth) -> int:
    """Verified BDMs given by ``member_id`` dated inside ``month``."""
    return sum(
        1 for record in records
        if record.is_verified
        and record.given_by_member_id == member_id
        and record.date is not None
        and month.contains(record.date)
    )


# ============================================================
# BUSINESS
# ============================================================

BUSINESS_TOP_AMOUNT = Decimal("500000")
BUSINESS_MID_AMOUNT = Decimal("50000")


def business_points(amount: Number) -> int:
    """Points for a month's verified business total."""
    amount = Decimal(amount)
    if amount >= BUSINESS_TOP_AMOUNT:
        return 15
    if amount > BUSINESS_MID_AMOUNT:
        return 10
    if amount > 0:
        return 5
    return 0


def sum_business(records: Iterable[BusinessRecord], member_id: str, month: YearMonth) -> Decimal:
    """Verified business amounts by ``member_id`` dated inside ``month``."""
    total = Decimal("0")
    for record in records:
        if (
            record.is_verified
            and record.actor_member_id == member_id
            and record.amount is not None
            and record.date is not None
            and month.contains(record.date)
        ):
            total += record.amount
    return total


# ============================================================
# TOTAL
# ============================================================

def clamp_score(raw_total: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, int(raw_total)))


def total_score(points: Iterable[int]) -> int:
    """Sum per-metric points and clamp into [0, 100]. Clamped, never scaled."""
    return clamp_score(sum(points))
