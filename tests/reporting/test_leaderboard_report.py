"""
Leaderboard Report Tests.

============================================================
PURPOSE
============================================================
Filters, tier categories, recognition, progress and rupee
formatting used by the console views.

============================================================
"""

from decimal import Decimal

import pytest

from member_sources.models import AttendancePoints, Member, PointsSummary
from member_scoring.models import MetricSet
from member_scoring.rules import Tier
from member_scoring.scorer import rank, score_member, unscored_member
from reporting.leaderboard_report import (
    filter_members,
    format_inr,
    metric_progress,
    monthly_recognition,
    summarize_tiers,
)


def row(member_id, name, chapter, attendance=0, present=0, bdm=0, business="0",
        referrals=(0, 0), visitors=(0, 0), socials=(0, 0)):
    return score_member(
        Member(id=member_id, name=name, chapter=chapter),
        MetricSet(
            attendance=AttendancePoints(points=attendance, meetings_total=2, meetings_present=present),
            bdm_given=bdm,
            business_amount=Decimal(business),
            referrals=PointsSummary(*referrals),
            visitors=PointsSummary(*visitors),
            socials=PointsSummary(*socials),
        ),
    )


@pytest.fixture
def leaderboard():
    return rank([
        row("1", "Asha Rao", "Mumbai Chapter", attendance=20, present=2, bdm=2,
            business="600000", referrals=(10, 2)),                       # 55 Gold
        row("2", "Bilal Khan", "Delhi Chapter", attendance=5, present=1,
            visitors=(10, 2)),                                            # 15 Bronze
        row("3", "Chitra Iyer", "Mumbai Chapter", attendance=20, present=2,
            referrals=(10, 2), socials=(5, 1)),                           # 35 Silver
        row("4", "Dev Patel", "Pune Chapter", attendance=40, present=2, bdm=4,
            business="750000", referrals=(20, 4), visitors=(5, 2)),       # 100 Platinum
    ])


# ============================================================
# CURRENCY
# ============================================================

class TestFormatInr:
    """Tests for rupee formatting."""

    @pytest.mark.parametrize("amount,expected", [
        (0, "₹0"),
        (999, "₹999"),
        (45000, "₹45,000"),
        (99999.6, "₹1,00,000"),
        (150000, "₹1.50 L"),
        (2345678, "₹23.46 L"),
        (15000000, "₹1.50 Cr"),
        (Decimal("-250000"), "-₹2.50 L"),
    ])
    def test_compact(self, amount, expected):
        assert format_inr(amount) == expected

    def test_full_grouping(self):
        assert format_inr(12345678, compact=False) == "₹1,23,45,678"
        assert format_inr(500000, compact=False) == "₹5,00,000"


# ============================================================
# FILTERS
# ============================================================

class TestFilterMembers:
    """Tests for filter_members."""

    def test_no_filters_keeps_order(self, leaderboard):
        assert filter_members(leaderboard, chapter="all", tier="All") == leaderboard

    def test_chapter_is_case_insensitive(self, leaderboard):
        rows = filter_members(leaderboard, chapter="MUMBAI CHAPTER")

        assert [r.member.id for r in rows] == ["1", "3"]

    def test_chapter_by_id(self, leaderboard):
        pune = score_member(
            Member(id="5", name="Esha Nair", chapter="Pune Chapter", chapter_id="4"),
            MetricSet(),
        )

        rows = filter_members(leaderboard + [pune], chapter="4")

        assert [r.member.id for r in rows] == ["5"]

    def test_tier_filter(self, leaderboard):
        assert [r.member.id for r in filter_members(leaderboard, tier="gold")] == ["1"]
        assert [r.member.id for r in filter_members(leaderboard, tier=Tier.BRONZE)] == ["2"]

    def test_unknown_tier(self, leaderboard):
        with pytest.raises(ValueError):
            filter_members(leaderboard, tier="Diamond")

    def test_search_matches_name_or_chapter(self, leaderboard):
        assert [r.member.id for r in filter_members(leaderboard, search="khan")] == ["2"]
        assert [r.member.id for r in filter_members(leaderboard, search="pune")] == ["4"]

    def test_combined_filters_can_be_empty(self, leaderboard):
        assert filter_members(leaderboard, chapter="Delhi Chapter", tier="Gold") == []


# ============================================================
# TIER CATEGORIES
# ============================================================

class TestSummarizeTiers:
    """Tests for summarize_tiers."""

    def test_one_member_per_tier(self, leaderboard):
        categories = summarize_tiers(leaderboard)

        assert [c.tier for c in categories] == [Tier.PLATINUM, Tier.GOLD, Tier.SILVER, Tier.BRONZE]
        assert [c.member_count for c in categories] == [1, 1, 1, 1]
        assert [c.percentage for c in categories] == [25, 25, 25, 25]

    def test_labels(self, leaderboard):
        cards = [c.to_dict() for c in summarize_tiers(leaderboard)]

        assert cards[0] == {"title": "Platinum", "points": "76-100 points", "member_count": 1, "percentage": 25}
        assert cards[3]["points"] == "Below 30 points"

    def test_rounded_shares(self, leaderboard):
        categories = summarize_tiers(leaderboard[:3])

        assert [c.percentage for c in categories] == [33, 33, 33, 0]

    def test_empty(self):
        categories = summarize_tiers([])

        assert all(c.member_count == 0 and c.percentage == 0 for c in categories)


# ============================================================
# RECOGNITION
# ============================================================

class TestMonthlyRecognition:
    """Tests for monthly_recognition."""

    def test_winners(self, leaderboard):
        awards = {a.title: a for a in monthly_recognition(leaderboard)}

        assert [r.member.id for r in awards["Highest Business Given"].members] == ["4"]
        assert awards["Highest Business Given"].value == Decimal("750000")
        assert [r.member.id for r in awards["Maximum Referrals Given"].members] == ["4"]

    def test_ties_share_award(self, leaderboard):
        awards = {a.title: a for a in monthly_recognition(leaderboard)}

        assert {r.member.id for r in awards["Highest Visitor Invited"].members} == {"4", "2"}

    def test_no_positive_value_has_no_winner(self):
        rows = [row("1", "Asha Rao", "Mumbai Chapter", attendance=10)]

        awards = monthly_recognition(rows)

        assert all(a.members == [] for a in awards)
        assert awards[0].to_dict()["value"] == "0"

    def test_failed_rows_are_skipped(self):
        rows = [unscored_member(Member(id="9", name="Ghost"))]

        assert all(a.members == [] for a in monthly_recognition(rows))


# ============================================================
# PROGRESS
# ============================================================

class TestMetricProgress:
    """Tests for metric_progress."""

    def test_cards(self, leaderboard):
        asha = leaderboard[1]
        cards = {c.key: c for c in metric_progress(asha)}

        assert list(cards) == ["meetings", "bdm", "business", "referrals", "visitors", "socials"]
        assert cards["meetings"].subtitle == "Target achieved"
        assert cards["meetings"].percentage == Decimal("100.00")
        assert cards["bdm"].subtitle == "2 more BDMs needed"
        assert cards["bdm"].points == 10
        assert cards["business"].subtitle == "Target achieved"
        assert cards["referrals"].subtitle == "3 more referrals needed"
        assert cards["referrals"].percentage == Decimal("40.00")
        assert cards["visitors"].subtitle == "3 more visitors needed"

    def test_singular_unit_and_business_remaining(self, leaderboard):
        chitra = leaderboard[2]
        cards = {c.key: c for c in metric_progress(chitra)}

        assert cards["socials"].subtitle == "2 more socials needed"
        assert cards["business"].subtitle == "₹5,00,000 more needed"

        bilal = leaderboard[3]
        assert {c.key: c for c in metric_progress(bilal)}["meetings"].subtitle == "1 more meeting needed"

    def test_percentage_is_capped(self, leaderboard):
        dev = leaderboard[0]
        cards = {c.key: c for c in metric_progress(dev)}

        assert cards["business"].percentage == Decimal("100.00")
        assert cards["business"].to_dict()["percentage"] == 100.0
