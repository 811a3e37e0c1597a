"""
Shared fixtures: an in-memory chapter backend and sample members.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from member_sources.client import ChapterDataSource
from member_sources.exceptions import FetchError, RosterFetchError
from member_sources.models import (
    AttendancePoints,
    BdmRecord,
    BusinessRecord,
    Member,
    PointsSummary,
    RecordStatus,
    YearMonth,
)


MARCH = YearMonth(2025, 3)


class FakeChapterSource(ChapterDataSource):
    """
    In-memory ChapterDataSource.

    ``failing`` members raise FetchError from their referral endpoint,
    ``slow`` members never answer their visitor endpoint in time.
    """

    def __init__(
        self,
        roster: list[Member],
        attendance: Optional[dict[str, AttendancePoints]] = None,
        bdm: Optional[list[BdmRecord]] = None,
        business: Optional[list[BusinessRecord]] = None,
        referrals: Optional[dict[str, PointsSummary]] = None,
        visitors: Optional[dict[str, PointsSummary]] = None,
        socials: Optional[dict[str, PointsSummary]] = None,
        failing: Optional[set[str]] = None,
        slow: Optional[set[str]] = None,
        roster_error: bool = False,
    ) -> None:
        self.roster = roster
        self.attendance = attendance or {}
        self.bdm = bdm or []
        self.business = business or []
        self.referrals = referrals or {}
        self.visitors = visitors or {}
        self.socials = socials or {}
        self.failing = failing or set()
        self.slow = slow or set()
        self.roster_error = roster_error
        self.calls: list[tuple[str, Optional[str]]] = []

    async def get_roster(self) -> list[Member]:
        self.calls.append(("roster", None))
        if self.roster_error:
            raise RosterFetchError("Could not load member roster", source_name="fake")
        return list(self.roster)

    async def get_attendance_points(self, member_id, month):
        self.calls.append(("attendance", member_id))
        return self.attendance.get(member_id, AttendancePoints())

    async def get_bdm_records(self):
        self.calls.append(("bdm", None))
        return list(self.bdm)

    async def get_business_records(self):
        self.calls.append(("business", None))
        return list(self.business)

    async def get_referral_points(self, member_id, month):
        self.calls.append(("referrals", member_id))
        if member_id in self.failing:
            raise FetchError("HTTP 500", source_name="fake", status_code=500)
        return self.referrals.get(member_id, PointsSummary())

    async def get_visitor_points(self, member_id, month):
        self.calls.append(("visitors", member_id))
        if member_id in self.slow:
            await asyncio.sleep(60)
        return self.visitors.get(member_id, PointsSummary())

    async def get_social_points(self, member_id, month):
        self.calls.append(("socials", member_id))
        return self.socials.get(member_id, PointsSummary())


def verified_bdm(giver: str, day: date, status: RecordStatus = RecordStatus.VERIFIED) -> BdmRecord:
    return BdmRecord(given_by_member_id=giver, received_member_id="x", date=day, status=status)


def verified_business(actor: str, amount: str, day: date,
                      status: RecordStatus = RecordStatus.VERIFIED) -> BusinessRecord:
    return BusinessRecord(actor_member_id=actor, amount=Decimal(amount), date=day, status=status)


@pytest.fixture
def march():
    return MARCH


@pytest.fixture
def members():
    return [
        Member(id="1", name="Asha Rao", chapter="Mumbai Chapter", chapter_id="1"),
        Member(id="2", name="Bilal Khan", chapter="Delhi Chapter", chapter_id="2"),
        Member(id="3", name="Chitra Iyer", chapter="Mumbai Chapter", chapter_id="1"),
    ]


@pytest.fixture
def chapter_source(members):
    """
    Asha: 20 attendance + 2 BDMs (10) + 600,000 business (15) + 10 referral = 55 -> Gold
    Bilal: 5 attendance + 10 visitors = 15 -> Bronze
    Chitra: 20 attendance + 10 referral + 5 socials = 35 -> Silver
    """
    return FakeChapterSource(
        roster=members,
        attendance={
            "1": AttendancePoints(points=20, meetings_total=2, meetings_present=2),
            "2": AttendancePoints(points=5, meetings_total=2, meetings_present=1),
            "3": AttendancePoints(points=20, meetings_total=2, meetings_present=2),
        },
        bdm=[
            verified_bdm("1", date(2025, 3, 4)),
            verified_bdm("1", date(2025, 3, 18)),
            verified_bdm("1", date(2025, 2, 27)),
            verified_bdm("1", date(2025, 3, 20), status=RecordStatus.PENDING),
        ],
        business=[
            verified_business("1", "600000", date(2025, 3, 10)),
            verified_business("3", "40000", date(2025, 4, 1)),
        ],
        referrals={
            "1": PointsSummary(points=10, total_count=2),
            "3": PointsSummary(points=10, total_count=2),
        },
        visitors={"2": PointsSummary(points=10, total_count=2)},
        socials={"3": PointsSummary(points=5, total_count=1)},
    )
