"""
Dashboard - Leaderboard Service.

============================================================
PURPOSE
============================================================
Assembles the leaderboard views served by the dashboard API.

PRINCIPLES:
- READ-ONLY: only GET calls to the chapter backend
- Recomputed on every request, no caching
- Roster failure propagates, member failures do not

============================================================
"""

import logging
from typing import Any, Optional

from core.clock import ClockProtocol, SystemClock
from member_sources.models import YearMonth
from member_scoring.aggregator import MemberScoreAggregator
from member_scoring.models import LeaderboardResult, ScoredMember
from reporting.leaderboard_report import (
    filter_members,
    metric_progress,
    monthly_recognition,
    summarize_tiers,
)


logger = logging.getLogger(__name__)


class MemberNotFoundError(LookupError):
    """Member is not on the (scored) leaderboard for the month."""


class LeaderboardService:
    """
    Central service for leaderboard views.

    Each method takes the same filters as the console's statistics page
    (month, chapter, tier, search) and returns plain dictionaries.
    """

    def __init__(
        self,
        aggregator: MemberScoreAggregator,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._aggregator = aggregator
        self._clock = clock or SystemClock()

    @property
    def clock(self) -> ClockProtocol:
        return self._clock

    def resolve_month(self, month: Optional[str]) -> YearMonth:
        """
        Parse a month filter; empty means the current month.

        Raises:
            ValueError: malformed month
        """
        if not month:
            return self._clock.current_month()
        return YearMonth.parse(month)

    async def _build(self, month: Optional[str], chapter: Optional[str]) -> LeaderboardResult:
        return await self._aggregator.build_leaderboard(self.resolve_month(month), chapter)

    async def get_leaderboard(
        self,
        month: Optional[str] = None,
        chapter: Optional[str] = None,
        tier: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Leaderboard rows after filters, with tier categories over the
        unfiltered chapter set.
        """
        result = await self._build(month, chapter)
        rows = filter_members(result.members, tier=tier, search=search)
        return {
            "month": str(result.month),
            "members": [self._row(position, scored) for position, scored in enumerate(rows, 1)],
            "categories": [c.to_dict() for c in summarize_tiers(result.members)],
            "excluded": [f.to_dict() for f in result.failures],
        }

    async def get_categories(
        self,
        month: Optional[str] = None,
        chapter: Optional[str] = None,
    ) -> dict[str, Any]:
        result = await self._build(month, chapter)
        return {
            "month": str(result.month),
            "categories": [c.to_dict() for c in summarize_tiers(result.members)],
        }

    async def get_recognition(
        self,
        month: Optional[str] = None,
        chapter: Optional[str] = None,
    ) -> dict[str, Any]:
        result = await self._build(month, chapter)
        return {
            "month": str(result.month),
            "recognition": [r.to_dict() for r in monthly_recognition(result.members)],
        }

    async def get_member_progress(
        self,
        member_id: str,
        month: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        One member's score card.

        Raises:
            MemberNotFoundError: member not on the roster or not scored
        """
        result = await self._build(month, None)
        scored = result.get(member_id)
        if scored is None:
            raise MemberNotFoundError(f"Member {member_id} not found for {result.month}")
        row = self._row(result.members.index(scored) + 1, scored)
        row["progress"] = [p.to_dict() for p in metric_progress(scored)]
        return {"month": str(result.month), "member": row}

    @staticmethod
    def _row(position: int, scored: ScoredMember) -> dict[str, Any]:
        row = scored.to_dict()
        row["position"] = position
        return row
