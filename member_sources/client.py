"""
Chapter API Client - Roster and metric collaborators.

Endpoints used (paths configurable via EndpointConfig):
- /members/members                    - Member roster
- /attendance/points/{member_id}      - Attendance points for a month
- /bdm                                - BDM records
- /business                           - Business records
- /referrals/points/{member_id}       - Referral points for a month
- /visitors/points/{member_id}        - Visitor-invite points for a month
- /socials/points/{member_id}         - Social/training points for a month
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

from core.config import ChapterApiConfig
from member_sources.base import BaseApiClient
from member_sources.exceptions import FetchError, RosterFetchError
from member_sources.models import (
    AttendancePoints,
    BdmRecord,
    BusinessRecord,
    Member,
    PointsSummary,
    YearMonth,
    unwrap_list,
)


logger = logging.getLogger(__name__)


class ChapterDataSource(ABC):
    """
    Read-only collaborator operations the leaderboard needs.

    Implementations MUST raise RosterFetchError from get_roster() on failure;
    metric methods may raise any ChapterApiError.
    """

    @abstractmethod
    async def get_roster(self) -> list[Member]:
        pass

    @abstractmethod
    async def get_attendance_points(self, member_id: str, month: YearMonth) -> AttendancePoints:
        pass

    @abstractmethod
    async def get_bdm_records(self) -> list[BdmRecord]:
        pass

    @abstractmethod
    async def get_business_records(self) -> list[BusinessRecord]:
        pass

    @abstractmethod
    async def get_referral_points(self, member_id: str, month: YearMonth) -> PointsSummary:
        pass

    @abstractmethod
    async def get_visitor_points(self, member_id: str, month: YearMonth) -> PointsSummary:
        pass

    @abstractmethod
    async def get_social_points(self, member_id: str, month: YearMonth) -> PointsSummary:
        pass


class ChapterApiClient(BaseApiClient, ChapterDataSource):
    """
    HTTP implementation of ChapterDataSource.

    Usage:
        async with ChapterApiClient(config.api) as client:
            roster = await client.get_roster()
            points = await client.get_referral_points(roster[0].id, YearMonth(2025, 3))
    """

    def __init__(
        self,
        config: Optional[ChapterApiConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(config, session)
        self._endpoints = self._config.endpoints

    async def get_roster(self) -> list[Member]:
        """
        Fetch the member roster.

        Rows without an id are skipped with a warning.

        Raises:
            RosterFetchError: roster endpoint failed
        """
        try:
            payload = await self._get(self._endpoints.roster)
        except FetchError as e:
            raise RosterFetchError(
                message="Could not load member roster",
                source_name=self.name,
                original_error=e,
            )

        members = []
        for row in unwrap_list(payload):
            try:
                members.append(Member.from_dict(row))
            except ValueError as e:
                logger.warning(f"[{self.name}] Skipping roster row: {e}")
        logger.info(f"[{self.name}] Loaded roster with {len(members)} members")
        return members

    async def get_attendance_points(self, member_id: str, month: YearMonth) -> AttendancePoints:
        path = self._endpoints.attendance.format(member_id=member_id)
        payload = await self._get(path, params=month.to_params())
        return AttendancePoints.from_payload(payload)

    async def get_bdm_records(self) -> list[BdmRecord]:
        payload = await self._get(self._endpoints.bdm)
        return [BdmRecord.from_dict(row) for row in unwrap_list(payload)]

    async def get_business_records(self) -> list[BusinessRecord]:
        payload = await self._get(self._endpoints.business)
        return [BusinessRecord.from_dict(row) for row in unwrap_list(payload)]

    async def get_referral_points(self, member_id: str, month: YearMonth) -> PointsSummary:
        return await self._get_points(self._endpoints.referrals, "referrals", member_id, month)

    async def get_visitor_points(self, member_id: str, month: YearMonth) -> PointsSummary:
        return await self._get_points(self._endpoints.visitors, "visitors", member_id, month)

    async def get_social_points(self, member_id: str, month: YearMonth) -> PointsSummary:
        return await self._get_points(self._endpoints.socials, "socials", member_id, month)

    async def _get_points(
        self,
        template: str,
        metric: str,
        member_id: str,
        month: YearMonth,
    ) -> PointsSummary:
        payload = await self._get(template.format(member_id=member_id), params=month.to_params())
        return PointsSummary.from_payload(payload, source_name=metric)
