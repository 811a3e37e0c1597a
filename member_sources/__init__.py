"""
Member Sources Package - Async client for the chapter REST backend.

Provides the member roster and the six per-member metrics consumed by the
leaderboard, parsed into explicit records with defaults.

Quick Start:
    from core.config import ConsoleConfig
    from member_sources import ChapterApiClient, YearMonth

    async def show_roster():
        config = ConsoleConfig.from_env()
        async with ChapterApiClient(config.api) as client:
            for member in await client.get_roster():
                points = await client.get_visitor_points(member.id, YearMonth(2025, 3))
                print(member.name, points.points)
"""

from member_sources.base import BaseApiClient
from member_sources.client import ChapterApiClient, ChapterDataSource
from member_sources.exceptions import (
    ChapterApiError,
    FetchError,
    MalformedMetricResponse,
    MemberMetricFetchError,
    RateLimitError,
    RosterFetchError,
)
from member_sources.models import (
    NOT_AVAILABLE,
    ApiStats,
    AttendancePoints,
    BdmRecord,
    BusinessRecord,
    Member,
    PointsSummary,
    RecordStatus,
    YearMonth,
    is_unset_filter,
)


__all__ = [
    # Clients
    "BaseApiClient",
    "ChapterApiClient",
    "ChapterDataSource",
    # Exceptions
    "ChapterApiError",
    "FetchError",
    "MalformedMetricResponse",
    "MemberMetricFetchError",
    "RateLimitError",
    "RosterFetchError",
    # Models
    "NOT_AVAILABLE",
    "ApiStats",
    "AttendancePoints",
    "BdmRecord",
    "BusinessRecord",
    "Member",
    "PointsSummary",
    "RecordStatus",
    "YearMonth",
    "is_unset_filter",
]
