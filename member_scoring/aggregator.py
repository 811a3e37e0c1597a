"""
Member Scoring - Score Aggregator.

============================================================
RESPONSIBILITY
============================================================
Builds the monthly leaderboard.

- Fans out over the roster (bounded by a semaphore)
- Fetches a member's six metrics concurrently, each under a timeout
- Scores each member with the pure rules
- Sorts by descending score, stable

============================================================
FAILURE POLICY
============================================================
- Roster failure: RosterFetchError propagates to the caller
- Any failure inside one member's fan-out: that member is
  dropped (or shown as a zero row when configured), the error is
  logged, siblings are unaffected

============================================================
"""

import asyncio
import logging
from typing import Awaitable, Optional, Sequence, TypeVar

from core.config import ScoringConfig
from member_sources.client import ChapterDataSource
from member_sources.exceptions import ChapterApiError, MemberMetricFetchError
from member_sources.models import Member, YearMonth, is_unset_filter
from member_scoring.models import LeaderboardResult, MemberOutcome, MetricSet
from member_scoring.rules import count_bdm_given, sum_business
from member_scoring.scorer import rank, score_member, unscored_member


logger = logging.getLogger(__name__)

T = TypeVar("T")


class MemberScoreAggregator:
    """
    Computes scored leaderboards from a ChapterDataSource.

    The aggregator holds no state between calls: the same inputs and
    collaborator answers always give the same leaderboard.

    Usage:
        aggregator = MemberScoreAggregator(client, config.scoring)
        result = await aggregator.build_leaderboard(YearMonth(2025, 3))
        for row in result.members:
            print(row.member.name, row.total_score, row.tier.value)
    """

    def __init__(
        self,
        source: ChapterDataSource,
        config: Optional[ScoringConfig] = None,
    ) -> None:
        self._source = source
        self._config = config or ScoringConfig()

    async def build_leaderboard(
        self,
        month: YearMonth,
        chapter: Optional[str] = None,
    ) -> LeaderboardResult:
        """
        Fetch the roster, optionally keep one chapter, and score it.

        Raises:
            RosterFetchError: roster could not be loaded
        """
        roster = await self._source.get_roster()
        if not is_unset_filter(chapter):
            roster = [m for m in roster if m.in_chapter(chapter)]
        return await self.compute_leaderboard(month, roster)

    async def compute_leaderboard(
        self,
        month: YearMonth,
        roster: Sequence[Member],
    ) -> LeaderboardResult:
        """Score every roster member for ``month`` and rank them."""
        semaphore = asyncio.Semaphore(max(1, self._config.max_concurrent_members))

        async def bounded(member: Member) -> MemberOutcome:
            async with semaphore:
                return await self.score_one(month, member)

        # gather keeps roster order, so each outcome lands in its member's slot
        outcomes = await asyncio.gather(*(bounded(member) for member in roster))

        scored = []
        failures = []
        for outcome in outcomes:
            if outcome.is_ok:
                scored.append(outcome.scored)
            else:
                failures.append(outcome)
                if self._config.include_failed_members:
                    scored.append(unscored_member(outcome.member))

        if failures:
            logger.warning(
                f"Leaderboard {month}: {len(failures)} of {len(roster)} members "
                f"could not be scored"
            )
        logger.info(f"Leaderboard {month}: scored {len(scored)} members")

        return LeaderboardResult(month=month, members=rank(scored), failures=failures)

    async def score_one(self, month: YearMonth, member: Member) -> MemberOutcome:
        """Fetch and score a single member. Never raises."""
        try:
            metrics = await self.fetch_metrics(month, member)
        except MemberMetricFetchError as e:
            logger.warning(f"Dropping member {member.id} ({member.name}): {e}")
            return MemberOutcome.err(member, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error scoring member {member.id} ({member.name})")
            return MemberOutcome.err(member, f"Unexpected error: {e}")
        return MemberOutcome.ok(score_member(member, metrics))

    async def fetch_metrics(self, month: YearMonth, member: Member) -> MetricSet:
        """
        Fetch all six metrics for one member concurrently.

        Raises:
            MemberMetricFetchError: any metric failed or timed out
        """
        results = await asyncio.gather(
            self._guarded(member, "attendance", self._source.get_attendance_points(member.id, month)),
            self._guarded(member, "bdm", self._source.get_bdm_records()),
            self._guarded(member, "business", self._source.get_business_records()),
            self._guarded(member, "referrals", self._source.get_referral_points(member.id, month)),
            self._guarded(member, "visitors", self._source.get_visitor_points(member.id, month)),
            self._guarded(member, "socials", self._source.get_social_points(member.id, month)),
            return_exceptions=True,
        )
        # all six settle before the first failure is raised
        for result in results:
            if isinstance(result, BaseException):
                raise result

        attendance, bdm_records, business_records, referrals, visitors, socials = results

        return MetricSet(
            attendance=attendance,
            bdm_given=count_bdm_given(bdm_records, member.id, month),
            business_amount=sum_business(business_records, member.id, month),
            referrals=referrals,
            visitors=visitors,
            socials=socials,
        )

    async def _guarded(self, member: Member, metric: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._config.metric_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise MemberMetricFetchError(
                message=f"Timed out after {self._config.metric_timeout_seconds}s",
                member_id=member.id,
                metric=metric,
                original_error=e,
            )
        except ChapterApiError as e:
            raise MemberMetricFetchError(
                message=f"Could not fetch {metric}",
                member_id=member.id,
                metric=metric,
                source_name=e.source_name,
                original_error=e,
            )
