"""
Chapter API Client Tests.

============================================================
PURPOSE
============================================================
HTTP client behavior with the transport mocked out.

TEST CATEGORIES:
- Endpoint tests: URLs, params, parsing
- Retry tests: which failures are retried
- Error tests: roster failure mapping, stats

============================================================
"""

from unittest.mock import AsyncMock, patch

import pytest

from core.config import ChapterApiConfig
from member_sources.client import ChapterApiClient
from member_sources.exceptions import FetchError, RateLimitError, RosterFetchError
from member_sources.models import YearMonth


BASE_URL = "http://testserver/api"


@pytest.fixture
def config():
    return ChapterApiConfig(base_url=BASE_URL, token="secret", max_retries=3)


@pytest.fixture
def no_sleep():
    with patch("member_sources.base.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


# ============================================================
# ENDPOINT TESTS
# ============================================================

class TestEndpoints:
    """Tests for collaborator endpoints."""

    @pytest.mark.asyncio
    async def test_get_roster(self, config):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(return_value={"data": [
            {"id": 1, "full_name": "Asha Rao", "chapter_name": "Mumbai Chapter"},
            {"full_name": "No Id"},
            {"id": 2, "full_name": "Bilal Khan", "chapter_name": "Delhi Chapter"},
        ]})

        roster = await client.get_roster()

        assert [m.id for m in roster] == ["1", "2"]
        assert roster[0].name == "Asha Rao"
        client._make_request.assert_awaited_once_with(
            "GET", f"{BASE_URL}/members/members", params=None
        )

    @pytest.mark.asyncio
    async def test_get_referral_points(self, config):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(return_value={"data": {"points": 10, "total_count": 2}})

        summary = await client.get_referral_points("42", YearMonth(2025, 3))

        assert summary.points == 10
        assert summary.total_count == 2
        client._make_request.assert_awaited_once_with(
            "GET", f"{BASE_URL}/referrals/points/42", params={"month": 3, "year": 2025}
        )

    @pytest.mark.asyncio
    async def test_visitor_and_social_endpoints(self, config):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(return_value={"points": 5, "total_count": 1})

        await client.get_visitor_points("7", YearMonth(2025, 3))
        await client.get_social_points("7", YearMonth(2025, 3))

        urls = [call.args[1] for call in client._make_request.await_args_list]
        assert urls == [f"{BASE_URL}/visitors/points/7", f"{BASE_URL}/socials/points/7"]

    @pytest.mark.asyncio
    async def test_get_attendance_points(self, config):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(return_value={
            "data": {"points": 20, "meetings_total": 2, "meetings_present": 2}
        })

        attendance = await client.get_attendance_points("1", YearMonth(2025, 3))

        assert attendance.points == 20
        assert attendance.meetings_total == 2

    @pytest.mark.asyncio
    async def test_get_bdm_and_business_records(self, config):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=[
            {"data": [{"given_by_member_id": 1, "date": "2025-03-04", "status": "verified"}]},
            [{"actor_member_id": 1, "amount": 75000, "date": "2025-03-05", "status": "verified"}],
        ])

        bdm = await client.get_bdm_records()
        business = await client.get_business_records()

        assert bdm[0].given_by_member_id == "1"
        assert business[0].amount == 75000

    def test_auth_header(self, config):
        headers = ChapterApiClient(config)._get_default_headers()

        assert headers["Authorization"] == "Bearer secret"

    def test_no_auth_header_without_token(self):
        headers = ChapterApiClient(ChapterApiConfig())._get_default_headers()

        assert "Authorization" not in headers


# ============================================================
# RETRY TESTS
# ============================================================

class TestRetry:
    """Tests for retry policy."""

    @pytest.mark.asyncio
    async def test_retries_server_error(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=[
            FetchError("HTTP 503", status_code=503),
            {"points": 3, "total_count": 1},
        ])

        summary = await client.get_visitor_points("1", YearMonth(2025, 3))

        assert summary.points == 3
        assert client._make_request.await_count == 2
        no_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_retries_connection_error(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=[
            FetchError("Connection error: refused"),
            {"points": 1},
        ])

        summary = await client.get_social_points("1", YearMonth(2025, 3))

        assert summary.points == 1

    @pytest.mark.asyncio
    async def test_does_not_retry_client_error(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=FetchError("HTTP 404", status_code=404))

        with pytest.raises(FetchError) as exc:
            await client.get_referral_points("1", YearMonth(2025, 3))

        assert exc.value.status_code == 404
        assert client._make_request.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limit_honors_retry_after(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=[
            RateLimitError("Rate limit exceeded", retry_after_seconds=7),
            {"points": 2},
        ])

        await client.get_referral_points("1", YearMonth(2025, 3))

        no_sleep.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=FetchError("HTTP 500", status_code=500))

        with pytest.raises(FetchError, match="Failed after 3 attempts") as exc:
            await client.get_bdm_records()

        assert exc.value.status_code == 500
        assert client._make_request.await_count == 3
        assert no_sleep.await_count == 2


# ============================================================
# ERROR TESTS
# ============================================================

class TestErrors:
    """Tests for error mapping and stats."""

    @pytest.mark.asyncio
    async def test_roster_failure_is_roster_fetch_error(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=FetchError("HTTP 502", status_code=502))

        with pytest.raises(RosterFetchError) as exc:
            await client.get_roster()

        assert isinstance(exc.value.original_error, FetchError)

    @pytest.mark.asyncio
    async def test_stats_track_failures(self, config, no_sleep):
        client = ChapterApiClient(config)
        client._make_request = AsyncMock(side_effect=[
            {"points": 1},
            FetchError("HTTP 400", status_code=400),
        ])

        await client.get_visitor_points("1", YearMonth(2025, 3))
        with pytest.raises(FetchError):
            await client.get_visitor_points("2", YearMonth(2025, 3))

        stats = client.get_stats()
        assert stats.request_count == 2
        assert stats.success_count == 1
        assert stats.error_count == 1
        assert stats.per_endpoint_errors == {"/visitors/points/2": 1}

    def test_fetch_error_classification(self):
        assert FetchError("x", status_code=503).is_server_error()
        assert FetchError("x", status_code=404).is_client_error()
        assert RateLimitError("x").is_rate_limited()
        assert "source=chapter_api" in str(FetchError("x", source_name="chapter_api"))

    @pytest.mark.asyncio
    async def test_close_owned_session(self, config):
        async with ChapterApiClient(config) as client:
            session = await client._get_session()
        assert session.closed
