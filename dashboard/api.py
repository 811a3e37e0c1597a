"""
Dashboard API Endpoints.

============================================================
PURPOSE
============================================================
HTTP API serving leaderboard views to the browser console.

PRINCIPLES:
- ALL endpoints are READ-ONLY
- Roster failure renders an empty table, never a crash
- Member failures only shorten the table

============================================================
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from aiohttp import web

from member_sources.exceptions import RosterFetchError
from dashboard.service import LeaderboardService, MemberNotFoundError


logger = logging.getLogger(__name__)

EMPTY_STATE_MESSAGE = "No members found matching your criteria"


# ============================================================
# JSON ENCODER
# ============================================================

class ConsoleEncoder(json.JSONEncoder):
    """JSON encoder for console payloads."""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def json_response(data: Any, status: int = 200) -> web.Response:
    """Create JSON response."""
    return web.Response(
        text=json.dumps(data, cls=ConsoleEncoder, indent=2, ensure_ascii=False),
        status=status,
        content_type="application/json",
    )


def _error(message: str, status: int, **extra: Any) -> web.Response:
    payload = {"status": "error", "error": message}
    payload.update(extra)
    return json_response(payload, status=status)


# ============================================================
# API HANDLERS
# ============================================================

class ConsoleAPI:
    """
    HTTP API for the leaderboard views.

    ALL endpoints are READ-ONLY.
    """

    def __init__(self, service: LeaderboardService):
        self._service = service

    # --------------------------------------------------------
    # LEADERBOARD ENDPOINTS
    # --------------------------------------------------------

    async def get_leaderboard(self, request: web.Request) -> web.Response:
        """
        GET /leaderboard?month=YYYY-MM&chapter=&tier=&search=

        Ranked members with tier categories.
        """
        query = request.query
        try:
            data = await self._service.get_leaderboard(
                month=query.get("month"),
                chapter=query.get("chapter"),
                tier=query.get("tier"),
                search=query.get("search"),
            )
        except ValueError as e:
            return _error(str(e), 400)
        except RosterFetchError as e:
            logger.error(f"Leaderboard unavailable: {e}")
            return _error(
                EMPTY_STATE_MESSAGE,
                502,
                data={"month": query.get("month"), "members": [], "categories": [], "excluded": []},
            )

        if not data["members"]:
            data["message"] = EMPTY_STATE_MESSAGE
        return json_response({"status": "ok", "data": data})

    async def get_categories(self, request: web.Request) -> web.Response:
        """
        GET /leaderboard/categories?month=&chapter=

        Member counts per tier.
        """
        return await self._simple(
            request,
            self._service.get_categories,
            empty={"categories": []},
        )

    async def get_recognition(self, request: web.Request) -> web.Response:
        """
        GET /recognition?month=&chapter=

        Monthly award winners.
        """
        return await self._simple(
            request,
            self._service.get_recognition,
            empty={"recognition": []},
        )

    async def get_member_progress(self, request: web.Request) -> web.Response:
        """
        GET /members/{member_id}/progress?month=

        One member's score and progress toward monthly targets.
        """
        member_id = request.match_info["member_id"]
        try:
            data = await self._service.get_member_progress(member_id, request.query.get("month"))
        except ValueError as e:
            return _error(str(e), 400)
        except MemberNotFoundError as e:
            return _error(str(e), 404)
        except RosterFetchError as e:
            logger.error(f"Member progress unavailable: {e}")
            return _error(EMPTY_STATE_MESSAGE, 502)
        return json_response({"status": "ok", "data": data})

    async def _simple(self, request: web.Request, method, empty: dict[str, Any]) -> web.Response:
        query = request.query
        try:
            data = await method(month=query.get("month"), chapter=query.get("chapter"))
        except ValueError as e:
            return _error(str(e), 400)
        except RosterFetchError as e:
            logger.error(f"{request.path} unavailable: {e}")
            return _error(EMPTY_STATE_MESSAGE, 502, data=empty)
        return json_response({"status": "ok", "data": data})

    # --------------------------------------------------------
    # HEALTH CHECK
    # --------------------------------------------------------

    async def health(self, request: web.Request) -> web.Response:
        """
        GET /health
        """
        return json_response({
            "status": "ok",
            "timestamp": self._service.clock.format_iso(),
            "service": "console",
        })


# ============================================================
# ROUTER FACTORY
# ============================================================

def create_console_router(service: LeaderboardService) -> web.Application:
    """
    Create console API application.

    Returns an aiohttp Application with all routes configured.
    """
    api = ConsoleAPI(service)

    app = web.Application()

    app.router.add_get("/health", api.health)
    app.router.add_get("/leaderboard", api.get_leaderboard)
    app.router.add_get("/leaderboard/categories", api.get_categories)
    app.router.add_get("/recognition", api.get_recognition)
    app.router.add_get("/members/{member_id}/progress", api.get_member_progress)

    return app


def setup_console_routes(
    app: web.Application,
    service: LeaderboardService,
    prefix: str = "/api/console",
) -> None:
    """Mount the console API under ``prefix`` on an existing application."""
    app.add_subapp(prefix, create_console_router(service))
