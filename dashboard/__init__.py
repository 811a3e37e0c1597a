"""
Dashboard Package.

Read-only HTTP API for the chapter console leaderboard.

Modules:
- service: builds leaderboard views from the score aggregator
- api: aiohttp handlers and router factory
"""

from dashboard.api import ConsoleAPI, create_console_router, setup_console_routes
from dashboard.service import LeaderboardService, MemberNotFoundError


__all__ = [
    "ConsoleAPI",
    "LeaderboardService",
    "MemberNotFoundError",
    "create_console_router",
    "setup_console_routes",
]
