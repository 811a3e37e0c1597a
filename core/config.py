"""
Core Module - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the chapter console leaderboard.

- Chapter backend client (base URL, token, timeouts, retries)
- Score aggregation (per-metric timeout, fan-out bound)
- Dashboard server (host, port)

Values come from dataclass defaults, overridden by environment
variables (a local .env file is honored via python-dotenv).

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# CHAPTER API CONFIGURATION
# ============================================================

@dataclass
class EndpointConfig:
    """
    Collaborator endpoint paths, relative to the API base URL.

    ``{member_id}`` is substituted for per-member endpoints.
    """

    roster: str = "/members/members"
    attendance: str = "/attendance/points/{member_id}"
    bdm: str = "/bdm"
    business: str = "/business"
    referrals: str = "/referrals/points/{member_id}"
    visitors: str = "/visitors/points/{member_id}"
    socials: str = "/socials/points/{member_id}"


@dataclass
class ChapterApiConfig:
    """
    Chapter backend client configuration.
    """

    base_url: str = "http://localhost:5000/api"
    """REST API base URL."""

    token: Optional[str] = None
    """Bearer token sent on every request, if set."""

    timeout_seconds: float = 30.0
    """Total timeout for one HTTP request."""

    max_retries: int = 3
    """Attempts per request (server errors, rate limits, connection errors)."""

    retry_backoff_base: float = 2.0
    """Exponential backoff base between attempts."""

    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    """Endpoint paths."""


# ============================================================
# SCORING CONFIGURATION
# ============================================================

@dataclass
class ScoringConfig:
    """
    Leaderboard aggregation configuration.
    """

    metric_timeout_seconds: float = 10.0
    """Upper bound for one metric fetch; a timeout drops the member."""

    max_concurrent_members: int = 10
    """Members whose metrics are fetched at the same time."""

    include_failed_members: bool = False
    """Show members whose metrics failed as zero-score rows instead of dropping them."""


# ============================================================
# DASHBOARD CONFIGURATION
# ============================================================

@dataclass
class DashboardConfig:
    """
    Read-only dashboard server configuration.
    """

    host: str = "127.0.0.1"
    port: int = 8080
    prefix: str = "/api/console"


# ============================================================
# MASTER CONFIGURATION
# ============================================================

@dataclass
class ConsoleConfig:
    """
    Master configuration.
    """

    api: ChapterApiConfig = field(default_factory=ChapterApiConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "ConsoleConfig":
        """Build configuration from environment variables."""
        if dotenv:
            load_dotenv()

        api = ChapterApiConfig(
            base_url=os.getenv("CONSOLE_API_BASE_URL", ChapterApiConfig.base_url),
            token=os.getenv("CONSOLE_API_TOKEN") or None,
            timeout_seconds=float(os.getenv("CONSOLE_API_TIMEOUT", ChapterApiConfig.timeout_seconds)),
            max_retries=int(os.getenv("CONSOLE_API_MAX_RETRIES", ChapterApiConfig.max_retries)),
        )
        scoring = ScoringConfig(
            metric_timeout_seconds=float(
                os.getenv("CONSOLE_METRIC_TIMEOUT", ScoringConfig.metric_timeout_seconds)
            ),
            max_concurrent_members=int(
                os.getenv("CONSOLE_MAX_CONCURRENT_MEMBERS", ScoringConfig.max_concurrent_members)
            ),
            include_failed_members=_env_bool(
                "CONSOLE_INCLUDE_FAILED_MEMBERS", ScoringConfig.include_failed_members
            ),
        )
        dashboard = DashboardConfig(
            host=os.getenv("DASHBOARD_HOST", DashboardConfig.host),
            port=int(os.getenv("DASHBOARD_PORT", os.getenv("PORT", DashboardConfig.port))),
        )
        return cls(api=api, scoring=scoring, dashboard=dashboard)

    @classmethod
    def for_testing(cls) -> "ConsoleConfig":
        """Get configuration for testing."""
        return cls(
            api=ChapterApiConfig(base_url="http://testserver/api", max_retries=1, timeout_seconds=1.0),
            scoring=ScoringConfig(metric_timeout_seconds=1.0, max_concurrent_members=4),
        )
