#!/usr/bin/env python3
"""
Console Dashboard Server Runner.

============================================================
USAGE
============================================================
    python scripts/run_dashboard.py
    python scripts/run_dashboard.py --port 8080
    python scripts/run_dashboard.py --host 0.0.0.0 --port 8080

============================================================
ENDPOINTS
============================================================
    GET  /api/console/health                        - Health check
    GET  /api/console/leaderboard                   - Ranked members
    GET  /api/console/leaderboard/categories        - Members per tier
    GET  /api/console/recognition                   - Monthly awards
    GET  /api/console/members/{member_id}/progress  - Member score card

Every endpoint accepts ?month=YYYY-MM (default: current month);
leaderboard endpoints also take chapter, tier and search.

============================================================
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from aiohttp import web

from core.config import ConsoleConfig
from dashboard.api import setup_console_routes
from dashboard.service import LeaderboardService
from member_sources.client import ChapterApiClient
from member_scoring.aggregator import MemberScoreAggregator

logger = logging.getLogger(__name__)


# ============================================================
# LOGGING
# ============================================================

def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ============================================================
# SERVER
# ============================================================

def build_app(config: ConsoleConfig) -> web.Application:
    """Wire client, aggregator and routes into one application."""
    client = ChapterApiClient(config.api)
    aggregator = MemberScoreAggregator(client, config.scoring)
    service = LeaderboardService(aggregator)

    app = web.Application()
    setup_console_routes(app, service, prefix=config.dashboard.prefix)

    async def close_client(app: web.Application) -> None:
        await client.close()

    app.on_cleanup.append(close_client)
    return app


async def run_dashboard(config: ConsoleConfig) -> None:
    """Run the dashboard server until cancelled."""
    host, port = config.dashboard.host, config.dashboard.port
    app = build_app(config)

    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Console dashboard started at http://{host}:{port}{config.dashboard.prefix}")
    logger.info(f"Chapter API: {config.api.base_url}")
    logger.info("Press Ctrl+C to stop")

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await runner.cleanup()


def main() -> None:
    """Main entry point."""
    config = ConsoleConfig.from_env()

    parser = argparse.ArgumentParser(
        description="Run the chapter console leaderboard API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--host",
        default=config.dashboard.host,
        help=f"Host to bind to (default: {config.dashboard.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.dashboard.port,
        help=f"Port to bind to (default: {config.dashboard.port})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    setup_logging(args.log_level)
    config.dashboard.host = args.host
    config.dashboard.port = args.port

    try:
        asyncio.run(run_dashboard(config))
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == "__main__":
    main()
