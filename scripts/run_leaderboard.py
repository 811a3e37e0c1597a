#!/usr/bin/env python3
"""
Print a monthly leaderboard.

Usage:
    python scripts/run_leaderboard.py
    python scripts/run_leaderboard.py --month 2025-03 --chapter "Mumbai Chapter"
    python scripts/run_leaderboard.py --tier gold --search john
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.clock import SystemClock
from core.config import ConsoleConfig
from member_sources import ChapterApiClient, RosterFetchError, YearMonth
from member_sources.models import is_unset_filter
from member_scoring import MemberScoreAggregator, ScoredMember, Tier
from reporting import filter_members, format_inr, summarize_tiers


logger = logging.getLogger(__name__)


def print_banner(text: str) -> None:
    """Print a banner."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_row(position: int, scored: ScoredMember) -> None:
    m = scored.metrics
    print(
        f"  {position:>3}. {scored.member.name[:24]:<24} | {scored.member.chapter[:18]:<18} | "
        f"{scored.tier.value:<8} | {scored.total_score:>3} pts | "
        f"mtg {m.attendance.meetings_present:>2} | bdm {m.bdm_given:>2} | "
        f"{format_inr(m.business_amount):>12} | ref {m.referrals.total_count:>2} | "
        f"vis {m.visitors.total_count:>2} | soc {m.socials.total_count:>2}"
    )


async def show_leaderboard(config: ConsoleConfig, args: argparse.Namespace) -> int:
    month = args.month or SystemClock().current_month()

    async with ChapterApiClient(config.api) as client:
        aggregator = MemberScoreAggregator(client, config.scoring)
        try:
            result = await aggregator.build_leaderboard(month, args.chapter)
        except RosterFetchError as e:
            logger.error(f"Could not load roster: {e}")
            print("\nNo members found matching your criteria")
            return 1

    rows = filter_members(result.members, tier=args.tier, search=args.search)

    print_banner(f"LEADERBOARD {month}")
    if not rows:
        print("\n  No members found matching your criteria")
    for position, scored in enumerate(rows, 1):
        print_row(position, scored)

    print_banner("ACHIEVEMENT CATEGORIES")
    for category in summarize_tiers(result.members):
        print(
            f"  {category.tier.value:<8} {category.label:<16} "
            f"{category.member_count:>4} members ({category.percentage}%)"
        )

    if result.failures:
        print(f"\n  {len(result.failures)} member(s) could not be scored; see log for details")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Print the monthly member leaderboard")
    parser.add_argument("--month", help="Reporting month YYYY-MM (default: current month)")
    parser.add_argument("--chapter", help="Only members of this chapter")
    parser.add_argument("--tier", help="Only members of this tier (Bronze/Silver/Gold/Platinum)")
    parser.add_argument("--search", help="Filter by member or chapter name")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    try:
        args.month = YearMonth.parse(args.month) if args.month else None
        if not is_unset_filter(args.tier):
            Tier.parse(args.tier)
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    sys.exit(asyncio.run(show_leaderboard(ConsoleConfig.from_env(), args)))


if __name__ == "__main__":
    main()
