"""CLI entry point for building a tiered tournament leaderboard.

Usage examples:
    # Scrape the default PGA Tour odds page via ScraperAPI (uses this week's snapshot if any)
    python scripts/run_leaderboard.py --tournament "Sony Open in Hawaii"

    # Scrape a specific odds page and ignore the cached snapshot
    python scripts/run_leaderboard.py --url https://www.pgatour.com/.../odds --refresh

    # Use The Odds API outrights feed instead of scraping
    python scripts/run_leaderboard.py --odds-api --tournament "Masters"

    # Parse a saved page or feed without any network access
    python scripts/run_leaderboard.py --html-file page.html
    python scripts/run_leaderboard.py --feed-file outrights.json --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from functools import partial
from pathlib import Path

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from golf_tiers.config import DB_PATH, DEFAULT_TARGET_URL, DEFAULT_TOURNAMENT_NAME, TIER_NAMES
from golf_tiers.db import SnapshotStore
from golf_tiers.ingestion.fetch import SourceUnavailableError, fetch_page_html
from golf_tiers.odds.odds_api import fetch_tournament_feed
from golf_tiers.pipeline.leaderboard_pipeline import build_leaderboard, get_weekly_leaderboard
from golf_tiers.pipeline.tiers import group_by_tier
from golf_tiers.records import LeaderboardResult, records_to_frame


def _print_tiers(result: LeaderboardResult) -> None:
    print(f"\n{result.tournament} — last updated {result.last_updated}")
    print("=" * 60)
    for name, players in zip(TIER_NAMES, group_by_tier(result.players)):
        if not players:
            continue
        label = "player" if len(players) == 1 else "players"
        print(f"\n{name} ({len(players)} {label})")
        frame = records_to_frame(players).drop(columns=["tier"])
        print(frame.to_string(index=False))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Golf tournament odds leaderboard with draft tiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--url", default=None, help=f"Odds page to scrape (default: {DEFAULT_TARGET_URL})")
    source.add_argument("--odds-api", action="store_true", help="Use The Odds API outrights feed")
    source.add_argument("--html-file", type=Path, default=None, help="Parse a saved HTML page")
    source.add_argument("--feed-file", type=Path, default=None, help="Parse a saved outrights JSON feed")
    parser.add_argument(
        "--tournament", default=DEFAULT_TOURNAMENT_NAME,
        help=f"Tournament name / feed hint (default: {DEFAULT_TOURNAMENT_NAME})",
    )
    parser.add_argument("--db", type=Path, default=DB_PATH, help=f"Snapshot database (default: {DB_PATH})")
    parser.add_argument("--refresh", action="store_true", help="Ignore this week's snapshot and fetch again")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        if args.html_file is not None:
            result = build_leaderboard(
                args.html_file.read_text(encoding="utf-8"), tournament_hint=args.tournament,
            )
        elif args.feed_file is not None:
            result = build_leaderboard(
                json.loads(args.feed_file.read_text(encoding="utf-8")),
                tournament_hint=args.tournament,
            )
        else:
            if args.odds_api:
                fetch = partial(fetch_tournament_feed, args.tournament)
            else:
                fetch = partial(fetch_page_html, args.url or DEFAULT_TARGET_URL)
            result = get_weekly_leaderboard(
                args.tournament, fetch, store=SnapshotStore(args.db), force=args.refresh,
            )
    except SourceUnavailableError as exc:
        print(f"Failed to fetch leaderboard data: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.is_empty:
        print(f"No player data available for {result.tournament}. The page structure may have changed.")
    else:
        _print_tiers(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
