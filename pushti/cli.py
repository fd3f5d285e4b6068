# -*- coding: utf-8 -*-
"""
Command-line entry point.

Usage:
    pushti serve
    pushti profiles
    pushti chart --mode weekly --anchor 2024-01-15
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from .config import settings


def _store(args: argparse.Namespace):
    from .profiles.store import ProfileStore
    from .storage import LocalStorage

    db_path = Path(args.db_path) if args.db_path else settings.db_path
    return ProfileStore(LocalStorage(db_path))


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API."""
    from .api import run

    if args.db_path:
        settings.db_path = Path(args.db_path).expanduser()
        logging.getLogger(__name__).info("serving store at %s", settings.db_path)
    run()
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List stored profiles."""
    store = _store(args)
    profiles = store.profiles
    if not profiles:
        print("No profiles yet.")
        return 0

    for profile in profiles:
        marker = "*" if profile.id == store.active_profile_id else " "
        print(
            f"{marker} {profile.id}  {profile.name} (age {profile.age}, "
            f"{profile.height:g} cm, {profile.weight:g} kg)  "
            f"{len(profile.calorie_logs)} meals, {len(profile.health_logs)} health logs"
        )
    return 0


def cmd_chart(args: argparse.Namespace) -> int:
    """Print chart buckets for the active profile."""
    from .analytics.aggregator import build_chart_data, parse_log_day, week_start_for

    anchor = parse_log_day(args.anchor) if args.anchor else date.today()
    if anchor is None:
        print(f"Error: invalid anchor date: {args.anchor}")
        return 1

    store = _store(args)
    profile = store.active_profile
    if profile is None:
        print("Error: no active profile.")
        return 1

    points = build_chart_data(
        profile.calorie_logs,
        profile.health_logs,
        args.mode,
        anchor,
        week_start_for(args.locale or settings.locale),
    )
    print(f"{profile.name}: {args.mode} view around {anchor.isoformat()}")
    print(f"{'label':<8} {'kcal':>8} {'steps':>7} {'water':>7} {'workout':>8} {'sleep':>6}")
    for p in points:
        print(f"{p.label:<8} {p.calories:>8g} {p.steps:>7d} {p.water:>7g} {p.workout:>8g} {p.sleep:>6g}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Pushti nutrition and health tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db-path",
        help="Path to the SQLite store (default: PUSHTI_DB_PATH or data/pushti.db)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("serve", help="Run the HTTP API")
    subparsers.add_parser("profiles", help="List profiles")

    chart_parser = subparsers.add_parser("chart", help="Show chart buckets for the active profile")
    chart_parser.add_argument(
        "--mode",
        choices=["daily", "weekly", "monthly"],
        default="daily",
        help="View mode (default: daily)",
    )
    chart_parser.add_argument("--anchor", help="Anchor date YYYY-MM-DD (default: today)")
    chart_parser.add_argument("--locale", help="bn or en (default: PUSHTI_LOCALE)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "serve": cmd_serve,
        "profiles": cmd_profiles,
        "chart": cmd_chart,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
