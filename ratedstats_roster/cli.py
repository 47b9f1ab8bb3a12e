#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .client import ArmoryClient
from .config import REGIONS, Settings
from .formatting import ranked_rows, render_table
from .loader import load_seed_file, parse_seed_list

log = logging.getLogger("ratedstats_roster")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank tracked characters by rated PvP")
    parser.add_argument(
        "--seed",
        type=Path,
        default=Path("tracked_characters.txt"),
        help="Seed list, one 'name,server' per line (default: tracked_characters.txt)",
    )
    parser.add_argument(
        "--region",
        choices=REGIONS,
        default=None,
        help="Region code (default: $BLIZZARD_REGION or eu)",
    )
    parser.add_argument(
        "--add",
        action="append",
        default=[],
        metavar="NAME,SERVER",
        help="Track an extra character after loading the seed list",
    )
    parser.add_argument(
        "--remove",
        action="append",
        default=[],
        metavar="NAME-SERVER",
        help="Drop a character by key before printing",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Characters to fetch at once during the initial load",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    async with ArmoryClient(settings) as client:
        roster = client.new_roster()
        report = await load_seed_file(roster, args.seed, workers=args.workers)
        if report.error:
            print(f"[ERROR] {report.error}", file=sys.stderr)

        for raw in args.add:
            identities = parse_seed_list(raw)
            if not identities:
                print(f"[ERROR] --add expects NAME,SERVER, got {raw!r}", file=sys.stderr)
                continue
            ident = identities[0]
            if not await roster.add(ident) and ident.key in roster.errors:
                print(f"[ERROR] {roster.errors[ident.key]}", file=sys.stderr)

        for key in args.remove:
            roster.remove(key)

        print(render_table(ranked_rows(roster.ranked_view())))
        if report.error and not len(roster):
            return 1
        return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        settings = Settings.from_env(region=args.region)
    except ValueError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    log.info("Region: %s, Locale: %s", settings.region, settings.locale)
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
