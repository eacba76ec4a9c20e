"""
Nightly data update.

Syncs every stablemate's active horses (retired and dead horses are skipped)
and writes an aggregate report to the nightly log.

Usage:
    python scripts/nightly_update.py
    python scripts/nightly_update.py --target production
    python scripts/nightly_update.py --stablemate 3 --delay 2
"""

import argparse
import asyncio
import logging
import os
import sys
import time

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Nightly horse data update")
    parser.add_argument(
        "--target",
        choices=["local", "production"],
        help="Database to update (overrides DATABASE_TARGET)",
    )
    parser.add_argument("--stablemate", type=int, help="Only sync this stablemate")
    parser.add_argument("--delay", type=float, help="Seconds between horses")
    return parser.parse_args()


async def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    from stablesync.database import AsyncSessionLocal, init_db
    from stablesync.services import SyncOrchestrator

    await init_db()
    orchestrator = SyncOrchestrator(AsyncSessionLocal, delay=args.delay)

    started = time.monotonic()
    if args.stablemate is not None:
        reports = [await orchestrator.sync_stablemate(args.stablemate, include_inactive=False)]
    else:
        reports = await orchestrator.run_all()

    horses = sum(len(r.results) + len(r.errors) for r in reports)
    errors = sum(len(r.errors) for r in reports)
    races = sum(res.races.inserted for r in reports for res in r.results)
    gallops = sum(res.gallops.inserted for r in reports for res in r.results)
    registrations = sum(
        res.registrations.inserted + res.registrations.updated + res.registrations.deleted
        for r in reports
        for res in r.results
    )
    failed_runs = [r.stablemate_id for r in reports if r.error]

    logger.info("=" * 60)
    logger.info(f"Nightly update finished in {time.monotonic() - started:.0f}s")
    logger.info(f"Stablemates: {len(reports)} ({len(failed_runs)} failed)")
    logger.info(f"Horses: {horses} ({errors} errors)")
    logger.info(f"New races: {races}, new gallops: {gallops}, registration changes: {registrations}")
    if failed_runs:
        logger.warning(f"Failed stablemates: {failed_runs}")
    logger.info("=" * 60)
    return 0


def main() -> int:
    args = parse_args()
    if args.target:
        os.environ["DATABASE_TARGET"] = args.target

    from stablesync.logging_config import NIGHTLY_LOGGER_NAME, setup_logging

    setup_logging()
    logger = logging.getLogger(NIGHTLY_LOGGER_NAME)
    logger.info("Starting nightly data update")

    try:
        return asyncio.run(run(args, logger))
    except Exception as e:
        logger.exception(f"Nightly update aborted: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
