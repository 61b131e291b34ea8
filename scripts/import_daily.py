"""
Import the rating snapshot of every club for one date.

Safe to run repeatedly: existing (club, date) ratings are overwritten.

Usage:
  source .env
  python scripts/import_daily.py [--date 2025-11-18]
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

from _db import open_store, print_totals

from clubratings.config import get_settings
from clubratings.etl import ClubEloClient, FetchExhausted, MalformedInput, create_pipeline
from clubratings.etl.clubelo_client import format_source_date

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
log = logging.getLogger(__name__)


async def main(date_str: str) -> int:
    store = await open_store()
    try:
        async with ClubEloClient() as client:
            pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
            log.info(f"Fetching snapshot for {date_str}...")
            result = await pipeline.sync_snapshot(date_str)

        print("\n=== Summary ===")
        print(f"Fetched: {result['fetched']}  imported: {result['success']}  errors: {result['error']}")
        await print_totals(store)
        return 0
    except (FetchExhausted, MalformedInput) as e:
        log.error(f"Import failed: {e}")
        return 1
    finally:
        await store.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import a daily ClubElo snapshot")
    parser.add_argument("--date", help="YYYY-MM-DD (default: yesterday UTC)")
    args = parser.parse_args()

    date_str = args.date or (datetime.now(timezone.utc).date() - timedelta(days=1)).isoformat()
    try:
        format_source_date(date_str)
    except ValueError as e:
        parser.error(str(e))

    sys.exit(asyncio.run(main(date_str)))
