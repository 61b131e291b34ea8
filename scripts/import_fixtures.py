"""
Import fixtures with ClubElo win/draw probabilities.

Usage:
  source .env
  python scripts/import_fixtures.py [--date 2025-11-20]
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from _db import open_store, print_totals

from clubratings.config import get_settings
from clubratings.etl import ClubEloClient, FetchExhausted, MalformedInput, create_pipeline
from clubratings.etl.clubelo_client import format_source_date

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
log = logging.getLogger(__name__)


async def main(date_str: Optional[str]) -> int:
    store = await open_store()
    try:
        async with ClubEloClient() as client:
            pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
            log.info(f"Fetching fixtures{' for ' + date_str if date_str else ''}...")
            result = await pipeline.sync_fixtures(date_str)

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
    parser = argparse.ArgumentParser(description="Import ClubElo fixtures")
    parser.add_argument("--date", help="YYYY-MM-DD (default: all upcoming)")
    args = parser.parse_args()
    if args.date:
        try:
            format_source_date(args.date)
        except ValueError as e:
            parser.error(str(e))

    sys.exit(asyncio.run(main(args.date)))
