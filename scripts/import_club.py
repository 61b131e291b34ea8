"""
Import the full rating history of one club.

Club names are the ClubElo spelling and are case-sensitive (ManCity, RealMadrid).

Usage:
  source .env
  python scripts/import_club.py --club ManCity
"""
import argparse
import asyncio
import logging
import sys

from _db import open_store

from clubratings.config import get_settings
from clubratings.etl import ClubEloClient, FetchExhausted, MalformedInput, create_pipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
log = logging.getLogger(__name__)


async def main(club: str) -> int:
    store = await open_store()
    try:
        async with ClubEloClient() as client:
            pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
            log.info(f"Fetching full history for {club!r}...")
            result = await pipeline.sync_club_history(club)

        print("\n=== Summary ===")
        rows = await store.query(
            """
            SELECT c.display_name, c.country, COUNT(r.id) AS ratings
            FROM clubs c LEFT JOIN rating_facts r ON r.club_id = c.id
            WHERE c.identity_key = :key
            GROUP BY c.display_name, c.country
            """,
            {"key": club.strip()},
        )
        if rows:
            print(f"Club: {rows[0]['display_name']} ({rows[0]['country']})")
            print(f"Historical ratings stored: {rows[0]['ratings']}")
        print(f"Imported: {result['success']}  errors: {result['error']}")
        return 0
    except (FetchExhausted, MalformedInput) as e:
        log.error(f"Import failed: {e}")
        return 1
    finally:
        await store.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import one club's ClubElo history")
    parser.add_argument("--club", required=True, help='ClubElo club name, e.g. "ManCity"')
    args = parser.parse_args()
    if not args.club.strip():
        parser.error("Club name is required")

    sys.exit(asyncio.run(main(args.club)))
