"""
Create the clubs, rating_facts and fixture_facts tables.

Usage:
  source .env
  python scripts/init_db.py
"""
import asyncio
import logging

from _db import open_store, print_totals

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
log = logging.getLogger(__name__)


async def main():
    store = await open_store()
    try:
        await print_totals(store)
    finally:
        await store.dispose()
    log.info("Database schema ready")


if __name__ == "__main__":
    asyncio.run(main())
