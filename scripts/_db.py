"""
Database helper for scripts.

Never hardcode credentials. DATABASE_URL is read from the environment
(or .env) through the application settings.

Usage:
    from _db import open_store, print_totals

    store = await open_store()
"""

import sys

from pydantic import ValidationError

from clubratings.config import get_settings
from clubratings.database import Store


async def open_store() -> Store:
    """Build a Store from DATABASE_URL and make sure tables exist.

    Raises SystemExit if DATABASE_URL is not configured.
    """
    try:
        settings = get_settings()
    except ValidationError:
        print("ERROR: DATABASE_URL not set in environment.", file=sys.stderr)
        print("Set it with: export DATABASE_URL='postgresql://...'", file=sys.stderr)
        sys.exit(1)

    store = Store.from_url(settings.DATABASE_URL)
    await store.create_tables()
    return store


async def print_totals(store: Store) -> None:
    """Print row counts of the three tables."""
    for table in ("clubs", "rating_facts", "fixture_facts"):
        rows = await store.query(f"SELECT COUNT(*) AS total FROM {table}")
        print(f"Total {table}: {rows[0]['total']}")
