"""Import triggers called by an external scheduler.

Protected by Authorization: Bearer <CRON_SECRET>.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends

from clubratings.config import get_settings
from clubratings.database import Store
from clubratings.etl import ClubEloClient, create_pipeline
from clubratings.routes.deps import get_store, parse_query_date
from clubratings.security import verify_cron_secret

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cron",
    tags=["cron"],
    dependencies=[Depends(verify_cron_secret)],
)


def yesterday_utc() -> date:
    return datetime.now(timezone.utc).date() - timedelta(days=1)


@router.post("/import-daily")
async def import_daily(
    date: Optional[str] = None,
    store: Store = Depends(get_store),
):
    """
    Import the daily rating snapshot (defaults to yesterday, UTC).

    Example:
        POST /api/cron/import-daily?date=2025-11-20
        Authorization: Bearer <secret>
    """
    snapshot_date = parse_query_date(date) or yesterday_utc()
    logger.info(f"Starting daily import for {snapshot_date.isoformat()}")

    async with ClubEloClient() as client:
        pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
        result = await pipeline.sync_snapshot(snapshot_date)

    if not result["fetched"]:
        return {
            "success": True,
            "count": 0,
            "message": "No data found",
            "date": result["date"],
        }

    return {
        "success": True,
        "date": result["date"],
        "fetched": result["fetched"],
        "imported": result["success"],
        "errors": result["error"],
    }


@router.post("/import-fixtures")
async def import_fixtures(
    date: Optional[str] = None,
    store: Store = Depends(get_store),
):
    """Import fixtures (all upcoming, or one date when given)."""
    fixtures_date = parse_query_date(date)
    logger.info(
        f"Starting fixtures import for {fixtures_date.isoformat()}"
        if fixtures_date
        else "Starting fixtures import for upcoming matches"
    )

    async with ClubEloClient() as client:
        pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
        result = await pipeline.sync_fixtures(fixtures_date)

    if not result["fetched"]:
        return {"success": True, "count": 0, "message": "No fixtures found"}

    return {
        "success": True,
        "fetched": result["fetched"],
        "imported": result["success"],
        "errors": result["error"],
    }
