"""Background scheduler for the daily snapshot and fixtures imports."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from clubratings.config import get_settings
from clubratings.database import Store
from clubratings.etl import ClubEloClient, FetchExhausted, MalformedInput, create_pipeline

logger = logging.getLogger(__name__)

scheduler: Optional[AsyncIOScheduler] = None


async def daily_snapshot_job(store: Store) -> Optional[dict]:
    """Import yesterday's snapshot. Failures are logged, never raised."""
    snapshot_date = datetime.now(timezone.utc).date() - timedelta(days=1)
    async with ClubEloClient() as client:
        pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
        try:
            result = await pipeline.sync_snapshot(snapshot_date)
        except (FetchExhausted, MalformedInput) as e:
            logger.error(f"Daily snapshot job failed for {snapshot_date}: {e}")
            return None
    logger.info(f"Daily snapshot job complete: {result}")
    return result


async def fixtures_job(store: Store) -> Optional[dict]:
    """Import all upcoming fixtures. Failures are logged, never raised."""
    async with ClubEloClient() as client:
        pipeline = create_pipeline(store, client, source=get_settings().RATING_SOURCE)
        try:
            result = await pipeline.sync_fixtures()
        except (FetchExhausted, MalformedInput) as e:
            logger.error(f"Fixtures job failed: {e}")
            return None
    logger.info(f"Fixtures job complete: {result}")
    return result


def start_scheduler(store: Store) -> AsyncIOScheduler:
    """Register the import jobs and start the scheduler."""
    global scheduler
    settings = get_settings()

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        daily_snapshot_job,
        CronTrigger(hour=settings.DAILY_IMPORT_HOUR_UTC, minute=0),
        args=[store],
        id="daily_snapshot",
        name="Daily rating snapshot import",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        fixtures_job,
        CronTrigger(hour=settings.FIXTURES_IMPORT_HOUR_UTC, minute=0),
        args=[store],
        id="fixtures",
        name="Fixtures import",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started: snapshot at {settings.DAILY_IMPORT_HOUR_UTC:02d}:00 UTC, "
        f"fixtures at {settings.FIXTURES_IMPORT_HOUR_UTC:02d}:00 UTC"
    )
    return scheduler


def stop_scheduler() -> None:
    global scheduler
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    scheduler = None
