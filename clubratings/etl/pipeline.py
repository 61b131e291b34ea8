"""Batch importers: normalize and upsert source rows one at a time."""

import logging
from datetime import date
from typing import Optional, Sequence, Union

from clubratings.etl.base import ImportStats, RawRow
from clubratings.etl.clubelo_client import ClubEloClient, format_source_date
from clubratings.etl.loader import UpsertCoordinator
from clubratings.etl.normalize import normalize_fixture_row, normalize_rating_row, parse_source_date

logger = logging.getLogger(__name__)

SNAPSHOT_PROGRESS_EVERY = 50
HISTORY_PROGRESS_EVERY = 100
FIXTURES_PROGRESS_EVERY = 10


class ClubEloPipeline:
    """Orchestrates fetch -> parse -> normalize -> upsert for ClubElo data.

    Rows are processed sequentially in input order. A row that fails
    validation or persistence is logged and counted as an error; it never
    stops the rest of the batch. Only fetch/parse failures (raised by the
    client before any row is touched) abort an import.
    """

    def __init__(self, coordinator: UpsertCoordinator, client: Optional[ClubEloClient] = None):
        self.coordinator = coordinator
        self.client = client

    async def import_snapshot(self, rows: Sequence[RawRow], snapshot_date: date) -> ImportStats:
        """
        Import ratings of every club for one date.

        Args:
            rows: Parsed rating rows.
            snapshot_date: Date every row is stored under.

        Returns:
            ImportStats with success/error counts.
        """
        logger.info(f"Importing {len(rows)} club ratings for {snapshot_date.isoformat()}")
        stats = ImportStats()

        for row in rows:
            try:
                record = normalize_rating_row(row)
                await self.coordinator.upsert_rating(record, snapshot_date)
                stats.success += 1
                if stats.success % SNAPSHOT_PROGRESS_EVERY == 0:
                    logger.debug(f"Processed {stats.success}/{len(rows)} clubs")
            except Exception as e:
                stats.error += 1
                logger.error(f"Failed to import {row.get('Club')!r}: {e}")

        logger.info(f"Import complete for {snapshot_date.isoformat()}: {stats.to_dict()}")
        return stats

    async def import_history(self, rows: Sequence[RawRow], club_key: str) -> ImportStats:
        """
        Import the full rating history of one club.

        Each row is stored under its own From date.
        """
        logger.info(f"Importing {len(rows)} historical ratings for {club_key}")
        stats = ImportStats()

        for row in rows:
            try:
                rating_date = parse_source_date(row.get("From", ""))
                record = normalize_rating_row(row)
                await self.coordinator.upsert_rating(record, rating_date)
                stats.success += 1
                if stats.success % HISTORY_PROGRESS_EVERY == 0:
                    logger.debug(f"Processed {stats.success}/{len(rows)} ratings")
            except Exception as e:
                stats.error += 1
                logger.error(f"Failed to import rating from {row.get('From')!r}: {e}")

        logger.info(f"Import complete for {club_key}: {stats.to_dict()}")
        return stats

    async def import_fixtures(self, rows: Sequence[RawRow]) -> ImportStats:
        """Import fixtures with their outcome probabilities."""
        logger.info(f"Importing {len(rows)} fixtures")
        stats = ImportStats()

        if not rows:
            logger.warning("No fixtures to import")
            return stats

        for row in rows:
            try:
                record = normalize_fixture_row(row)
                await self.coordinator.upsert_fixture(record)
                stats.success += 1
                if stats.success % FIXTURES_PROGRESS_EVERY == 0:
                    logger.debug(f"Processed {stats.success}/{len(rows)} fixtures")
            except Exception as e:
                stats.error += 1
                logger.error(
                    f"Failed to import fixture {row.get('HomeTeam')!r} vs {row.get('AwayTeam')!r}: {e}"
                )

        logger.info(f"Fixtures import complete: {stats.to_dict()}")
        return stats

    def _require_client(self) -> ClubEloClient:
        if self.client is None:
            raise RuntimeError("ClubEloPipeline was created without a client")
        return self.client

    async def sync_snapshot(self, snapshot_date: Union[date, str]) -> dict:
        """Fetch and import the snapshot for one date."""
        date_str = format_source_date(snapshot_date)
        rows = await self._require_client().fetch_snapshot(date_str)
        if not rows:
            logger.warning(f"No data found for {date_str}")
            return {"date": date_str, "fetched": 0, "success": 0, "error": 0}

        stats = await self.import_snapshot(rows, date.fromisoformat(date_str))
        return {"date": date_str, "fetched": len(rows), **stats.to_dict()}

    async def sync_club_history(self, club_name: str) -> dict:
        """Fetch and import one club's full history."""
        rows = await self._require_client().fetch_history(club_name)
        if not rows:
            logger.warning(f"No history found for {club_name!r} (names are case-sensitive)")
            return {"club": club_name, "fetched": 0, "success": 0, "error": 0}

        stats = await self.import_history(rows, club_name.strip())
        return {"club": club_name, "fetched": len(rows), **stats.to_dict()}

    async def sync_fixtures(self, fixtures_date: Optional[Union[date, str]] = None) -> dict:
        """Fetch and import fixtures (all upcoming, or one date)."""
        date_str = format_source_date(fixtures_date) if fixtures_date is not None else None
        rows = await self._require_client().fetch_fixtures(date_str)
        stats = await self.import_fixtures(rows)
        return {"date": date_str, "fetched": len(rows), **stats.to_dict()}


def create_pipeline(store, client: Optional[ClubEloClient] = None, source: str = "clubelo") -> ClubEloPipeline:
    """Factory wiring a store and a client into a pipeline."""
    return ClubEloPipeline(
        coordinator=UpsertCoordinator(store, source=source),
        client=client if client is not None else ClubEloClient(),
    )
