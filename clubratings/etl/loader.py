"""Transactional upsert of normalized records into clubs and fact tables."""

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clubratings.clubs.repository import upsert_club
from clubratings.database import Store, insert_for
from clubratings.etl.base import FixtureRecord, RatingRecord
from clubratings.etl.errors import PersistenceFailure
from clubratings.models import FixtureFact, RatingFact, utc_now

logger = logging.getLogger(__name__)


class UpsertCoordinator:
    """
    Writes one record per transaction.

    Each call runs BEGIN -> resolve club(s) -> upsert fact -> COMMIT.
    Any failure rolls back everything written in that call, including
    clubs created by it, and surfaces as PersistenceFailure.
    """

    def __init__(self, store: Store, source: str = "clubelo"):
        self.store = store
        self.source = source

    async def upsert_rating(self, record: RatingRecord, rating_date: date) -> None:
        try:
            async with self.store.transaction() as session:
                club_id = await upsert_club(session, record.club)
                await self._write_rating_fact(session, club_id, record, rating_date)
        except SQLAlchemyError as e:
            raise PersistenceFailure(
                f"Rating upsert failed for {record.club_key} on {rating_date}: {e}"
            ) from e

    async def upsert_fixture(self, record: FixtureRecord) -> None:
        try:
            async with self.store.transaction() as session:
                home_club_id = await upsert_club(session, record.home_club)
                away_club_id = await upsert_club(session, record.away_club)
                await self._write_fixture_fact(session, home_club_id, away_club_id, record)
        except SQLAlchemyError as e:
            raise PersistenceFailure(
                f"Fixture upsert failed for {record.home_club_key} vs "
                f"{record.away_club_key} on {record.match_date}: {e}"
            ) from e

    async def _write_rating_fact(
        self,
        session: AsyncSession,
        club_id: int,
        record: RatingRecord,
        rating_date: date,
    ) -> None:
        now = utc_now()
        stmt = insert_for(session.bind.dialect.name, RatingFact).values(
            club_id=club_id,
            date=rating_date,
            rank=record.rank,
            country=record.country,
            level=record.level,
            rating=record.rating,
            source=self.source,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["club_id", "date"],
            set_={
                "rank": stmt.excluded.rank,
                "country": stmt.excluded.country,
                "level": stmt.excluded.level,
                "rating": stmt.excluded.rating,
                "source": stmt.excluded.source,
                "updated_at": now,
            },
        )
        await session.execute(stmt)

    async def _write_fixture_fact(
        self,
        session: AsyncSession,
        home_club_id: int,
        away_club_id: int,
        record: FixtureRecord,
    ) -> None:
        now = utc_now()
        stmt = insert_for(session.bind.dialect.name, FixtureFact).values(
            home_club_id=home_club_id,
            away_club_id=away_club_id,
            match_date=record.match_date,
            country=record.country,
            competition=record.competition,
            home_level=record.home_level,
            away_level=record.away_level,
            home_rating=record.home_rating,
            away_rating=record.away_rating,
            home_win_prob=record.home_win_prob,
            draw_prob=record.draw_prob,
            away_win_prob=record.away_win_prob,
            source=self.source,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["home_club_id", "away_club_id", "match_date"],
            set_={
                "country": stmt.excluded.country,
                "competition": stmt.excluded.competition,
                "home_level": stmt.excluded.home_level,
                "away_level": stmt.excluded.away_level,
                "home_rating": stmt.excluded.home_rating,
                "away_rating": stmt.excluded.away_rating,
                "home_win_prob": stmt.excluded.home_win_prob,
                "draw_prob": stmt.excluded.draw_prob,
                "away_win_prob": stmt.excluded.away_win_prob,
                "source": stmt.excluded.source,
                "updated_at": now,
            },
        )
        await session.execute(stmt)
