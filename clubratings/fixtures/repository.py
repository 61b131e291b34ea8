"""Fixture lookups for the read API."""

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from clubratings.models import Club, FixtureFact


async def search_fixtures(
    session: AsyncSession,
    match_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    country: Optional[str] = None,
    competition: Optional[str] = None,
    limit: int = 100,
) -> list[dict]:
    """Fixtures joined with both clubs, ordered by match date.

    An exact match_date takes precedence over the from/to range.
    """
    home = aliased(Club)
    away = aliased(Club)

    stmt = (
        select(FixtureFact, home, away)
        .join(home, home.id == FixtureFact.home_club_id)
        .join(away, away.id == FixtureFact.away_club_id)
    )

    if match_date:
        stmt = stmt.where(FixtureFact.match_date == match_date)
    else:
        if date_from:
            stmt = stmt.where(FixtureFact.match_date >= date_from)
        if date_to:
            stmt = stmt.where(FixtureFact.match_date <= date_to)
    if country:
        stmt = stmt.where(FixtureFact.country == country)
    if competition:
        stmt = stmt.where(func.lower(FixtureFact.competition).like(f"%{competition.lower()}%"))

    stmt = stmt.order_by(FixtureFact.match_date.asc(), FixtureFact.id.asc()).limit(limit)
    result = await session.execute(stmt)

    return [
        {
            "id": fixture.id,
            "match_date": fixture.match_date.isoformat(),
            "country": fixture.country,
            "competition": fixture.competition,
            "home_team": {
                "id": home_club.id,
                "name": home_club.display_name,
                "country": home_club.country,
                "rating": fixture.home_rating,
            },
            "away_team": {
                "id": away_club.id,
                "name": away_club.display_name,
                "country": away_club.country,
                "rating": fixture.away_rating,
            },
            "predictions": {
                "home_win": fixture.home_win_prob,
                "draw": fixture.draw_prob,
                "away_win": fixture.away_win_prob,
            },
        }
        for fixture, home_club, away_club in result.all()
    ]
