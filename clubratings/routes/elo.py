"""Read API: rankings, clubs, club history and fixtures.

All endpoints are public and rate limited per client IP.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clubratings.clubs import ClubNotFound, get_club, get_club_history, search_clubs
from clubratings.config import get_settings
from clubratings.fixtures import search_fixtures
from clubratings.rankings import NoRatingData, get_rankings
from clubratings.routes.deps import get_session, parse_query_date
from clubratings.security import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/elo", tags=["elo"])
settings = get_settings()


def _club_to_dict(club) -> dict:
    return {
        "id": club.id,
        "identity_key": club.identity_key,
        "display_name": club.display_name,
        "country": club.country,
        "level": club.level,
    }


@router.get("/rankings")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def rankings(
    request: Request,
    date: Optional[str] = None,
    country: Optional[str] = None,
    level: Optional[int] = None,
    min_rating: Optional[float] = None,
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_session),
):
    """
    Club rankings for a date (latest available when omitted).

    Example:
        GET /api/elo/rankings?date=2025-11-18&country=ENG&level=1&page=1&page_size=20
    """
    rating_date = parse_query_date(date)
    size = page_size if page_size is not None else settings.DEFAULT_PAGE_SIZE

    if page < 1:
        raise HTTPException(status_code=400, detail="Page must be >= 1")
    if size < 1 or size > settings.MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Page size must be between 1 and {settings.MAX_PAGE_SIZE}",
        )

    try:
        return await get_rankings(
            session,
            rating_date=rating_date,
            country=country,
            level=level,
            min_rating=min_rating,
            page=page,
            page_size=size,
        )
    except NoRatingData as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/clubs")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def clubs(
    request: Request,
    q: Optional[str] = None,
    country: Optional[str] = None,
    level: Optional[int] = None,
    limit: int = Query(100, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
):
    """List/search clubs, e.g. GET /api/elo/clubs?q=Man&country=ENG."""
    found = await search_clubs(session, query=q, country=country, level=level, limit=limit)
    return {"clubs": [_club_to_dict(c) for c in found]}


@router.get("/clubs/{identifier}")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def club_detail(
    request: Request,
    identifier: str,
    session: AsyncSession = Depends(get_session),
):
    """Club by id or identity key."""
    try:
        club = await get_club(session, identifier)
    except ClubNotFound:
        raise HTTPException(status_code=404, detail="Club not found")
    return _club_to_dict(club)


@router.get("/clubs/{identifier}/history")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def club_history(
    request: Request,
    identifier: str,
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    session: AsyncSession = Depends(get_session),
):
    """Rating history of one club, optionally bounded by from/to dates."""
    start = parse_query_date(date_from, "from")
    end = parse_query_date(date_to, "to")
    try:
        club = await get_club(session, identifier)
    except ClubNotFound:
        raise HTTPException(status_code=404, detail="Club not found")

    history = await get_club_history(session, club.id, date_from=start, date_to=end)
    return {"club": _club_to_dict(club), "history": history}


@router.get("/fixtures")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def fixtures(
    request: Request,
    date: Optional[str] = None,
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    country: Optional[str] = None,
    competition: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
):
    """Fixtures with predictions, e.g. GET /api/elo/fixtures?from=2025-11-20&to=2025-11-27."""
    found = await search_fixtures(
        session,
        match_date=parse_query_date(date),
        date_from=parse_query_date(date_from, "from"),
        date_to=parse_query_date(date_to, "to"),
        country=country,
        competition=competition,
        limit=limit,
    )
    return {"fixtures": found, "count": len(found)}
