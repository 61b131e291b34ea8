"""Club rankings for one date with filters and offset pagination."""

import logging
import math
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubratings.models import Club, RatingFact

logger = logging.getLogger(__name__)


class NoRatingData(LookupError):
    """The store holds no rating facts at all."""


async def get_latest_rating_date(session: AsyncSession) -> Optional[date]:
    result = await session.execute(select(func.max(RatingFact.date)))
    return result.scalar_one_or_none()


def _filtered(stmt, rating_date: date, country, level, min_rating):
    stmt = stmt.where(RatingFact.date == rating_date)
    if country:
        stmt = stmt.where(RatingFact.country == country)
    if level is not None:
        stmt = stmt.where(RatingFact.level == level)
    if min_rating is not None:
        stmt = stmt.where(RatingFact.rating >= min_rating)
    return stmt


async def get_rankings(
    session: AsyncSession,
    rating_date: Optional[date] = None,
    country: Optional[str] = None,
    level: Optional[int] = None,
    min_rating: Optional[float] = None,
    page: int = 1,
    page_size: int = 100,
) -> dict:
    """
    Rankings for a date (defaults to the latest date with data).

    Returns:
        Dict with date, applied filters, clubs (rating desc) and pagination.

    Raises:
        NoRatingData: No date given and nothing has been imported yet.
    """
    if rating_date is None:
        rating_date = await get_latest_rating_date(session)
        if rating_date is None:
            raise NoRatingData("No rating data available")

    logger.debug(f"Fetching rankings for {rating_date} (country={country}, level={level}, page={page})")

    count_stmt = _filtered(
        select(func.count()).select_from(RatingFact), rating_date, country, level, min_rating
    )
    total = (await session.execute(count_stmt)).scalar_one()

    rows_stmt = _filtered(
        select(
            Club.id,
            Club.identity_key,
            Club.display_name,
            RatingFact.country,
            RatingFact.level,
            RatingFact.rank,
            RatingFact.rating,
        ).join(Club, Club.id == RatingFact.club_id),
        rating_date,
        country,
        level,
        min_rating,
    )
    rows_stmt = (
        rows_stmt.order_by(RatingFact.rating.desc(), Club.id.asc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    )
    rows = (await session.execute(rows_stmt)).all()

    return {
        "date": rating_date.isoformat(),
        "country": country,
        "level": level,
        "min_rating": min_rating,
        "clubs": [
            {
                "id": row.id,
                "identity_key": row.identity_key,
                "display_name": row.display_name,
                "country": row.country,
                "level": row.level,
                "rank": row.rank,
                "rating": row.rating,
            }
            for row in rows
        ],
        "pagination": {
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": math.ceil(total / page_size) if page_size else 0,
        },
    }
