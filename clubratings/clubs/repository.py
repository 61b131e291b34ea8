"""Club persistence: entity resolution for imports and lookups for the API."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubratings.database import insert_for
from clubratings.models import Club, RatingFact, utc_now

logger = logging.getLogger(__name__)


class ClubNotFound(LookupError):
    """No club matches the requested id or identity key."""


@dataclass
class ClubIdentity:
    """Club fields carried by every source row."""

    identity_key: str
    display_name: str
    country: str
    level: int


async def upsert_club(session: AsyncSession, identity: ClubIdentity) -> int:
    """
    Create the club on first encounter, otherwise overwrite its mutable fields.

    Last write wins for display name, country and level. Runs on the
    caller's session so it commits or rolls back with the caller's
    transaction.

    Returns:
        The club's surrogate id.
    """
    now = utc_now()
    stmt = insert_for(session.bind.dialect.name, Club).values(
        identity_key=identity.identity_key,
        display_name=identity.display_name,
        country=identity.country,
        level=identity.level,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["identity_key"],
        set_={
            "display_name": stmt.excluded.display_name,
            "country": stmt.excluded.country,
            "level": stmt.excluded.level,
            "updated_at": now,
        },
    ).returning(Club.id)

    result = await session.execute(stmt)
    club_id = result.scalar_one()
    logger.debug(f"Upserted club: {identity.identity_key} (ID: {club_id})")
    return club_id


async def get_club(session: AsyncSession, identifier: Union[int, str]) -> Club:
    """
    Look up a club by numeric id or by identity key.

    All-digit identifiers are tried as an id first, then as a key, so a
    club published under a numeric name stays reachable.
    """
    club = None
    if isinstance(identifier, int) or str(identifier).isdigit():
        stmt = select(Club).where(Club.id == int(identifier))
        club = (await session.execute(stmt)).scalar_one_or_none()

    if club is None and not isinstance(identifier, int):
        stmt = select(Club).where(Club.identity_key == identifier)
        club = (await session.execute(stmt)).scalar_one_or_none()

    if club is None:
        raise ClubNotFound(f"Club not found: {identifier}")
    return club


async def search_clubs(
    session: AsyncSession,
    query: Optional[str] = None,
    country: Optional[str] = None,
    level: Optional[int] = None,
    limit: int = 100,
) -> list[Club]:
    stmt = select(Club)
    if query:
        stmt = stmt.where(func.lower(Club.display_name).like(f"%{query.lower()}%"))
    if country:
        stmt = stmt.where(Club.country == country)
    if level is not None:
        stmt = stmt.where(Club.level == level)
    stmt = stmt.order_by(Club.display_name.asc()).limit(limit)

    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_club_history(
    session: AsyncSession,
    club_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[dict]:
    """Rating history of one club, oldest first."""
    stmt = select(RatingFact.date, RatingFact.rating, RatingFact.rank).where(
        RatingFact.club_id == club_id
    )
    if date_from:
        stmt = stmt.where(RatingFact.date >= date_from)
    if date_to:
        stmt = stmt.where(RatingFact.date <= date_to)
    stmt = stmt.order_by(RatingFact.date.asc())

    result = await session.execute(stmt)
    return [
        {"date": row.date.isoformat(), "rating": row.rating, "rank": row.rank}
        for row in result.all()
    ]
