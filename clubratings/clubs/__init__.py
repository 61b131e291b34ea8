"""Club domain: entity resolution and lookups."""

from clubratings.clubs.repository import (
    ClubIdentity,
    ClubNotFound,
    get_club,
    get_club_history,
    search_clubs,
    upsert_club,
)

__all__ = [
    "ClubIdentity",
    "ClubNotFound",
    "get_club",
    "get_club_history",
    "search_clubs",
    "upsert_club",
]
