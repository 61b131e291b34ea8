"""Data transfer objects shared by the ingestion stages."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from clubratings.clubs.repository import ClubIdentity

# One parsed line of tabular text: column name -> trimmed string value
RawRow = dict[str, str]


@dataclass
class RatingRecord:
    """Normalized rating row (snapshot or history)."""

    club_key: str
    display_name: str
    country: str
    level: int
    rank: Optional[int]  # None when the source publishes no rank
    rating: float
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None

    @property
    def club(self) -> ClubIdentity:
        return ClubIdentity(
            identity_key=self.club_key,
            display_name=self.display_name,
            country=self.country,
            level=self.level,
        )


@dataclass
class FixtureRecord:
    """Normalized fixture row with rating-derived probabilities."""

    match_date: date
    country: str
    competition: str
    home_club_key: str
    away_club_key: str
    home_level: int
    away_level: int
    home_rating: float
    away_rating: float
    home_win_prob: Optional[float] = None
    draw_prob: Optional[float] = None
    away_win_prob: Optional[float] = None

    @property
    def home_club(self) -> ClubIdentity:
        return ClubIdentity(self.home_club_key, self.home_club_key, self.country, self.home_level)

    @property
    def away_club(self) -> ClubIdentity:
        return ClubIdentity(self.away_club_key, self.away_club_key, self.country, self.away_level)


@dataclass
class ImportStats:
    """Per-batch tally returned by the batch importer."""

    success: int = 0
    error: int = 0

    @property
    def total(self) -> int:
        return self.success + self.error

    def to_dict(self) -> dict:
        return {"success": self.success, "error": self.error}
