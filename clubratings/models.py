"""Database models using SQLModel."""

from datetime import date as date_type
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_column() -> Column:
    # timestamptz on PostgreSQL; values are always timezone-aware UTC
    return Column(DateTime(timezone=True), nullable=False)


class Club(SQLModel, table=True):
    """Club entity, created on first encounter of its identity key."""

    __tablename__ = "clubs"

    id: Optional[int] = Field(default=None, primary_key=True)
    identity_key: str = Field(
        max_length=255, unique=True, index=True, description="Trimmed source club name"
    )
    display_name: str = Field(max_length=255, description="Club name as published")
    country: str = Field(max_length=10, description="Country code, e.g. 'ENG'")
    level: int = Field(description="League level (1 = top flight)")

    created_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())


class RatingFact(SQLModel, table=True):
    """One rating value for one club on one calendar date."""

    __tablename__ = "rating_facts"
    __table_args__ = (
        UniqueConstraint("club_id", "date", name="uq_rating_club_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    club_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    date: date_type = Field(index=True, description="Rating date")
    rank: Optional[int] = Field(default=None, description="NULL when the source has no rank")
    country: str = Field(max_length=10, index=True)
    level: int
    rating: float = Field(description="Elo rating value")
    source: str = Field(max_length=50, default="clubelo")

    created_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())


class FixtureFact(SQLModel, table=True):
    """Scheduled or completed match with rating-derived outcome probabilities."""

    __tablename__ = "fixture_facts"
    __table_args__ = (
        UniqueConstraint(
            "home_club_id", "away_club_id", "match_date", name="uq_fixture_clubs_date"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    home_club_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    away_club_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    match_date: date_type = Field(index=True)
    country: str = Field(max_length=10, index=True)
    competition: Optional[str] = Field(default=None, max_length=255)

    home_level: int
    away_level: int
    home_rating: float
    away_rating: float

    home_win_prob: Optional[float] = Field(default=None, description="Probability of home win")
    draw_prob: Optional[float] = Field(default=None, description="Probability of draw")
    away_win_prob: Optional[float] = Field(default=None, description="Probability of away win")

    source: str = Field(max_length=50, default="clubelo")
    created_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
