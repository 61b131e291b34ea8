"""Shared fixtures: settings from env and an in-memory SQLite store."""

import os

# Settings are read at import time by several modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("AUTO_CREATE_TABLES", "true")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from clubratings.database import Store  # noqa: E402

RATING_HEADER = "Rank,Club,Country,Level,Elo,From,To"
FIXTURE_HEADER = (
    "Date,Country,Competition,HomeTeam,AwayTeam,HomeLevel,AwayLevel,"
    "HomeElo,AwayElo,HomeProbW,ProbD,AwayProbW"
)


@pytest_asyncio.fixture
async def store():
    """Fresh in-memory database per test."""
    store = Store.from_url("sqlite://")
    await store.create_tables()
    yield store
    await store.dispose()


@pytest.fixture
def rating_row():
    """Factory for a parsed rating row with overridable fields."""

    def _make(**overrides) -> dict:
        row = {
            "Rank": "1",
            "Club": "ManCity",
            "Country": "ENG",
            "Level": "1",
            "Elo": "2050.5",
            "From": "1894-01-01",
            "To": "2099-06-06",
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def fixture_row():
    """Factory for a parsed fixture row with overridable fields."""

    def _make(**overrides) -> dict:
        row = {
            "Date": "2025-11-22",
            "Country": "ENG",
            "Competition": "Premier League",
            "HomeTeam": "Arsenal",
            "AwayTeam": "Tottenham",
            "HomeLevel": "1",
            "AwayLevel": "1",
            "HomeElo": "2010.3",
            "AwayElo": "1820.7",
            "HomeProbW": "0.62",
            "ProbD": "0.22",
            "AwayProbW": "0.16",
        }
        row.update(overrides)
        return row

    return _make
