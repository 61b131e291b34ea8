"""ETL module for ClubElo extraction, normalization, and loading."""

from clubratings.etl.base import FixtureRecord, ImportStats, RatingRecord
from clubratings.etl.clubelo_client import ClubEloClient
from clubratings.etl.errors import (
    FetchExhausted,
    MalformedInput,
    PersistenceFailure,
    RowValidationFailure,
)
from clubratings.etl.loader import UpsertCoordinator
from clubratings.etl.pipeline import ClubEloPipeline, create_pipeline

__all__ = [
    "ClubEloClient",
    "ClubEloPipeline",
    "create_pipeline",
    "FetchExhausted",
    "FixtureRecord",
    "ImportStats",
    "MalformedInput",
    "PersistenceFailure",
    "RatingRecord",
    "RowValidationFailure",
    "UpsertCoordinator",
]
