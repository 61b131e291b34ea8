"""ClubElo rating and fixture ingestion service."""

__version__ = "1.0.0"
