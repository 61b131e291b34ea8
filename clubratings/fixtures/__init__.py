"""Fixture read side."""

from clubratings.fixtures.repository import search_fixtures

__all__ = ["search_fixtures"]
