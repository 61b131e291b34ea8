"""Shared FastAPI dependencies and query parsing helpers."""

from datetime import date
from typing import AsyncGenerator, Optional

from fastapi import HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clubratings.database import Store


def get_store(request: Request) -> Store:
    """Store created in the application lifespan."""
    return request.app.state.store


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting a read session."""
    async with get_store(request).session() as session:
        yield session


def parse_query_date(value: Optional[str], name: str = "date") -> Optional[date]:
    """Parse an optional YYYY-MM-DD query parameter, 400 on bad input."""
    if not value:
        return None
    try:
        if len(value) != 10:
            raise ValueError(value)
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Invalid {name} format. Use YYYY-MM-DD"
        ) from None
