"""Core routes: health."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from clubratings.routes.deps import get_store
from clubratings.security import limiter

router = APIRouter(tags=["core"])


class HealthResponse(BaseModel):
    status: str
    database: bool


@router.get("/health", response_model=HealthResponse)
@limiter.limit("120/minute")
async def health_check(request: Request):
    """Health check endpoint."""
    database_ok = await get_store(request).ping()
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        database=database_ok,
    )
