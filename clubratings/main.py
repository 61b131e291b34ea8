"""FastAPI application for the ClubElo rating service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from clubratings.config import get_settings
from clubratings.database import Store
from clubratings.etl import FetchExhausted, MalformedInput
from clubratings.routes.core import router as core_router
from clubratings.routes.cron import router as cron_router
from clubratings.routes.elo import router as elo_router
from clubratings.scheduler import start_scheduler, stop_scheduler
from clubratings.security import limiter

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting clubratings...")
    if settings.is_production and not settings.CRON_SECRET:
        logger.warning("CRON_SECRET not set in production - import triggers are disabled")

    store = Store.from_url(settings.DATABASE_URL)
    app.state.store = store
    if settings.AUTO_CREATE_TABLES:
        await store.create_tables()

    if settings.SCHEDULER_ENABLED:
        start_scheduler(store)

    yield

    logger.info("Shutting down...")
    stop_scheduler()
    await store.dispose()


app = FastAPI(
    title="clubratings",
    description="Club Elo ratings and fixture predictions",
    version="1.0.0",
    lifespan=lifespan,
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(FetchExhausted)
async def fetch_exhausted_handler(request: Request, exc: FetchExhausted):
    logger.error(f"Upstream fetch failed for {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": "Rating source unavailable", "detail": str(exc)})


@app.exception_handler(MalformedInput)
async def malformed_input_handler(request: Request, exc: MalformedInput):
    logger.error(f"Upstream payload unparseable for {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": "Rating source returned malformed data", "detail": str(exc)})


# Include routers
app.include_router(core_router)
app.include_router(elo_router)
app.include_router(cron_router)
