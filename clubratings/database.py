"""Async database access using SQLAlchemy (supports SQLite and PostgreSQL)."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Register tables on SQLModel.metadata
from clubratings import models  # noqa: F401

logger = logging.getLogger(__name__)


def get_database_url(url: str) -> str:
    """Convert database URL to async format."""
    # SQLite
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    # PostgreSQL
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def create_engine_for_url(url: str) -> AsyncEngine:
    """Build an async engine with pool settings for the target backend."""
    database_url = get_database_url(url)

    engine_kwargs: dict[str, Any] = {
        "echo": False,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
        engine_kwargs["pool_recycle"] = 300
        engine_kwargs["pool_timeout"] = 30
        engine_kwargs["pool_reset_on_return"] = "rollback"
        # Kill queries running longer than 60s
        engine_kwargs["connect_args"] = {
            "server_settings": {"statement_timeout": "60000"}
        }

    return create_async_engine(database_url, **engine_kwargs)


def insert_for(dialect_name: str, table):
    """Return an INSERT construct that supports ON CONFLICT DO UPDATE."""
    if dialect_name == "postgresql":
        return pg_insert(table)
    if dialect_name == "sqlite":
        return sqlite_insert(table)
    raise NotImplementedError(f"Upsert not supported for dialect {dialect_name!r}")


class Store:
    """Transactional store handle passed explicitly to importers and routes.

    Exposes the two capabilities the ingestion core needs:
    ``query(sql, params)`` for plain reads and ``transaction()`` for a
    session scoped to exactly one transaction.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, url: str) -> "Store":
        return cls(create_engine_for_url(url))

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def query(self, sql: str, params: Optional[dict] = None) -> list[dict]:
        """Run a read query and return rows as dicts."""
        async with self.session_factory() as session:
            result = await session.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Plain session for read paths (no commit)."""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Session scoped to one transaction.

        Commits when the block exits normally; rolls back and re-raises on
        any exception. The connection goes back to the pool on every path.

        Example:
            async with store.transaction() as session:
                await session.execute(...)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create tables that do not exist yet."""
        logger.info("Initializing database tables...")
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables ready.")

    async def ping(self) -> bool:
        try:
            await self.query("SELECT 1")
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close database connections."""
        logger.info("Closing database connections...")
        await self.engine.dispose()

    def pool_status(self) -> dict:
        """Get current connection pool statistics for monitoring."""
        if self.dialect_name == "sqlite":
            return {"type": "sqlite", "pooled": False}

        pool = self.engine.pool
        return {
            "type": self.dialect_name,
            "pool_size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }
