from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from storefront_favorites.settings import get_settings

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Return the async SQLAlchemy URL of the session database."""

    return get_settings().resolved_database_url


def create_engine(url: str | None = None) -> AsyncEngine:
    """Create the async engine used to read OAuth sessions.

    Session lookups are a single indexed read per request, so the pool stays
    small; ``pool_pre_ping`` guards against connections dropped by the
    database between requests.
    """

    url = url or get_database_url()
    if url.startswith("sqlite"):
        return create_async_engine(url, future=True, echo=False)

    return create_async_engine(
        url,
        future=True,
        echo=False,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_timeout=30,
    )


def create_session_factory(engine: AsyncEngine) -> sessionmaker[AsyncSession]:
    return sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# Global engine/session instances for FastAPI dependency injection
_engine: AsyncEngine | None = None
_session_factory: sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> sessionmaker[AsyncSession]:
    """Lazily create a session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections; called from the application lifespan."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Session database engine disposed")
    _engine = None
    _session_factory = None


@asynccontextmanager
async def get_async_session_context() -> AsyncIterator[AsyncSession]:
    """
    Async context manager for scripts/CLI tasks that need manual session control.
    """
    async with get_session_factory()() as session:
        yield session
