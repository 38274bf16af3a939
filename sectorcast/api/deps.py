"""
FastAPI dependency injection providers.

Thin wrappers that adapt internal infrastructure (database sessions,
settings, the assembled forecast pipeline) into FastAPI-compatible
``Depends()`` callables. Keep this module free of business logic -- it's
pure plumbing.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from sectorcast.db.engine import get_async_session, get_session_factory
from sectorcast.pipeline import Pipeline, build_pipeline
from sectorcast.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Module-level singleton -- lazy-initialized on first access.
_pipeline: Pipeline | None = None


def get_pipeline() -> Pipeline:
    """Return the forecast ``Pipeline`` singleton, building it on first call."""
    global _pipeline  # noqa: PLW0603
    if _pipeline is None:
        _pipeline = build_pipeline(get_settings(), get_session_factory())
    return _pipeline


async def close_pipeline() -> None:
    """Close the pipeline's HTTP sessions (call from app lifespan shutdown)."""
    global _pipeline  # noqa: PLW0603
    if _pipeline is not None:
        await _pipeline.aclose()
        _pipeline = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session with automatic commit/rollback.

    Usage::

        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async for session in get_async_session():
        yield session


def get_current_settings() -> Settings:
    """Return the cached settings singleton."""
    return get_settings()
