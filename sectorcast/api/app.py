"""
FastAPI application factory.

``create_app()`` builds the fully configured application with:
- Lifespan: logging setup, DB init/shutdown, pipeline HTTP session close
- CORS middleware
- RFC 9457 error handlers
- Versioned router at ``/api/v1``

Start with::

    uvicorn sectorcast.api.app:create_app --factory
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI

from sectorcast.api.deps import close_pipeline
from sectorcast.api.errors import register_error_handlers
from sectorcast.api.middleware.cors import configure_cors
from sectorcast.db.engine import close_db, init_db
from sectorcast.logging_config import setup_logging
from sectorcast.settings import get_settings

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown hooks.

    Startup:
      1. Configure structured logging
      2. Initialize the async database engine

    Shutdown:
      1. Close the pipeline's shared HTTP session
      2. Dispose the database engine connection pool
    """
    settings = get_settings()

    setup_logging(level=settings.log_level, json_format=settings.log_json)
    logger.info("Sectorcast API starting (env=%s)", settings.environment)

    init_db()

    yield

    logger.info("Sectorcast API shutting down")
    await close_pipeline()
    await close_db()


def create_app() -> FastAPI:
    """Build and return the configured FastAPI application.

    This is the factory function for uvicorn::

        uvicorn sectorcast.api.app:create_app --factory
    """
    app = FastAPI(
        title="Sectorcast Demand Forecast API",
        version=API_VERSION,
        description=(
            "Sector demand forecasts for Indian regions, combining tiered "
            "contextual signals with a generative model and persisting "
            "normalized predictions with derived alerts."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    configure_cors(app)

    from sectorcast.api.routes.v1.router import v1_router

    app.include_router(v1_router, prefix="/api/v1")

    return app
