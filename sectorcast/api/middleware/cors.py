"""
CORS middleware configuration.

Permissive in development (all origins), strict otherwise (configured
allowlist from ``Settings.cors_origins``).
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sectorcast.settings import get_settings


def configure_cors(app: FastAPI) -> None:
    """Add CORS middleware to the FastAPI application."""
    settings = get_settings()

    if settings.environment == "development":
        origins = ["*"]
    else:
        origins = settings.cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )
