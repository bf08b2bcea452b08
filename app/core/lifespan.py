"""
FastAPI application lifespan management.

The service holds no long-lived resources (no database, no shared
HTTP client), so start-up only configures logging and announces the
running configuration. Signal handling belongs to uvicorn.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import settings
from app.core.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    # ── Startup ──────────────────────────────────────────────
    setup_logging()
    logger.info(
        "Server started port=%d environment=%s version=%s",
        settings.port,
        settings.environment,
        settings.app_version,
    )
    if settings.is_development:
        logger.info(
            "Example usage: http://localhost:%d/meta-scraper?url=https://github.com",
            settings.port,
        )

    yield

    # ── Shutdown ─────────────────────────────────────────────
    logger.info("Shutting down meta scraper...")
