"""
FastAPI application entrypoint.

Creates and configures the FastAPI application with:
  - Lifespan management (logging)
  - Security headers, rate limiting, CORS and request logging middleware
  - API router registration
  - JSON exception handlers for unknown routes and unhandled errors
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import AVAILABLE_ENDPOINTS, router as scraper_router
from app.core.config import settings
from app.core.lifespan import lifespan
from app.core.logging import get_logger
from app.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    client_address,
)

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Application factory: creates and configures the FastAPI instance."""

    application = FastAPI(
        title=settings.app_name,
        description=(
            "Extracts link-preview metadata (title, description, canonical "
            "URL and preview image) from web pages."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Middleware (last added runs first) ───────────────────
    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )
    application.add_middleware(
        RateLimitMiddleware,
        window_ms=settings.rate_limit_window,
        max_requests=settings.rate_limit_max,
    )
    application.add_middleware(SecurityHeadersMiddleware)

    # ── Routes ───────────────────────────────────────────────
    application.include_router(scraper_router)

    # ── Exception Handlers ───────────────────────────────────
    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Wrap framework HTTP errors (unknown routes, bad methods) in the JSON envelope."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            logger.warning(
                "404 - Route not found url=%s method=%s ip=%s",
                request.url.path,
                request.method,
                client_address(request),
            )
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={
                    "success": False,
                    "error": "Endpoint not found",
                    "message": AVAILABLE_ENDPOINTS,
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Invalid request",
                "message": "; ".join(error["msg"] for error in exc.errors()),
            },
        )

    @application.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Catch-all handler to prevent stack traces from leaking to clients."""
        logger.error(
            "Unhandled error url=%s method=%s ip=%s",
            request.url.path,
            request.method,
            client_address(request),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "message": str(exc) if settings.is_development else "Something went wrong",
            },
        )

    return application


# Create the app instance, referenced by uvicorn as app.main:app
app = create_app()


def run() -> None:
    """Console entrypoint: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
