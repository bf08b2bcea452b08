"""
API routes for the meta scraper.

Defines the scraping endpoint, the health check and the static
service descriptor. Uses FastAPI dependency injection for clean
separation from business logic.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.dependencies import get_scraper_service
from app.api.schemas import ErrorResponse, HealthResponse, MetadataResponse
from app.core.config import settings
from app.domain.models import Err
from app.domain.scraper_service import MetaScraperService

router = APIRouter(tags=["Meta Scraper"])

AVAILABLE_ENDPOINTS = "Available endpoints: GET /, GET /meta-scraper, GET /health"


@router.get(
    "/meta-scraper",
    response_model=MetadataResponse,
    summary="Extract metadata from a URL",
    description=(
        "Fetches the given page and returns its title, description, "
        "canonical URL and preview image. Fields that cannot be "
        "determined are null."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL or remote 4xx"},
        403: {"model": ErrorResponse, "description": "Remote denied access"},
        404: {"model": ErrorResponse, "description": "Unreachable host or page not found"},
        408: {"model": ErrorResponse, "description": "Remote timed out"},
        500: {"model": ErrorResponse, "description": "Scraping failed"},
        502: {"model": ErrorResponse, "description": "Remote server error"},
    },
)
async def scrape_metadata(
    url: Optional[str] = Query(
        None,
        description="The URL to scrape (required)",
        examples=["https://github.com"],
    ),
    service: MetaScraperService = Depends(get_scraper_service),
):
    """GET /meta-scraper?url=...: extract link-preview metadata."""
    result = await service.scrape(url)

    if isinstance(result, Err):
        body = ErrorResponse.from_api_error(
            result.error, include_details=settings.is_development
        )
        return JSONResponse(
            status_code=result.error.http_status, content=body.to_content()
        )

    return MetadataResponse(data=result.metadata)


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """Return service health status."""
    return HealthResponse(
        message="Meta Scraper API is running",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get("/", summary="API documentation")
async def describe_service() -> dict:
    """Return the static service descriptor."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Extract metadata from web pages",
        "endpoints": {
            "GET /meta-scraper": {
                "description": "Extract metadata from a URL",
                "parameters": {"url": "The URL to scrape (required)"},
                "example": "/meta-scraper?url=https://example.com",
            },
            "GET /health": {"description": "Check API health status"},
        },
        "usage": {
            "example_request": "GET /meta-scraper?url=https://github.com",
            "example_response": {
                "success": True,
                "data": {
                    "title": "GitHub: Let's build from here",
                    "description": (
                        "GitHub is where over 100 million developers shape "
                        "the future of software, together."
                    ),
                    "url": "https://github.com",
                    "image": (
                        "https://github.githubassets.com/images/modules/site/"
                        "social-cards/github-social.png"
                    ),
                },
            },
        },
        "rateLimit": {
            "requests": settings.rate_limit_max,
            "window": f"{settings.rate_limit_window // 1000} seconds",
        },
    }
