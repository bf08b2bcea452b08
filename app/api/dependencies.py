"""
FastAPI dependency injection.

Provides shared instances for use across API endpoints,
ensuring consistent lifecycle management and testability.
"""

from app.domain.scraper_service import MetaScraperService
from app.infrastructure.crawler.http_client import FetchOptions, HttpFetcher
from app.infrastructure.extractor.html_metadata import MetadataExtractor
from app.utils.url_validator import UrlValidator


def get_scraper_service() -> MetaScraperService:
    """
    Provide a MetaScraperService wired from process configuration.

    Registered as a FastAPI dependency so tests can swap in a
    service with a stubbed transport via ``dependency_overrides``.
    """
    return MetaScraperService(
        validator=UrlValidator.from_settings(),
        fetcher=HttpFetcher(FetchOptions.from_settings()),
        extractor=MetadataExtractor(),
    )
