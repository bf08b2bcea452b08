"""
Shared test fixtures for the meta scraper test suite.

Provides:
  - Async test client for FastAPI integration tests
  - A factory for scraper services whose outbound HTTP goes to an
    httpx.MockTransport handler instead of the network
  - Sample HTML documents
"""

from typing import AsyncIterator, Callable
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.api.dependencies import get_scraper_service
from app.domain.scraper_service import MetaScraperService
from app.infrastructure.crawler.http_client import FetchOptions, HttpFetcher
from app.infrastructure.extractor.html_metadata import MetadataExtractor
from app.main import create_app
from app.utils.url_validator import UrlValidator

BLOCKED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0", "::1"]
BLOCKED_PREFIXES = ["192.168.", "10.", "172."]


@pytest.fixture
def app() -> FastAPI:
    """Provide a fresh application (fresh rate-limit counters) per test."""
    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an async HTTP test client for integration tests."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as client:
        yield client


@pytest.fixture
def validator() -> UrlValidator:
    return UrlValidator(
        blocked_hosts=BLOCKED_HOSTS,
        blocked_prefixes=BLOCKED_PREFIXES,
        logger=MagicMock(),
    )


@pytest.fixture
def fetch_options() -> FetchOptions:
    """Fast fetch policy: short timeout, no backoff delay."""
    return FetchOptions(timeout=0.5, max_redirects=5, retry_limit=2, retry_backoff=0)


@pytest.fixture
def make_service(
    validator: UrlValidator, fetch_options: FetchOptions
) -> Callable[..., MetaScraperService]:
    """
    Build a MetaScraperService whose fetcher talks to a mock handler.

    The handler receives the httpx.Request and returns an httpx.Response,
    awaits something slow, or raises an httpx exception.
    """

    def _make(handler, options: FetchOptions | None = None) -> MetaScraperService:
        return MetaScraperService(
            validator=validator,
            fetcher=HttpFetcher(
                options or fetch_options, logger=MagicMock(), transport=httpx.MockTransport(handler)
            ),
            extractor=MetadataExtractor(logger=MagicMock()),
            logger=MagicMock(),
        )

    return _make


@pytest.fixture
def use_handler(app: FastAPI, make_service):
    """Route the app's outbound fetches to the given mock handler."""

    def _use(handler, options: FetchOptions | None = None) -> None:
        service = make_service(handler, options)
        app.dependency_overrides[get_scraper_service] = lambda: service

    return _use


@pytest.fixture
def github_html() -> bytes:
    return b"<html><head><title>GitHub</title></head><body></body></html>"


@pytest.fixture
def rich_html() -> bytes:
    """A page with Open Graph tags, a relative image and a canonical link."""
    return b"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Fallback Title</title>
  <meta property="og:title" content="  Open Graph   Title ">
  <meta name="description" content="Plain description">
  <meta property="og:description" content="OG description">
  <meta property="og:image" content="/static/preview.png">
  <link rel="canonical" href="https://example.com/article">
</head>
<body><h1>Heading</h1></body>
</html>
"""
