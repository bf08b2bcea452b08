"""
Meta scraper service: core business logic.

Orchestrates one scrape per request:

    validate → fetch → extract → Ok(metadata)
        │         │        │
        │         └────────┴──→ classify → Err(api_error)
        └──→ Err(400 INVALID_URL)

This layer is framework-agnostic: collaborators and the logger are
injected, and failures are returned as Err values rather than raised.
No retries happen here; the fetcher owns its own retry policy.
"""

import asyncio
import logging
import time
from typing import Optional

from app.core.exceptions import ExtractionError
from app.core.logging import get_logger
from app.domain.error_classifier import classify_error
from app.domain.models import (
    ApiError,
    Err,
    ErrorKind,
    FetchFailed,
    Invalid,
    Metadata,
    Ok,
    ScrapeResult,
)
from app.infrastructure.crawler.http_client import HttpFetcher
from app.infrastructure.extractor.html_metadata import MetadataExtractor
from app.utils.url_validator import UrlValidator


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class MetaScraperService:
    """Validates, fetches and extracts link-preview metadata for a URL."""

    def __init__(
        self,
        validator: UrlValidator,
        fetcher: HttpFetcher,
        extractor: MetadataExtractor,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._validator = validator
        self._fetcher = fetcher
        self._extractor = extractor
        self._logger = logger or get_logger(__name__)

    async def scrape(self, raw_url: object) -> ScrapeResult:
        """
        Extract metadata for a user-supplied URL.

        Args:
            raw_url: The ``url`` query value exactly as received.

        Returns:
            Ok with normalised Metadata, or Err with the classified
            ApiError (400 INVALID_URL for validation failures).
        """
        started = time.monotonic()

        # ── Validating ───────────────────────────────────────
        validation = self._validator.validate(raw_url)
        if isinstance(validation, Invalid):
            self._logger.info(
                "Validation rejected url=%r reason=%s", raw_url, validation.reason
            )
            return Err(ApiError(400, ErrorKind.INVALID_URL, validation.reason))

        url = validation.normalized_url
        self._logger.info("Starting metadata extraction url=%s", url)

        # ── Fetching ─────────────────────────────────────────
        fetched = await self._fetcher.fetch(url)
        if isinstance(fetched, FetchFailed):
            return self._fail(url, fetched, started)

        # ── Extracting ───────────────────────────────────────
        loop = asyncio.get_running_loop()
        try:
            extracted = await loop.run_in_executor(
                None, self._extractor.extract, fetched.body, fetched.final_url
            )
        except ExtractionError as exc:
            return self._fail(url, exc, started)

        metadata = Metadata(
            title=extracted.title,
            description=extracted.description,
            url=extracted.url or url,
            image=extracted.image,
        )
        self._logger.info(
            "Metadata extraction completed url=%s duration_ms=%d "
            "has_title=%s has_description=%s has_image=%s",
            url,
            _elapsed_ms(started),
            metadata.title is not None,
            metadata.description is not None,
            metadata.image is not None,
        )
        return Ok(metadata)

    def _fail(self, url: str, raw: object, started: float) -> Err:
        error = classify_error(raw)
        self._logger.error(
            "Metadata extraction failed url=%s duration_ms=%d kind=%s status=%d details=%s",
            url,
            _elapsed_ms(started),
            error.kind.value,
            error.http_status,
            error.details,
        )
        return Err(error)
