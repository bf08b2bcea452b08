"""
HTTP client for fetching target pages.

Uses httpx.AsyncClient for non-blocking HTTP requests with
redirect following, a hard per-attempt timeout, bounded retries
and classified failures.

Failures are returned as FetchFailed values rather than raised:
  - transport failures carry a FailureCode (DNS, refused, timeout, ...)
  - non-2xx terminal responses carry the remote HTTP status
"""

import asyncio
import logging
import socket
import time
from dataclasses import dataclass
from typing import Iterator, Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.models import FailureCode, Fetched, FetchFailed, FetchOutcome

# HTTP status codes worth another attempt
RETRYABLE_STATUS_CODES = {408, 413, 429, 500, 502, 503, 504, 521, 522, 524}

# Transport failures worth another attempt
RETRYABLE_FAILURE_CODES = {
    FailureCode.DNS_FAILURE,
    FailureCode.CONNECTION_REFUSED,
    FailureCode.TIMEOUT,
    FailureCode.TRANSPORT_ERROR,
}

# Substrings of resolver errors as reported by the various platforms
DNS_ERROR_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "no address associated",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "name does not resolve",
)

REFUSED_ERROR_MARKERS = ("connection refused", "actively refused")

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class FetchOptions:
    """Outbound request policy."""

    timeout: float = 10.0
    max_redirects: int = 5
    user_agent: str = "Mozilla/5.0 (compatible; MetaScraper/1.0)"
    retry_limit: int = 2
    retry_backoff: float = 1.0

    @classmethod
    def from_settings(cls) -> "FetchOptions":
        return cls(
            timeout=settings.request_timeout / 1000,
            max_redirects=settings.max_redirects,
            user_agent=settings.user_agent,
            retry_limit=settings.retry_limit,
            retry_backoff=settings.retry_backoff,
        )


class HttpFetcher:
    """Fetches a single page and reports the outcome as a FetchOutcome."""

    def __init__(
        self,
        options: Optional[FetchOptions] = None,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._options = options or FetchOptions.from_settings()
        self._logger = logger or get_logger(__name__)
        self._transport = transport

    @property
    def options(self) -> FetchOptions:
        return self._options

    async def fetch(self, url: str) -> FetchOutcome:
        """
        Fetch a URL, following redirects and retrying transient failures.

        Args:
            url: The validated, normalised URL to fetch.

        Returns:
            Fetched with the final URL and body bytes, or FetchFailed.
        """
        options = self._options
        max_attempts = options.retry_limit + 1
        started = time.monotonic()

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(options.timeout),
            follow_redirects=True,
            max_redirects=options.max_redirects,
            headers={
                "User-Agent": options.user_agent,
                "Accept": ACCEPT_HEADER,
                "Accept-Language": "en-US,en;q=0.5",
            },
            transport=self._transport,
        ) as client:
            self._logger.info("Fetching url=%s", url)
            attempt = 1
            while True:
                outcome = await self._attempt(client, url)
                if isinstance(outcome, Fetched) or attempt >= max_attempts \
                        or not self.is_retryable(outcome):
                    break

                delay = options.retry_backoff * (2 ** (attempt - 1))
                self._logger.warning(
                    "Fetch attempt %d/%d failed url=%s error=%s. Retrying in %.1fs...",
                    attempt,
                    max_attempts,
                    url,
                    outcome.message,
                    delay,
                )
                if delay > 0:
                    await asyncio.sleep(delay)
                attempt += 1

        duration_ms = int((time.monotonic() - started) * 1000)
        if isinstance(outcome, Fetched):
            self._logger.info(
                "Fetched url=%s final_url=%s status=%d size=%d attempts=%d duration_ms=%d",
                url,
                outcome.final_url,
                outcome.status_code,
                len(outcome.body),
                attempt,
                duration_ms,
            )
        else:
            self._logger.warning(
                "Fetch failed url=%s error_code=%s http_status=%s attempts=%d "
                "duration_ms=%d: %s",
                url,
                outcome.error_code.value if outcome.error_code else None,
                outcome.http_status,
                attempt,
                duration_ms,
                outcome.message,
            )
        return outcome

    @staticmethod
    def is_retryable(failure: FetchFailed) -> bool:
        if failure.error_code is not None:
            return failure.error_code in RETRYABLE_FAILURE_CODES
        return failure.http_status in RETRYABLE_STATUS_CODES

    async def _attempt(self, client: httpx.AsyncClient, url: str) -> FetchOutcome:
        """Perform a single GET and classify its result."""
        timeout = self._options.timeout
        try:
            response = await asyncio.wait_for(client.get(url), timeout=timeout)

        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            return FetchFailed(
                f"Request timed out after {timeout:g}s",
                error_code=FailureCode.TIMEOUT,
                original=exc,
            )

        except httpx.TooManyRedirects as exc:
            return FetchFailed(
                f"Too many redirects (max {self._options.max_redirects})",
                error_code=FailureCode.TOO_MANY_REDIRECTS,
                original=exc,
            )

        except httpx.ConnectError as exc:
            if is_dns_failure(exc):
                return FetchFailed(
                    f"DNS resolution failed: {exc}",
                    error_code=FailureCode.DNS_FAILURE,
                    original=exc,
                )
            if is_tls_failure(exc):
                return FetchFailed(
                    f"TLS handshake failed: {exc}",
                    error_code=FailureCode.TRANSPORT_ERROR,
                    original=exc,
                )
            if is_connection_refused(exc):
                return FetchFailed(
                    f"Connection failed: {exc}",
                    error_code=FailureCode.CONNECTION_REFUSED,
                    original=exc,
                )
            # Unreachable network or host, reset during connect
            return FetchFailed(
                f"Connection failed: {exc}",
                error_code=FailureCode.TRANSPORT_ERROR,
                original=exc,
            )

        except httpx.HTTPError as exc:
            return FetchFailed(
                str(exc) or type(exc).__name__,
                error_code=FailureCode.TRANSPORT_ERROR,
                original=exc,
            )

        if not response.is_success:
            return FetchFailed(
                f"HTTP {response.status_code}",
                http_status=response.status_code,
            )

        return Fetched(
            final_url=str(response.url),
            body=response.content,
            status_code=response.status_code,
        )


def _causes(exc: BaseException) -> Iterator[BaseException]:
    cause = exc.__cause__ or exc.__context__
    while cause is not None:
        yield cause
        cause = cause.__cause__ or cause.__context__


def is_dns_failure(exc: BaseException) -> bool:
    """Return True if a connect error was caused by hostname resolution."""
    if any(isinstance(cause, socket.gaierror) for cause in _causes(exc)):
        return True
    error_str = str(exc).lower()
    return any(marker in error_str for marker in DNS_ERROR_MARKERS)


def is_tls_failure(exc: BaseException) -> bool:
    error_str = str(exc).lower()
    return "ssl" in error_str or "certificate" in error_str


def is_connection_refused(exc: BaseException) -> bool:
    """Return True if the target host actively refused the connection."""
    if any(isinstance(cause, ConnectionRefusedError) for cause in _causes(exc)):
        return True
    error_str = str(exc).lower()
    return any(marker in error_str for marker in REFUSED_ERROR_MARKERS)
