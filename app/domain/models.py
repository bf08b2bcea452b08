"""
Domain models: pure data structures for the meta scraper.

These models have no framework dependencies and represent the values
passed between the validator, fetcher, extractor, classifier and
orchestrator. None of them outlives a single request.

Outcomes that can fail are tagged unions of small frozen dataclasses,
so callers branch with isinstance() instead of catching exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Stable, client-facing failure categories."""

    INVALID_URL = "INVALID_URL"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    ACCESS_DENIED = "ACCESS_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CLIENT_ERROR = "CLIENT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FailureCode(str, Enum):
    """Transport-level failure codes reported by the HTTP client."""

    DNS_FAILURE = "DNS_FAILURE"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    TIMEOUT = "TIMEOUT"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


# ── URL validation ───────────────────────────────────────────


@dataclass(frozen=True)
class Valid:
    normalized_url: str


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationResult = Union[Valid, Invalid]


# ── Remote fetch ─────────────────────────────────────────────


@dataclass(frozen=True)
class Fetched:
    """Successful fetch: the URL after redirects and the raw body."""

    final_url: str
    body: bytes
    status_code: int = 200


@dataclass(frozen=True)
class FetchFailed:
    """
    Terminal fetch failure.

    Transport failures carry an ``error_code``; non-2xx responses carry
    the remote ``http_status``. ``original`` keeps the underlying
    exception for diagnostic logging only.
    """

    message: str
    error_code: Optional[FailureCode] = None
    http_status: Optional[int] = None
    original: Optional[BaseException] = None


FetchOutcome = Union[Fetched, FetchFailed]


# ── Extraction ───────────────────────────────────────────────


class Metadata(BaseModel):
    """
    Link-preview metadata for a single page.

    Every field is always present in serialized output; a value that
    could not be determined is ``None`` (JSON ``null``).
    """

    title: Optional[str] = Field(None, description="Page title")
    description: Optional[str] = Field(None, description="Page description")
    url: Optional[str] = Field(None, description="Canonical page URL")
    image: Optional[str] = Field(None, description="Preview image URL")


# ── Errors and results ───────────────────────────────────────


@dataclass(frozen=True)
class ApiError:
    """Classified failure, ready to be shaped into an HTTP response."""

    http_status: int
    kind: ErrorKind
    message: str
    original: Optional[Union[BaseException, FetchFailed]] = None

    @property
    def details(self) -> Optional[str]:
        """Diagnostic text of the underlying failure, if any."""
        if self.original is None:
            return None
        if isinstance(self.original, FetchFailed):
            return self.original.message
        return str(self.original) or type(self.original).__name__


@dataclass(frozen=True)
class Ok:
    metadata: Metadata


@dataclass(frozen=True)
class Err:
    error: ApiError


ScrapeResult = Union[Ok, Err]
