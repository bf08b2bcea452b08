"""
Custom application exceptions.

Centralised exception definitions for clean error handling
across all layers of the application. Fetch failures are not
exceptions: the HTTP client returns them as FetchFailed values.
"""


class MetaScraperError(Exception):
    """Base exception for the meta scraper service."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ExtractionError(MetaScraperError):
    """
    Raised when a fetched document cannot be parsed at all.

    Examples: binary content, corrupt markup the parser gives up on.
    An empty document or a missing field is never an error.
    """

    def __init__(self, url: str, reason: str = "Unknown error"):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to extract metadata from '{url}': {reason}")
