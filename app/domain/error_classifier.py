"""
Error classification.

Maps raw fetch and extraction failures onto the stable, client-facing
ErrorKind taxonomy. Rules are evaluated in order and the first match
wins, so a transport failure always outranks any HTTP status that may
also be attached.
"""

from typing import Union

from app.domain.models import ApiError, ErrorKind, FailureCode, FetchFailed

CONNECTION_FAILURE_CODES = {FailureCode.DNS_FAILURE, FailureCode.CONNECTION_REFUSED}


def classify_error(raw: Union[FetchFailed, BaseException]) -> ApiError:
    """
    Classify a failure into an ApiError.

    Args:
        raw: A FetchFailed from the HTTP client, or any exception raised
            later in the pipeline (e.g. ExtractionError).

    Returns:
        The ApiError carrying the HTTP status, kind and message to
        report. The raw failure is kept on ``original`` for logging.
    """
    if isinstance(raw, FetchFailed):
        error_code = raw.error_code
        status = raw.http_status
    else:
        error_code = None
        status = None

    if error_code in CONNECTION_FAILURE_CODES:
        return ApiError(
            404, ErrorKind.CONNECTION_ERROR, "Unable to connect to the provided URL", raw
        )

    if error_code == FailureCode.TIMEOUT:
        return ApiError(
            408,
            ErrorKind.TIMEOUT_ERROR,
            "Request timeout - the website took too long to respond",
            raw,
        )

    if status == 403:
        return ApiError(
            403,
            ErrorKind.ACCESS_DENIED,
            "Access forbidden - the website blocked our request",
            raw,
        )

    if status == 404:
        return ApiError(404, ErrorKind.NOT_FOUND, "Page not found", raw)

    if status is not None and 400 <= status < 500:
        return ApiError(
            400, ErrorKind.CLIENT_ERROR, f"Website returned {status} status code", raw
        )

    if status is not None and status >= 500:
        return ApiError(
            502,
            ErrorKind.SERVER_ERROR,
            "The target website is experiencing server issues",
            raw,
        )

    return ApiError(500, ErrorKind.UNKNOWN_ERROR, "Failed to scrape metadata", raw)
