"""
HTTP middleware.

  - SecurityHeadersMiddleware: conservative security headers on every response
  - RateLimitMiddleware: fixed-window, per-client request ceiling (in memory)
  - RequestLoggingMiddleware: one log line per completed request
"""

import math
import time
from typing import Callable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.logging import get_logger

logger = get_logger(__name__)

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "style-src 'self' 'unsafe-inline'",
        "script-src 'self'",
        "img-src 'self' data: https:",
        "connect-src 'self'",
        "font-src 'self'",
        "object-src 'none'",
        "media-src 'self'",
        "frame-src 'none'",
    ]
)

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window rate limiter keyed by client address.

    Counters live in process memory, so the ceiling applies per worker
    process. Every response carries RateLimit-* headers; rejected
    requests get 429 with a Retry-After header.
    """

    def __init__(
        self,
        app: ASGIApp,
        window_ms: int,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)
        self._clock = clock
        self.window = window_ms / 1000
        self.max_requests = max_requests
        # client → (window start, request count)
        self._windows: dict[str, tuple[float, int]] = {}

    def _hit(self, client: str, now: float) -> tuple[int, float]:
        """Record a request; return (count in window, window start)."""
        started, count = self._windows.get(client, (now, 0))
        if now - started >= self.window:
            started, count = now, 0
        count += 1
        self._windows[client] = (started, count)
        return count, started

    def _prune(self, now: float) -> None:
        expired = [
            client
            for client, (started, _) in self._windows.items()
            if now - started >= self.window
        ]
        for client in expired:
            del self._windows[client]

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        now = self._clock()
        if len(self._windows) > 10_000:
            self._prune(now)

        client = client_address(request)
        count, started = self._hit(client, now)
        reset = max(0, math.ceil(started + self.window - now))
        remaining = max(0, self.max_requests - count)

        if count > self.max_requests:
            logger.warning(
                "Rate limit exceeded ip=%s user_agent=%s url=%s",
                client,
                request.headers.get("user-agent"),
                request.url.path,
            )
            response: Response = JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "error": "Too many requests",
                    "message": (
                        f"Rate limit exceeded. Maximum {self.max_requests} "
                        "requests per minute allowed."
                    ),
                },
                headers={"Retry-After": str(reset)},
            )
        else:
            response = await call_next(request)

        response.headers["RateLimit-Limit"] = str(self.max_requests)
        response.headers["RateLimit-Remaining"] = str(remaining)
        response.headers["RateLimit-Reset"] = str(reset)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.monotonic()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            return response
        finally:
            logger.info(
                "Request completed method=%s url=%s status=%s duration_ms=%d "
                "ip=%s user_agent=%s",
                request.method,
                request.url.path,
                response.status_code if response is not None else 500,
                int((time.monotonic() - started) * 1000),
                client_address(request),
                request.headers.get("user-agent"),
            )
