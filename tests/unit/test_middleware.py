"""
Unit tests for the HTTP middleware.

Tests cover:
  - Rate limiting ceiling, headers and window reset
  - Security headers
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.middleware import RateLimitMiddleware, SecurityHeadersMiddleware


def build_app(max_requests: int = 2, window_ms: int = 60000, clock=None) -> FastAPI:
    application = FastAPI()
    extra = {"clock": clock} if clock else {}
    application.add_middleware(
        RateLimitMiddleware, window_ms=window_ms, max_requests=max_requests, **extra
    )
    application.add_middleware(SecurityHeadersMiddleware)

    @application.get("/ping")
    async def ping():
        return {"pong": True}

    return application


class TestRateLimitMiddleware:
    def test_rejects_requests_over_the_ceiling(self):
        client = TestClient(build_app(max_requests=2))

        assert client.get("/ping").status_code == 200
        second = client.get("/ping")
        assert second.status_code == 200
        assert second.headers["RateLimit-Remaining"] == "0"

        third = client.get("/ping")
        assert third.status_code == 429
        assert third.json() == {
            "success": False,
            "error": "Too many requests",
            "message": "Rate limit exceeded. Maximum 2 requests per minute allowed.",
        }
        assert "Retry-After" in third.headers
        assert third.headers["RateLimit-Limit"] == "2"

    def test_window_resets(self):
        now = [100.0]
        client = TestClient(
            build_app(max_requests=1, window_ms=1000, clock=lambda: now[0])
        )

        assert client.get("/ping").status_code == 200
        assert client.get("/ping").status_code == 429

        now[0] = 101.5
        assert client.get("/ping").status_code == 200


class TestSecurityHeadersMiddleware:
    def test_headers_added_to_every_response(self):
        client = TestClient(build_app(max_requests=1))
        client.get("/ping")

        rejected = client.get("/ping")

        assert rejected.status_code == 429
        assert rejected.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert rejected.headers["Referrer-Policy"] == "no-referrer"
        assert "frame-src 'none'" in rejected.headers["Content-Security-Policy"]
