"""
Application configuration using Pydantic Settings.

All configuration is read from environment variables (12-factor app),
with sensible defaults for local development. Values are read once at
process start and treated as read-only afterwards.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application configuration."""

    # Application
    app_name: str = Field(default="Meta Scraper API", description="Service name")
    app_version: str = Field(default="1.0.0", description="Service version")
    environment: str = Field(
        default="development",
        description="Runtime environment (development, production, ...)",
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    port: int = Field(default=8000, description="API bind port")

    # Outbound HTTP requests
    request_timeout: int = Field(
        default=10000,
        description="Timeout in milliseconds for outbound HTTP requests",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; MetaScraper/1.0)",
        description="User-Agent header sent to target websites",
    )
    max_redirects: int = Field(
        default=5,
        description="Maximum number of redirects followed per request",
    )
    retry_limit: int = Field(
        default=2,
        description="Extra attempts made for retryable fetch failures",
    )
    retry_backoff: float = Field(
        default=1.0,
        description="Initial retry delay in seconds, doubles each retry",
    )

    # URL validation
    blocked_hosts: list[str] = Field(
        default=["localhost", "127.0.0.1", "0.0.0.0", "::1"],
        description="Hostnames that may never be fetched",
    )
    blocked_host_prefixes: list[str] = Field(
        default=["192.168.", "10.", "172."],
        description="Hostname prefixes of private networks that may never be fetched",
    )

    # Rate limiting
    rate_limit_window: int = Field(
        default=60000,
        description="Rate limit window in milliseconds",
    )
    rate_limit_max: int = Field(
        default=100,
        description="Maximum requests per client within one window",
    )

    # CORS
    cors_origin: str = Field(
        default="*",
        description="Allowed CORS origin(s), comma-separated",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Application log level (DEBUG, INFO, WARNING, ERROR)",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]


# Singleton, import this throughout the app
settings = Settings()
