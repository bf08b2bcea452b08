"""
API response schemas.

These Pydantic models define the contract between the API layer
and external clients. They are separate from domain models to
allow the API surface to evolve independently. Every envelope
carries a boolean ``success`` field.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from app.domain.models import ApiError, ErrorKind, Metadata

INVALID_URL_ERROR = "Invalid URL"


class MetadataResponse(BaseModel):
    """Successful scrape; absent metadata fields are null, never omitted."""

    success: bool = Field(default=True, description="Always true")
    data: Metadata = Field(..., description="Extracted page metadata")


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = Field(default=False, description="Always false")
    error: str = Field(..., description="Error description")
    message: Optional[str] = Field(None, description="Additional detail")
    type: Optional[str] = Field(None, description="Error kind")
    kind: Optional[str] = Field(None, description="Error kind")
    details: Optional[str] = Field(
        None, description="Underlying error (development mode only)"
    )

    @classmethod
    def from_api_error(
        cls, api_error: ApiError, include_details: bool = False
    ) -> "ErrorResponse":
        """
        Shape a classified ApiError for the client.

        Validation failures report ``error="Invalid URL"`` with the
        reason in ``message``; classified failures report the message
        in ``error``. The underlying error is only exposed when
        ``include_details`` is set.
        """
        kind = api_error.kind.value
        if api_error.kind is ErrorKind.INVALID_URL:
            response = cls(
                error=INVALID_URL_ERROR, message=api_error.message, type=kind, kind=kind
            )
        else:
            response = cls(error=api_error.message, type=kind, kind=kind)
        if include_details:
            response.details = api_error.details
        return response

    def to_content(self) -> dict[str, Any]:
        """JSON body with unset optional keys dropped."""
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    """Service health status."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable status")
    timestamp: str = Field(..., description="Current server time (ISO-8601, UTC)")
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Runtime environment")
