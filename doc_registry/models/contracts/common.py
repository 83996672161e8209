"""
Common response models.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    code: str
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = "healthy"
    version: str = "1.0.0"
    environment: str | None = None
    database: str | None = None


class SuccessResponse(BaseModel):
    """Acknowledgement for lifecycle operations."""

    success: bool = True
