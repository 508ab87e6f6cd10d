"""
Common response models.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Typed error payload returned by every failing endpoint."""

    message: str = Field(description="Error message")
    category: str = Field(description="Error category (validation, auth, not_found, ...)")


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str
    database: str | None = None
