"""
Jotter Backend: Shared Response Schemas
========================================

What:  Error, message and health payloads shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain confirmation, e.g. after DELETE /notes/{id}."""
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (validation_error, unauthorized,
               not_found, rate_limit_exceeded, internal_error)
        message: Single human-readable string the client shows inline
        details: Optional extra context (e.g. which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "not_found",
            "message": "Note not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health. Liveness only; no dependency probes."""
    status: str = Field(default="ok")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")
