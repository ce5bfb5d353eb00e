"""
Scrol Backend — Shared Schemas
===============================

What:  Message, error and health models shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable success message")


class ErrorResponse(BaseModel):
    """
    What:  The one error envelope used by every failing response.

    Example:
        {
            "error": "Users do not exist",
            "code": "candidate_not_found",
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Human-readable error description")
    code: Optional[str] = Field(default=None, description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    blob_store: str = Field(description="Blob store: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
