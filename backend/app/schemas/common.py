"""
SnippetHub Backend — Shared Response Schemas
==============================================

What:  Error, message and health response models used across routers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "conflict",
            "message": "Cannot delete tag that is in use",
            "details": {"usage_count": 3},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Plain acknowledgement for mutations that return no entity."""
    message: str


class HealthResponse(BaseModel):
    """
    Returned by GET /health for monitoring and container health checks.
    `status` is "healthy" only when the database answers `SELECT 1`.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    service: str = Field(default="SnippetHub API")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
