"""
MeetSpace Backend: Shared Response Schemas
============================================

What:  Response bodies that are not tied to one resource: errors, plain
       acknowledgements and the health report.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Body of every error response, rendered by the global exception handlers.

    `details` is only present for 400 responses.
    """
    error: str = Field(description="Machine-readable error code, e.g. 'not_found'")
    message: str = Field(description="Human-readable description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Field-level details")
    request_id: str = Field(default="", description="Correlation id, also in X-Request-ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = Field(description="healthy, degraded or unhealthy")
    version: str
    document_store: str = Field(description="Backend name and reachability, e.g. 'firestore:ok'")
    identity_provider: str = Field(description="available or unavailable")
    uptime_seconds: float
