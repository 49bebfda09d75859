"""
Quillboard Backend: Shared Response Schemas
============================================

What:  The response envelope, page metadata and error/health models.
How:   FastAPI serializes response models by alias, so every model built on
       `CamelModel` is emitted with camelCase keys (createdAt, totalPages).

Envelope:
    success → {"success": true, "data": <payload>}
    list    → {"success": true, "data": [...], "currentPage": 1,
               "totalPages": 3, "totalCount": 25}
    failure → {"success": false, "error": "not_found", "message": "...",
               "requestId": "a1b2c3d4"}
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base for API models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[DataT]):
    """Success envelope wrapping a single payload."""

    success: bool = Field(default=True)
    data: DataT


class PageResponse(CamelModel, Generic[DataT]):
    """Success envelope for a page of results plus page metadata."""

    success: bool = Field(default=True)
    data: List[DataT]
    current_page: int = Field(description="Page that was returned (1-based)")
    total_pages: int = Field(description="ceil(totalCount / pageSize); 0 when nothing matches")
    total_count: int = Field(description="Number of records matching the filters")


class ErrorResponse(CamelModel):
    """
    Standardized error body for all API errors.

    Fields:
        success: Always false
        error: Machine-readable error code (e.g., "validation_error")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Returned by GET /health for monitoring and load balancer checks."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
