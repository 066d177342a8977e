"""
Quotely API — Shared Response Schemas
======================================

What:  Envelope pieces used by several route modules.
Why:   Every success body carries `success: true`; every error body is
       `{success: false, error, request_id}`.
"""

from typing import Optional

from pydantic import BaseModel, Field

from quotely.store import total_pages


class Pagination(BaseModel):
    """
    Offset pagination block.

    pages is ceil(total / limit): 45 rows at limit 20 is 3 pages.
    """
    page: int = Field(description="1-indexed page number")
    limit: int = Field(description="Page size")
    total: int = Field(description="Exact number of rows matching the filters")
    pages: int = Field(description="Total number of pages")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=total_pages(total, limit))


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error body returned by every exception handler."""
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error message")
    request_id: Optional[str] = Field(default=None, description="Correlation ID (also in X-Request-ID)")


class RootResponse(BaseModel):
    message: str
    version: str


class HealthResponse(BaseModel):
    """
    What:  Service health snapshot.
    Who:   Docker health checks and uptime monitors.

    status is "healthy" when the store answers a ping, else "unhealthy".
    """
    status: str = Field(description="healthy | unhealthy")
    version: str = Field(description="API version")
    store: str = Field(description="Store backend status: connected | disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
