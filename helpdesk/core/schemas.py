"""Core schema definitions for standardized API responses.

Every helpdesk route answers with the same envelope::

    {"success": true, "message": "Ticket created", "data": {...}}

Failures are rendered by the handlers in ``core.exceptions`` with
``success: false`` and an ``error`` object carrying the stable error code.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope."""

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, le=100, description="Items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")

    @classmethod
    def from_query(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(total=total, page=page, limit=limit, pages=pages)


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list response with metadata."""

    success: bool = True
    message: str | None = None
    data: list[T]
    meta: PaginationMeta


def success_response(
    data: T, message: str | None = None, meta: dict[str, Any] | None = None
) -> ApiResponse[T]:
    """Create a successful API response.

    Args:
        data: The response data.
        message: Optional human-readable confirmation.
        meta: Optional metadata.

    Returns:
        ApiResponse with success=True.
    """
    return ApiResponse(success=True, message=message, data=data, meta=meta)


def paginated_response(
    data: list[T],
    total: int,
    page: int,
    limit: int,
) -> PaginatedResponse[T]:
    """Create a paginated response.

    Args:
        data: List of items for current page.
        total: Total number of items.
        page: Current page number.
        limit: Items per page.

    Returns:
        PaginatedResponse with pagination metadata.
    """
    return PaginatedResponse(
        data=data,
        meta=PaginationMeta.from_query(total, page, limit),
    )
