"""
Standard API response models and helpers for consistent response formatting.

All endpoints should use these helpers to ensure consistent response envelopes:
- Success: { "success": true, "data": <payload>, "meta": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
from typing import Any, Generic, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'notfound', 'invalidtransition')")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")


class PageMeta(BaseModel):
    """Page-number pagination metadata."""
    page: int = Field(..., description="Current (clamped) page, 1-based")
    page_size: int = Field(..., alias="pageSize", description="Fixed number of items per page")
    total_pages: int = Field(..., alias="totalPages", description="Number of pages (at least 1)")
    total: int = Field(..., description="Number of items matching the filter")
    has_more: bool = Field(..., alias="hasMore", description="Whether a next page exists")


class StandardSuccessResponse(BaseModel, Generic[T]):
    """Standard success response envelope."""
    success: bool = Field(True, description="Always true for success")
    data: T = Field(..., description="Response payload")
    meta: dict[str, Any] | None = Field(default=None, description="Optional metadata (pagination, etc.)")


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload
        meta: Optional metadata (pagination, timestamps, etc.)

    Returns:
        dict: { "success": true, "data": <data>, "meta": <meta> }
    """
    response = {"success": True, "data": data}
    if meta:
        response["meta"] = meta
    return response


def paginated_response(
    items: list[Any],
    page: int,
    page_size: int,
    total_pages: int,
    total: int,
    extra_meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a standardized page-number paginated response.

    Returns:
        dict: { "success": true, "data": <items>, "meta": { "page", "pageSize", "totalPages", "total", "hasMore" } }
    """
    meta = PageMeta(
        page=page,
        pageSize=page_size,
        totalPages=total_pages,
        total=total,
        hasMore=page < total_pages,
    ).model_dump(by_alias=True)
    if extra_meta:
        meta.update(extra_meta)

    return success_response(data=items, meta=meta)
