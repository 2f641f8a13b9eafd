"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the global exception handler
in main.py.
"""
from fastapi import HTTPException, status

from exceptions import (
    OrderServiceAuthError,
    OrderServiceError,
    OrderServiceRejectedError,
)


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ValidationError(DomainError):
    """Validation error (400)."""
    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvalidTransitionError(ValidationError):
    """Status change not allowed from the order's current status (400)."""
    def __init__(self, current: str, target: str, allowed: list[str]):
        super().__init__(
            f"Cannot move order from '{current}' to '{target}'",
            details={"current": current, "target": target, "allowed": allowed},
        )


class PaymentLockedError(ValidationError):
    """Payment toggled on a cancelled order (400)."""
    def __init__(self, order_id: str):
        super().__init__(
            "Payment cannot be changed on a cancelled order",
            details={"orderId": order_id},
        )


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class ConflictError(DomainError):
    """Resource conflict (409)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


class MutationInFlightError(ConflictError):
    """Another status/payment change for the same order has not finished (409)."""
    def __init__(self, order_id: str):
        super().__init__(
            f"An update for order {order_id} is already in progress",
            details={"orderId": order_id},
        )


class UpstreamError(DomainError):
    """Order service failure (502)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


def to_domain_error(exc: OrderServiceError) -> DomainError:
    """Translate an order service client failure into the matching domain error."""
    details = {"upstreamStatus": exc.status_code} if exc.status_code else None
    if isinstance(exc, OrderServiceAuthError):
        return UnauthorizedError(exc.message, details=details)
    if isinstance(exc, OrderServiceRejectedError):
        return UpstreamError(exc.message, details=details)
    return UpstreamError(f"Order service unavailable: {exc.message}", details=details)
