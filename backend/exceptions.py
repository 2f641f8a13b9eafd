"""
Custom exception classes for order service operations.
"""


class OrderServiceError(Exception):
    """Base class for failures talking to the external order service."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OrderServiceUnavailableError(OrderServiceError):
    """Raised on transport errors or 5xx/429 responses once retries are exhausted."""
    pass


class OrderServiceAuthError(OrderServiceError):
    """Raised when the order service rejects or is missing the bearer credential."""
    pass


class OrderServiceRejectedError(OrderServiceError):
    """Raised when the order service answers but refuses the request (success: false or 4xx)."""
    pass
