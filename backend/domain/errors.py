"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handler
in main.py, which renders them as { "ok": false, "error": <message> }.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Validation error (400)."""
    def __init__(self, message: str = "BAD_INPUT", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    def __init__(self, message: str = "UNAUTHORIZED", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class UpstreamError(DomainError):
    """Upstream (Stripe / WooCommerce) call failed (500)."""
    def __init__(self, message: str = "FAILED", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
