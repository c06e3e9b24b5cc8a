"""
Custom exception hierarchy for the application.
"""

from typing import Any

from fastapi import HTTPException, status


class OnlyTrackException(Exception):
    """Base exception for all application exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(OnlyTrackException):
    """Raised when authentication fails."""
    pass


class AuthorizationError(OnlyTrackException):
    """Raised when user lacks permissions."""
    pass


class ResourceNotFoundError(OnlyTrackException):
    """Raised when a requested resource doesn't exist."""
    pass


class ValidationError(OnlyTrackException):
    """Raised when input validation fails."""
    pass


class BillingError(OnlyTrackException):
    """Raised when the payment provider rejects a request."""
    pass


# HTTP Exception helpers
def unauthorized(detail: str | dict[str, Any] = "Not authenticated") -> HTTPException:
    """Return 401 Unauthorized exception."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
    )


def forbidden(detail: str | dict[str, Any] = "Insufficient permissions") -> HTTPException:
    """Return 403 Forbidden exception."""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )


def not_found(detail: str = "Resource not found") -> HTTPException:
    """Return 404 Not Found exception."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def bad_request(detail: str | dict[str, Any] = "Bad request") -> HTTPException:
    """Return 400 Bad Request exception."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )
