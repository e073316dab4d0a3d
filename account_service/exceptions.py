"""
Error taxonomy for the account service.

Every failure the core can produce is one of the classes below. Each carries
the HTTP status it is rendered with, so the exception handler in `main.py`
can translate any of them without knowing which invariant failed.
"""

from fastapi import status


class AccountServiceError(Exception):
    """Base class for all errors surfaced to API clients."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidCredential(AccountServiceError):
    """The token is malformed, tampered with, or expired."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid or expired token"


class Unauthenticated(AccountServiceError):
    """No valid principal could be resolved for the request."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class Forbidden(AccountServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action"


class Conflict(AccountServiceError):
    """A username, email or phone number is already claimed by another account."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Username, email or phone number already exists"


class NotFound(AccountServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ValidationError(AccountServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid input"


class StoreUnavailable(AccountServiceError):
    """A database call failed. Not retried here; the caller may try again."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage is temporarily unavailable"
