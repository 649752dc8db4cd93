"""
Error taxonomy for the session core.

Every AppError carries the HTTP status and the short message returned to the
caller; api/errors.py turns them into the uniform JSON envelope.
"""
from __future__ import annotations


class AppError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


# refresh flow
class MissingToken(AppError):
    status = 400
    code = "MISSING_TOKEN"
    message = "Refresh token is required"


class UnknownToken(AppError):
    status = 403
    code = "UNKNOWN_TOKEN"
    message = "Invalid refresh token"


class InvalidToken(AppError):
    status = 403
    code = "INVALID_TOKEN"
    message = "Invalid refresh token"


# access / ownership
class Unauthenticated(AppError):
    status = 401
    code = "UNAUTHENTICATED"
    message = "Access token required"


class Unauthorized(AppError):
    status = 403
    code = "FORBIDDEN"
    message = "Invalid or expired token"


class NotFound(AppError):
    status = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class StorageFailure(AppError):
    status = 500
    code = "STORAGE_FAILURE"
    message = "Storage operation failed"


class StorageError(Exception):
    """Raised by the storage layer; wraps the underlying engine error."""


class StorageConflict(StorageError):
    """A write hit a unique constraint."""
