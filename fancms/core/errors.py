"""
Domain errors raised by the store, repositories and request handlers.
Each error carries a stable machine-checkable code and an HTTP status.
"""

from typing import Optional


class FanCMSError(Exception):
    """Base class for errors that become structured failure responses."""

    error_type = "ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(FanCMSError):
    error_type = "NOT_FOUND"
    status_code = 404


class ConflictError(FanCMSError):
    error_type = "CONFLICT"
    status_code = 409


class PermissionDeniedError(FanCMSError):
    error_type = "PERMISSION_DENIED"
    status_code = 403


class UnauthorizedError(FanCMSError):
    error_type = "UNAUTHORIZED"
    status_code = 401


class ValidationFailedError(FanCMSError):
    error_type = "VALIDATION_ERROR"
    status_code = 400


class MalformedDocumentError(FanCMSError):
    """A JSON document could not be parsed or does not hold the expected records."""

    error_type = "MALFORMED_DOCUMENT"
    status_code = 500

    def __init__(self, path: str, reason: str):
        super().__init__(f"Malformed document {path}: {reason}")
        self.path = path
        self.reason = reason


class RateLimitedError(FanCMSError):
    error_type = "RATE_LIMITED"
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after
