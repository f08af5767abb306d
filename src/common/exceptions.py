"""Service-layer errors.

Each class maps to one kind of failure and carries the HTTP status and the
default ``ErrorCode`` used when it is rendered by the API exception handlers.
"""

from .enums import ErrorCode


class ServiceError(Exception):
    status_code: int = 400
    default_code: ErrorCode = ErrorCode.INVALID_REQUEST

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        """Store the message and the machine-readable code."""
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class PermissionDeniedError(ServiceError):
    """The caller is authenticated but lacks the required role or relationship."""

    status_code = 403
    default_code = ErrorCode.FORBIDDEN


class NotFoundError(ServiceError):
    """The referenced record does not exist."""

    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class FailedPreconditionError(ServiceError):
    """The record exists but is in the wrong state for the requested transition."""

    status_code = 400
    default_code = ErrorCode.FAILED_PRECONDITION


class InvalidArgumentError(ServiceError):
    """Malformed input or a structurally impossible request."""

    status_code = 400
    default_code = ErrorCode.INVALID_REQUEST


class AlreadyExistsError(ServiceError):
    """An idempotency conflict."""

    status_code = 409
    default_code = ErrorCode.ALREADY_JOINED


class ResourceExhaustedError(ServiceError):
    """Capacity or quota exceeded."""

    status_code = 429
    default_code = ErrorCode.SOLD_OUT
