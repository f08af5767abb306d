"""Exception handlers for the API.

Every failure is rendered as ``{"code": ..., "detail": ...}``, except eligibility
denials which return the full eligibility result.
"""

import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import Http404, HttpRequest
from ninja.errors import AuthenticationError
from ninja.responses import Response

from common.enums import ErrorCode
from common.exceptions import ServiceError
from events.service.event_manager import UserIsIneligibleError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "x-clubhub-signature"}


def _error(status: int, code: ErrorCode, detail: str, **extra: t.Any) -> Response:
    return Response(status=status, data={"code": code, "detail": detail, **extra})


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle an unexpected exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "internal_server_error",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        user=str(request.user) if getattr(request, "user", None) else None,
    )
    extra: dict[str, t.Any] = {}
    if settings.DEBUG:  # pragma: no cover
        extra["error"] = repr(exc)
    return _error(500, ErrorCode.SERVER_ERROR, "Internal Server Error.", **extra)


def handle_service_error(request: HttpRequest, exc: ServiceError | t.Type[ServiceError]) -> Response:
    """Render a service-layer error with its status and code."""
    assert isinstance(exc, ServiceError)
    logger.info("service_error", path=request.path, code=exc.code, status=exc.status_code, detail=exc.message)
    return _error(exc.status_code, exc.code, exc.message)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a model validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    assert isinstance(exc, ValidationError)
    logger.warning("validation_error", path=request.path)
    errors = exc.message_dict if hasattr(exc, "error_dict") else {"__all__": exc.messages}
    return _error(400, ErrorCode.INVALID_REQUEST, "Validation failed.", errors=errors)


def handle_user_is_ineligible_error(
    request: HttpRequest, exc: UserIsIneligibleError | t.Type[UserIsIneligibleError]
) -> Response:
    """Handle a user is-ineligible error."""
    assert isinstance(exc, UserIsIneligibleError)
    return Response(status=400, data=exc.eligibility.model_dump(mode="json"))


def handle_not_found(request: HttpRequest, exc: Http404 | t.Type[Http404]) -> Response:
    return _error(404, ErrorCode.NOT_FOUND, "Not Found.")


def handle_authentication_error(
    request: HttpRequest, exc: AuthenticationError | t.Type[AuthenticationError]
) -> Response:
    return _error(401, ErrorCode.UNAUTHORIZED, "Unauthorized.")


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
