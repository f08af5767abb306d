from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import Http404, HttpRequest
from ninja.errors import AuthenticationError
from ninja_extra import NinjaExtraAPI

from accounts.controllers.account import AccountController
from clubs.controllers import ApprovalController, ClubController, MembershipController
from common.controllers import RateLimitAdminController
from common.exceptions import ServiceError
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers import (
    ClubEventController,
    EventController,
    OrderController,
    PaymentWebhookController,
    TicketController,
)
from events.service.event_manager import UserIsIneligibleError

from .exception_handlers import (
    handle_authentication_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_not_found,
    handle_service_error,
    handle_user_is_ineligible_error,
)

api = NinjaExtraAPI(
    title="ClubHub API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"ClubHub API {settings.VERSION}",
    app_name=f"clubhub-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    # Account controllers
    AccountController,
    # Club controllers
    ClubController,
    MembershipController,
    ApprovalController,
    # Event controllers
    ClubEventController,
    EventController,
    OrderController,
    TicketController,
    PaymentWebhookController,
    # Admin controllers
    RateLimitAdminController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ServiceError: handle_service_error,
    ValidationError: handle_django_validation_error,
    UserIsIneligibleError: handle_user_is_ineligible_error,
    Http404: handle_not_found,
    AuthenticationError: handle_authentication_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
