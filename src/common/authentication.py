import typing as t

import structlog
from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils import translation
from ninja_jwt.authentication import JWTAuth

logger = structlog.get_logger(__name__)


class I18nJWTAuth(JWTAuth):
    """JWT authentication that activates the user's preferred language.

    Tokens are issued by the identity provider; this class only validates them
    and resolves the caller. Error messages are then rendered in the caller's
    language.

    Usage:
        @route.get("/endpoint", auth=I18nJWTAuth())
        def my_endpoint(request):
            return {"message": str(_("Hello!"))}
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and activate the user's language preference."""
        user = super().authenticate(request, token)

        user_language = getattr(user, "language", None)
        if user_language:
            translation.activate(user_language)
            request.LANGUAGE_CODE = user_language

        return user


class OptionalAuth(I18nJWTAuth):
    """Optional JWT authentication.

    - If a JWT is present: authenticates the user as ``I18nJWTAuth`` does.
    - If not: sets request.user to AnonymousUser and continues.
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides I18nJWTAuth __call__ to provide optional auth."""
        auth_value = request.headers.get(self.header)
        if not auth_value:
            request.user = AnonymousUser()
            return request.user
        parts = auth_value.split(" ")

        if parts[0].lower() != self.openapi_scheme:
            if settings.DEBUG:
                logger.error("unexpected_auth_scheme", scheme=parts[0])
            return None
        token = " ".join(parts[1:])
        return self.authenticate(request, token)
