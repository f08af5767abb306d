import typing as t

from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import User
from accounts.schema import ClaimsSchema
from accounts.service import claims_service
from common.service.rate_limit_service import actor_key_for


class UserAwareController(ControllerBase):
    def maybe_user(self) -> User | AnonymousUser:
        """Get the user for this request."""
        return t.cast(User | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> User:
        """Get the user for this request."""
        return t.cast(User, self.context.request.user)  # type: ignore[union-attr]

    def claims(self) -> ClaimsSchema:
        """The authorization claims attached to the caller."""
        return claims_service.get_claims(self.user())

    def client_ip(self) -> str | None:
        """Best-effort client address for anonymous rate limiting."""
        request = self.context.request  # type: ignore[union-attr]
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
        if forwarded:
            return t.cast(str, forwarded.split(",")[0].strip())
        return t.cast(str | None, request.META.get("REMOTE_ADDR"))

    def rate_limit_key(self) -> str:
        """Counter key for the caller."""
        user = self.maybe_user()
        return actor_key_for(user_id=user.pk if user.is_authenticated else None, ip_address=self.client_ip())
