from ninja import Query, Schema
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.permissions import IsSuperAdmin
from common.service import rate_limit_service

from .base import UserAwareController


class RateLimitResetFilter(Schema):
    actor_key: str
    action: str | None = None


class RateLimitResetResponse(Schema):
    deleted: int


@api_controller("/admin/rate-limits", auth=I18nJWTAuth(), permissions=[IsSuperAdmin()], tags=["Admin"])
class RateLimitAdminController(UserAwareController):
    @route.delete("/", url_name="reset_rate_limit", response={200: RateLimitResetResponse})
    def reset_rate_limit(self, filters: Query[RateLimitResetFilter]) -> RateLimitResetResponse:
        """Clear the rate-limit counters of a user (``user:<id>``) or address (``ip:<addr>``).

        Optionally restrict the reset to a single action.
        """
        deleted = rate_limit_service.reset_rate_limit(filters.actor_key, filters.action)
        return RateLimitResetResponse(deleted=deleted)
