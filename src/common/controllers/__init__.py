from .base import UserAwareController
from .rate_limits import RateLimitAdminController

__all__ = ["RateLimitAdminController", "UserAwareController"]
