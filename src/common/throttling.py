"""Request throttles.

Each class only names a scope; the rate for every scope comes from
``NINJA_EXTRA["THROTTLE_RATES"]`` in ``clubhub.settings.ninja``. Writes and
webhooks get their own scopes so they are counted apart from reads.
"""

from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    scope = "anon"


class UserDefaultThrottle(UserRateThrottle):
    scope = "user"


class WriteThrottle(UserRateThrottle):
    scope = "write"


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"
