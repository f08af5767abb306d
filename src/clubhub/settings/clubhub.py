"""Domain settings: orders, tickets and rate limits."""

from decouple import config

from .base import SECRET_KEY

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="USD")
MAX_TICKETS_PER_ORDER = config("MAX_TICKETS_PER_ORDER", default=10, cast=int)

TICKET_QR_SECRET = config("TICKET_QR_SECRET", default=SECRET_KEY)
PAYMENT_WEBHOOK_SECRET = config("PAYMENT_WEBHOOK_SECRET", default="")


def _rate_limit(action: str, max_calls: int, period_seconds: int, block_seconds: int) -> dict[str, int]:
    prefix = f"RATE_LIMIT_{action.upper()}"
    return {
        "max_calls": config(f"{prefix}_MAX_CALLS", default=max_calls, cast=int),
        "period_seconds": config(f"{prefix}_PERIOD_SECONDS", default=period_seconds, cast=int),
        "block_seconds": config(f"{prefix}_BLOCK_SECONDS", default=block_seconds, cast=int),
    }


# Per-action limits for the shared counter store (common.RateLimitCounter).
RATE_LIMITS = {
    "rsvp": _rate_limit("rsvp", max_calls=10, period_seconds=60, block_seconds=300),
    "create_order": _rate_limit("create_order", max_calls=5, period_seconds=60, block_seconds=600),
    "attach_receipt": _rate_limit("attach_receipt", max_calls=5, period_seconds=300, block_seconds=900),
    "request_membership": _rate_limit("request_membership", max_calls=5, period_seconds=300, block_seconds=900),
    "check_in": _rate_limit("check_in", max_calls=120, period_seconds=60, block_seconds=60),
}
