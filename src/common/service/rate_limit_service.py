"""Rate limiting backed by a shared, expiring counter per actor and action.

Counters live in the database (``RateLimitCounter``) so every worker process
sees the same state and limits survive restarts. Each check locks the counter
row for the duration of the transaction.
"""

from datetime import datetime, timedelta
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext as _
from pydantic import BaseModel

from common.enums import ErrorCode
from common.exceptions import InvalidArgumentError, ResourceExhaustedError
from common.models import RateLimitCounter

logger = structlog.get_logger(__name__)


class RateLimitRule(BaseModel):
    max_calls: int
    period_seconds: int
    block_seconds: int


class RateLimitDecision(BaseModel):
    allowed: bool
    reason: str | None = None
    reset_at: datetime | None = None


def get_rule(action: str) -> RateLimitRule | None:
    """Return the configured rule for an action, if any."""
    raw = settings.RATE_LIMITS.get(action)
    return RateLimitRule.model_validate(raw) if raw else None


def actor_key_for(user_id: UUID | str | None = None, ip_address: str | None = None) -> str:
    """Build the counter key, preferring the user id over the IP address."""
    if user_id:
        return f"user:{user_id}"
    return f"ip:{ip_address or 'unknown'}"


def _restart_window(counter: RateLimitCounter, now: datetime) -> None:
    counter.count = 1
    counter.window_started_at = now
    counter.last_request_at = now
    counter.blocked_until = None
    counter.save(update_fields=["count", "window_started_at", "last_request_at", "blocked_until", "updated_at"])


@transaction.atomic
def check_rate_limit(actor_key: str, action: str) -> RateLimitDecision:
    """Count one request and decide whether it may proceed."""
    rule = get_rule(action)
    if rule is None:
        return RateLimitDecision(allowed=True)

    now = timezone.now()
    counter, created = RateLimitCounter.objects.select_for_update().get_or_create(
        actor_key=actor_key,
        action=action,
        defaults={"count": 1, "window_started_at": now, "last_request_at": now},
    )
    if created:
        return RateLimitDecision(allowed=True)

    if counter.blocked_until is not None:
        if now < counter.blocked_until:
            return RateLimitDecision(allowed=False, reason=_("Rate limit exceeded"), reset_at=counter.blocked_until)
        _restart_window(counter, now)
        return RateLimitDecision(allowed=True)

    if counter.window_started_at < now - timedelta(seconds=rule.period_seconds):
        _restart_window(counter, now)
        return RateLimitDecision(allowed=True)

    if counter.count >= rule.max_calls:
        counter.blocked_until = now + timedelta(seconds=rule.block_seconds)
        counter.last_request_at = now
        counter.save(update_fields=["blocked_until", "last_request_at", "updated_at"])
        logger.warning("rate_limit_blocked", actor_key=actor_key, action=action, blocked_until=counter.blocked_until)
        return RateLimitDecision(allowed=False, reason=_("Rate limit exceeded"), reset_at=counter.blocked_until)

    counter.count += 1
    counter.last_request_at = now
    counter.save(update_fields=["count", "last_request_at", "updated_at"])
    return RateLimitDecision(allowed=True)


def enforce_rate_limit(actor_key: str, action: str) -> None:
    """Raise if the actor has exceeded the limit for this action."""
    decision = check_rate_limit(actor_key, action)
    if not decision.allowed:
        logger.info("rate_limit_exceeded", actor_key=actor_key, action=action, reset_at=decision.reset_at)
        raise ResourceExhaustedError(
            decision.reason or _("Rate limit exceeded"),
            code=ErrorCode.POLICY_CAP_HIT,
        )


def reset_rate_limit(actor_key: str, action: str | None = None) -> int:
    """Delete the counters of an actor, optionally for a single action.

    Returns:
        The number of counters removed.
    """
    if not actor_key:
        raise InvalidArgumentError(_("An actor key must be provided."))
    qs = RateLimitCounter.objects.filter(actor_key=actor_key)
    if action:
        qs = qs.filter(action=action)
    deleted, _details = qs.delete()
    logger.info("rate_limit_reset", actor_key=actor_key, action=action, deleted=deleted)
    return deleted


def purge_expired_counters(now: datetime | None = None) -> int:
    """Remove counters whose window and block have both elapsed."""
    now = now or timezone.now()
    not_blocked = Q(blocked_until__isnull=True) | Q(blocked_until__lt=now)
    deleted = 0
    for action in settings.RATE_LIMITS:
        rule = get_rule(action)
        if rule is None:
            continue
        window_cutoff = now - timedelta(seconds=rule.period_seconds)
        count, _details = (
            RateLimitCounter.objects.filter(action=action, window_started_at__lt=window_cutoff)
            .filter(not_blocked)
            .delete()
        )
        deleted += count
    # Counters for actions that are no longer configured.
    count, _details = (
        RateLimitCounter.objects.exclude(action__in=list(settings.RATE_LIMITS))
        .filter(not_blocked, last_request_at__lt=now - timedelta(days=1))
        .delete()
    )
    return deleted + count
