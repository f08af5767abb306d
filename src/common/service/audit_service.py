"""Append-only audit trail.

``record`` is best-effort: a failed write is logged and swallowed so it never
fails (or rolls back) the operation being audited. ``record_in_transaction``
is for callers that need the entry to commit or roll back together with their
own writes.
"""

import typing as t
from uuid import UUID

import structlog
from django.db import DatabaseError, transaction

from common.models import AuditLogEntry

logger = structlog.get_logger(__name__)

SYSTEM_MEMBERSHIP_CHANGE = "system_onMembershipChange"
SYSTEM_ORDER_PAID = "system_onOrderStatusPaid"
SYSTEM_CLUB_APPROVAL = "system_onClubApproval"
SYSTEM_PAYMENT_WEBHOOK = "system_paymentWebhook"


def _to_json(value: t.Any) -> t.Any:
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_json(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def record_in_transaction(
    actor_id: str | UUID,
    action: str,
    target_collection: str,
    target_id: str | UUID,
    meta: dict[str, t.Any] | None = None,
) -> AuditLogEntry:
    """Write an audit entry as part of the caller's transaction."""
    return AuditLogEntry.objects.create(
        actor_id=str(actor_id),
        action=action,
        target_collection=target_collection,
        target_id=str(target_id),
        meta=_to_json(meta or {}),
    )


def record(
    actor_id: str | UUID,
    action: str,
    target_collection: str,
    target_id: str | UUID,
    meta: dict[str, t.Any] | None = None,
) -> AuditLogEntry | None:
    """Write an audit entry without ever failing the caller.

    The insert runs in its own savepoint so a database error does not poison
    an enclosing transaction.
    """
    try:
        with transaction.atomic():
            entry = record_in_transaction(actor_id, action, target_collection, target_id, meta)
    except (DatabaseError, TypeError, ValueError):
        logger.exception(
            "audit_log_write_failed",
            actor_id=str(actor_id),
            action=action,
            target_collection=target_collection,
            target_id=str(target_id),
        )
        return None
    logger.debug("audit_log_written", action=action, target_collection=target_collection, target_id=str(target_id))
    return entry
