"""Ticket viewing, signed QR payloads and check-in."""

import uuid

import orjson
import structlog
from django.utils import timezone
from django.utils.translation import gettext as _
from pydantic import BaseModel

from accounts.models import User
from clubs.service.membership_service import is_officer_or_admin, require_officer_or_admin
from common import signing
from common.exceptions import FailedPreconditionError, InvalidArgumentError, PermissionDeniedError
from common.service import audit_service
from events.models import Event, Ticket

logger = structlog.get_logger(__name__)


class CheckInResult(BaseModel):
    attendee_id: uuid.UUID
    ticket_type: str | None = None


def _ticket_info(ticket: Ticket) -> dict[str, str]:
    return {
        "ticket_id": str(ticket.pk),
        "event_id": str(ticket.event_id),
        "user_id": str(ticket.user_id),
        "timestamp": ticket.created_at.isoformat(),
    }


def build_qr_data(ticket: Ticket) -> str:
    """The signed JSON string encoded into the ticket's QR code."""
    info = _ticket_info(ticket)
    return orjson.dumps({**info, "signature": signing.sign_payload(info)}).decode()


def verify_qr_data(qr_data: str) -> uuid.UUID | None:
    """Return the ticket id of a genuine QR payload, or None."""
    try:
        payload = orjson.loads(qr_data)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    signature = payload.pop("signature", None)
    if not isinstance(signature, str) or not signing.verify_payload(payload, signature):
        return None
    try:
        return uuid.UUID(str(payload.get("ticket_id")))
    except ValueError:
        return None


def get_ticket(ticket: Ticket, viewer: User) -> tuple[Ticket, str]:
    """Return the ticket and its QR payload.

    Raises:
        PermissionDeniedError: Unless the viewer owns the ticket or manages the club.
    """
    if ticket.user_id != viewer.pk and not is_officer_or_admin(viewer, ticket.club_id):
        raise PermissionDeniedError(_("You don't have permission to view this ticket"))
    audit_service.record(viewer.pk, "ticket_viewed", "tickets", ticket.pk, {"event_id": ticket.event_id})
    return ticket, build_qr_data(ticket)


def check_in_ticket(ticket: Ticket, checker: User, qr_data: str | None = None) -> CheckInResult:
    """Check in an attendee by scanning their ticket.

    A ticket is checked in at most once; concurrent scans of the same ticket
    race on a conditional update and only one of them wins.

    Raises:
        PermissionDeniedError: If the checker is neither a club officer nor an administrator.
        InvalidArgumentError: If a scanned QR payload does not match the ticket.
        FailedPreconditionError: If the ticket was already used or the event is not running.
    """
    require_officer_or_admin(checker, ticket.club_id)
    if qr_data is not None and verify_qr_data(qr_data) != ticket.pk:
        raise InvalidArgumentError(_("Ticket is not valid for this event"))
    if ticket.status == Ticket.Status.USED:
        raise FailedPreconditionError(_("This ticket has already been checked in."))

    event = Event.objects.get(pk=ticket.event_id)
    if event.status != Event.Status.ACTIVE:
        raise FailedPreconditionError(_("Event is not active"))
    if event.has_ended():
        raise FailedPreconditionError(_("Event has already ended"))

    now = timezone.now()
    updated = Ticket.objects.filter(pk=ticket.pk, status=Ticket.Status.VALID).update(
        status=Ticket.Status.USED, checked_in_at=now, checked_in_by=checker, updated_at=now
    )
    if not updated:
        raise FailedPreconditionError(_("This ticket has already been checked in."))

    audit_service.record(checker.pk, "ticket_checked_in", "tickets", ticket.pk, {"event_id": event.pk})
    logger.info("ticket_checked_in", ticket_id=str(ticket.pk), event_id=str(event.pk), checker_id=str(checker.pk))
    return CheckInResult(
        attendee_id=ticket.user_id, ticket_type=ticket.ticket_type.name if ticket.ticket_type else None
    )
