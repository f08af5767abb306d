"""Event creation, editing and cancellation by club officers."""

import typing as t

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import University, User
from clubs.models import Club
from clubs.service.membership_service import require_officer_or_admin
from common.exceptions import AlreadyExistsError, FailedPreconditionError, InvalidArgumentError
from common.service import audit_service
from events.models import Event, TicketType
from events.schema import EventCreateSchema, EventUpdateSchema

logger = structlog.get_logger(__name__)


def _universities(ids: list[t.Any]) -> list[University]:
    universities = list(University.objects.filter(id__in=ids))
    if len(universities) != len(set(ids)):
        raise InvalidArgumentError(_("Unknown university."))
    return universities


@transaction.atomic
def create_event(club: Club, actor: User, payload: EventCreateSchema) -> Event:
    """Create an event for a club, with its ticket types.

    Raises:
        PermissionDeniedError: If the actor is neither a club officer nor an administrator.
        FailedPreconditionError: If the club is not active.
        InvalidArgumentError: If the schedule or the ticket types are invalid.
    """
    require_officer_or_admin(actor, club.pk)
    if club.status != Club.Status.ACTIVE:
        raise FailedPreconditionError(_("Events can only be created for active clubs."))
    if payload.end <= payload.start:
        raise InvalidArgumentError(_("End must be after start."))
    names = [tt.name for tt in payload.ticket_types]
    if len(names) != len(set(names)):
        raise InvalidArgumentError(_("Ticket type names must be unique."))

    data = payload.model_dump(exclude={"ticket_types", "allowed_university_ids"})
    if data["payment_mode"] != Event.PaymentMode.FREE and not data["currency"]:
        data["currency"] = settings.DEFAULT_CURRENCY
    event = Event.objects.create(club=club, created_by=actor, **data)
    event.allowed_universities.set(_universities(payload.allowed_university_ids))
    TicketType.objects.bulk_create(
        [TicketType(event=event, sold=0, **tt.model_dump()) for tt in payload.ticket_types]
    )

    audit_service.record(
        actor.pk, "event_created", "events", event.pk, {"club_id": club.pk, "ticket_types": names}
    )
    logger.info("event_created", event_id=str(event.pk), club_id=str(club.pk))
    return event


@transaction.atomic
def update_event(event: Event, actor: User, payload: EventUpdateSchema) -> Event:
    """Apply a partial update. Only the fields sent by the client change."""
    require_officer_or_admin(actor, event.club_id)
    event = Event.objects.select_for_update().get(pk=event.pk)
    if event.status != Event.Status.ACTIVE:
        raise FailedPreconditionError(_("Only active events can be edited."))

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidArgumentError(_("Nothing to update."))
    for field, value in changes.items():
        setattr(event, field, value)
    if event.end <= event.start:
        raise InvalidArgumentError(_("End must be after start."))
    event.save()

    audit_service.record(actor.pk, "event_updated", "events", event.pk, {"fields": sorted(changes)})
    logger.info("event_updated", event_id=str(event.pk), fields=sorted(changes))
    return event


@transaction.atomic
def cancel_event(event: Event, actor: User, reason: str = "") -> Event:
    """Cancel an event. Existing tickets stay but no further admissions are possible.

    Raises:
        AlreadyExistsError: If the event is already canceled.
    """
    require_officer_or_admin(actor, event.club_id)
    event = Event.objects.select_for_update().get(pk=event.pk)
    if event.status == Event.Status.CANCELED:
        raise AlreadyExistsError(_("This event is already canceled."))
    event.status = Event.Status.CANCELED
    event.canceled_at = timezone.now()
    event.cancel_reason = reason
    event.save()

    audit_service.record(actor.pk, "event_canceled", "events", event.pk, {"reason": reason})
    logger.info("event_canceled", event_id=str(event.pk))
    return event
