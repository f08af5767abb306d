"""Capacity-checked ticket issuance for paid or approved orders.

The capacity check, the ticket inserts, the sold-counter increments and
the audit entry commit together or not at all. Rows are locked in a fixed
order (order, event, ticket type) so concurrent issuances for the same
event serialize instead of deadlocking.
"""

import uuid

import structlog
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext as _
from pydantic import BaseModel

from common.enums import ErrorCode
from common.exceptions import FailedPreconditionError, NotFoundError, ResourceExhaustedError
from common.service import audit_service
from events.models import Event, Order, Ticket, TicketType

logger = structlog.get_logger(__name__)

CAPACITY_REACHED_REASON = "capacity_reached"


class IssuanceResult(BaseModel):
    order_id: uuid.UUID
    status: str
    ticket_ids: list[uuid.UUID]
    created: bool


def capacity_exhausted(event: Event, ticket_type: TicketType | None, quantity: int) -> bool:
    """Whether issuing ``quantity`` more tickets would exceed the ticket type or the event capacity.

    Callers must hold row locks on the event and ticket type.
    """
    if ticket_type is not None and ticket_type.capacity is not None:
        if ticket_type.sold + quantity > ticket_type.capacity:
            return True
    return not event.has_room_for(quantity)


def lock_capacity_scope(order: Order) -> tuple[Event, TicketType | None]:
    """Lock and return the event and ticket type an order draws from."""
    event = Event.objects.select_for_update().get(pk=order.event_id)
    ticket_type = (
        TicketType.objects.select_for_update().get(pk=order.ticket_type_id) if order.ticket_type_id else None
    )
    return event, ticket_type


@transaction.atomic
def issue_tickets_for_order(
    order_id: uuid.UUID, actor_id: str | uuid.UUID = audit_service.SYSTEM_ORDER_PAID
) -> IssuanceResult:
    """Issue one ticket per unit of a paid or approved order, exactly once.

    Re-running for an order that already has tickets returns them unchanged.
    If a paid order no longer fits, it is rejected with ``capacity_reached``
    and no tickets are issued.

    Raises:
        NotFoundError: If the order does not exist.
        FailedPreconditionError: If the order is neither paid nor approved.
        ResourceExhaustedError: If an approved order no longer fits. Nothing is written.
    """
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFoundError(_("Order not found."))

    existing = list(Ticket.objects.filter(order=order).values_list("id", flat=True))
    if existing:
        logger.info("tickets_already_issued", order_id=str(order.pk), count=len(existing))
        return IssuanceResult(order_id=order.pk, status=order.status, ticket_ids=existing, created=False)

    if order.status not in Order.ISSUABLE_STATUSES:
        raise FailedPreconditionError(_("Tickets can only be issued for paid or approved orders."))

    event, ticket_type = lock_capacity_scope(order)
    if capacity_exhausted(event, ticket_type, order.quantity):
        logger.warning(
            "ticket_issuance_capacity_reached",
            order_id=str(order.pk),
            event_id=str(event.pk),
            ticket_type_id=str(order.ticket_type_id) if order.ticket_type_id else None,
            quantity=order.quantity,
        )
        if not order.can_transition_to(Order.Status.REJECTED):
            raise ResourceExhaustedError(_("Event has reached capacity"), code=ErrorCode.CAPACITY_REACHED)
        order.status = Order.Status.REJECTED
        order.rejected_reason = CAPACITY_REACHED_REASON
        order.reviewed_at = timezone.now()
        order.save(update_fields=["status", "rejected_reason", "reviewed_at", "updated_at"])
        audit_service.record_in_transaction(
            actor_id, "order_rejected", "orders", order.pk, {"reason": CAPACITY_REACHED_REASON}
        )
        return IssuanceResult(order_id=order.pk, status=order.status, ticket_ids=[], created=False)

    tickets = Ticket.objects.bulk_create(
        [
            Ticket(order=order, event=event, club_id=order.club_id, user_id=order.user_id, ticket_type=ticket_type)
            for _unit in range(order.quantity)
        ]
    )
    if ticket_type is not None:
        TicketType.objects.filter(pk=ticket_type.pk).update(sold=F("sold") + order.quantity)
    Event.objects.filter(pk=event.pk).update(tickets_sold_count=F("tickets_sold_count") + order.quantity)

    ticket_ids = [ticket.pk for ticket in tickets]
    audit_service.record_in_transaction(
        actor_id,
        "ticket_issued",
        "orders",
        order.pk,
        {
            "event_id": event.pk,
            "user_id": order.user_id,
            "ticket_type_id": order.ticket_type_id,
            "quantity": order.quantity,
            "ticket_ids": ticket_ids,
        },
    )
    logger.info("tickets_issued", order_id=str(order.pk), event_id=str(event.pk), quantity=order.quantity)
    return IssuanceResult(order_id=order.pk, status=order.status, ticket_ids=ticket_ids, created=True)
