"""Order lifecycle after creation: receipts, manual review and payment confirmation."""

import typing as t
import uuid

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.translation import gettext as _
from pydantic import BaseModel

from accounts.models import User
from clubs.service.membership_service import is_officer_or_admin, require_officer_or_admin
from common.exceptions import FailedPreconditionError, InvalidArgumentError, NotFoundError, PermissionDeniedError
from common.service import audit_service
from events.models import Order

from .ticket_issuance import CAPACITY_REACHED_REASON, capacity_exhausted, issue_tickets_for_order, lock_capacity_scope

logger = structlog.get_logger(__name__)


class ReviewResult(BaseModel):
    status: str
    ticket_ids: list[uuid.UUID]


def get_order_for(order: Order, viewer: User) -> Order:
    """The owner and the club's officers may view an order."""
    if order.user_id != viewer.pk and not is_officer_or_admin(viewer, order.club_id):
        raise PermissionDeniedError(_("You don't have permission to view this order."))
    return order


def orders_for_user(user: User) -> QuerySet[Order]:
    return Order.objects.filter(user=user).select_related("event", "ticket_type")


@transaction.atomic
def attach_receipt(order: Order, user: User, receipt_url: str) -> Order:
    """Attach a payment receipt and hand the order over for review.

    Raises:
        PermissionDeniedError: If the order is not the caller's.
        FailedPreconditionError: If the order is not pending.
    """
    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.user_id != user.pk:
        raise PermissionDeniedError(_("You can only attach receipts to your own orders"))
    if order.status != Order.Status.PENDING:
        raise FailedPreconditionError(_("Cannot attach receipt to an order that is not pending"))

    order.receipt_url = receipt_url
    order.status = Order.Status.AWAITING_REVIEW
    order.save(update_fields=["receipt_url", "status", "updated_at"])
    audit_service.record(user.pk, "order_receipt_attached", "orders", order.pk, {"receipt_url": receipt_url})
    logger.info("order_receipt_attached", order_id=str(order.pk))
    return order


@transaction.atomic
def review_order(order: Order, reviewer: User, decision: str, notes: str = "") -> ReviewResult:
    """Approve or reject an order awaiting review.

    Approval issues the tickets in the same transaction. If the order no longer
    fits, it is rejected with ``capacity_reached`` instead.

    Raises:
        PermissionDeniedError: If the reviewer is neither a club officer nor an administrator.
        FailedPreconditionError: If the order is not awaiting review.
        InvalidArgumentError: If the decision is not ``approved`` or ``rejected``.
    """
    require_officer_or_admin(reviewer, order.club_id)
    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.status != Order.Status.AWAITING_REVIEW:
        raise FailedPreconditionError(_("Can only review orders with 'awaiting_review' status"))
    if decision not in (Order.Status.APPROVED, Order.Status.REJECTED):
        raise InvalidArgumentError(_("Status must be 'approved' or 'rejected'"))

    order.reviewed_by = reviewer
    order.reviewed_at = timezone.now()
    order.notes = notes
    if decision == Order.Status.APPROVED:
        event, ticket_type = lock_capacity_scope(order)
        if capacity_exhausted(event, ticket_type, order.quantity):
            logger.warning("order_review_capacity_reached", order_id=str(order.pk))
            order.status = Order.Status.REJECTED
            order.rejected_reason = CAPACITY_REACHED_REASON
        else:
            order.status = Order.Status.APPROVED
    else:
        order.status = Order.Status.REJECTED
    order.save()

    ticket_ids: list[uuid.UUID] = []
    if order.status == Order.Status.APPROVED:
        ticket_ids = issue_tickets_for_order(order.pk, actor_id=reviewer.pk).ticket_ids

    audit_service.record(
        reviewer.pk,
        f"order_{order.status}",
        "orders",
        order.pk,
        {"decision": decision, "notes": notes, "rejected_reason": order.rejected_reason, "ticket_ids": ticket_ids},
    )
    logger.info("order_reviewed", order_id=str(order.pk), decision=decision, status=order.status)
    return ReviewResult(status=order.status, ticket_ids=ticket_ids)


@transaction.atomic
def confirm_payment(order_id: uuid.UUID, reference: str = "", meta: dict[str, t.Any] | None = None) -> Order:
    """Record an external payment confirmation.

    Moves a pending order to paid. The payment-confirmed trigger then issues
    the tickets after commit. Already-paid orders are returned unchanged.

    Raises:
        NotFoundError: If the order does not exist.
        FailedPreconditionError: If the order can no longer be paid.
    """
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFoundError(_("Order not found."))
    if order.status == Order.Status.PAID:
        logger.info("payment_already_confirmed", order_id=str(order.pk))
        return order
    if not order.can_transition_to(Order.Status.PAID):
        raise FailedPreconditionError(_("This order cannot be marked as paid."))

    order.status = Order.Status.PAID
    order.paid_at = timezone.now()
    order.payment_reference = reference
    order.save(update_fields=["status", "paid_at", "payment_reference", "updated_at"])
    audit_service.record(
        audit_service.SYSTEM_PAYMENT_WEBHOOK, "order_paid", "orders", order.pk, {"reference": reference, **(meta or {})}
    )
    logger.info("payment_confirmed", order_id=str(order.pk), reference=reference)
    return order
