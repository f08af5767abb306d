"""EventManager for handling RSVP and order admission."""

import uuid
from decimal import Decimal

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.translation import gettext as _
from pydantic import BaseModel

from accounts.models import User
from common.enums import ErrorCode
from common.exceptions import (
    AlreadyExistsError,
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    ResourceExhaustedError,
)
from common.service import audit_service
from common.service.rate_limit_service import enforce_rate_limit
from events.models import RSVP, Event, Order, TicketType

from .enums import EligibilityContext, Reasons
from .service import EligibilityService
from .types import EventUserEligibility, UserIsIneligibleError

logger = structlog.get_logger(__name__)


class PaymentDetails(BaseModel):
    amount: Decimal
    currency: str
    event_name: str
    ticket_type: str | None = None
    quantity: int


class OrderCreated(BaseModel):
    order_id: uuid.UUID
    payment_details: PaymentDetails


class EventManager:
    """The Event Manager Class.

    It is responsible to handle RSVPs and orders for events, running the
    eligibility guard first and then re-checking under a row lock on the
    event so that concurrent requests cannot overbook.
    """

    def __init__(self, user: User, event_id: uuid.UUID, rate_limit_key: str | None = None) -> None:
        """Initialize the EventManager."""
        self.user = user
        self.event_id = event_id
        self.rate_limit_key = rate_limit_key or f"user:{user.pk}"

    def check_eligibility(
        self,
        context: EligibilityContext = EligibilityContext.RSVP,
        ticket_type_id: uuid.UUID | None = None,
        raise_on_false: bool = False,
    ) -> EventUserEligibility:
        """Call the eligibility check.

        Returns:
            EventUserEligibility
        Raises:
            UserIsIneligibleError if the user is not eligible for this event and raise_on_false is True
        """
        eligibility = EligibilityService(self.user, self.event_id, ticket_type_id, context).check_eligibility()
        if not eligibility.allowed and raise_on_false:
            raise UserIsIneligibleError(
                message=eligibility.message or _("You are not eligible."), eligibility=eligibility
            )
        return eligibility

    def rsvp(self) -> RSVP:
        """RSVP to a free event.

        Returns:
            The confirmed RSVP.

        Raises:
            ResourceExhaustedError: rate limited, or the event filled up meanwhile.
            FailedPreconditionError: the event is paid and needs an order instead.
            UserIsIneligibleError: the guard denied the request.
            AlreadyExistsError: a confirmed RSVP was created concurrently.
        """
        enforce_rate_limit(self.rate_limit_key, "rsvp")
        self.check_eligibility(EligibilityContext.RSVP, raise_on_false=True)

        with transaction.atomic():
            event = Event.objects.select_for_update().get(pk=self.event_id)
            if RSVP.objects.filter(event=event, user=self.user, status=RSVP.Status.CONFIRMED).exists():
                raise AlreadyExistsError(_(Reasons.ALREADY_RSVPD), code=ErrorCode.ALREADY_JOINED)
            if not event.is_free:
                raise FailedPreconditionError(_("Paid events require an order"))
            if not event.has_room_for():
                logger.warning("rsvp_capacity_reached", event_id=str(event.pk), user_id=str(self.user.pk))
                raise ResourceExhaustedError(_(Reasons.CAPACITY_REACHED), code=ErrorCode.CAPACITY_REACHED)
            try:
                with transaction.atomic():
                    rsvp = RSVP.objects.create(event=event, user=self.user, status=RSVP.Status.CONFIRMED)
            except IntegrityError:
                logger.info("rsvp_duplicate_rejected", event_id=str(event.pk), user_id=str(self.user.pk))
                raise AlreadyExistsError(_(Reasons.ALREADY_RSVPD), code=ErrorCode.ALREADY_JOINED)

        audit_service.record(self.user.pk, "event_rsvp_created", "rsvps", rsvp.pk, {"event_id": self.event_id})
        logger.info("rsvp_created", event_id=str(self.event_id), user_id=str(self.user.pk), rsvp_id=str(rsvp.pk))
        return rsvp

    @transaction.atomic
    def cancel_rsvp(self) -> RSVP:
        """Cancel the user's confirmed RSVP.

        Raises:
            NotFoundError: If there is no confirmed RSVP.
        """
        rsvp = (
            RSVP.objects.select_for_update()
            .filter(event_id=self.event_id, user=self.user, status=RSVP.Status.CONFIRMED)
            .first()
        )
        if rsvp is None:
            raise NotFoundError(_("You have not RSVP'd to this event."))
        rsvp.status = RSVP.Status.CANCELED
        rsvp.canceled_at = timezone.now()
        rsvp.save(update_fields=["status", "canceled_at", "updated_at"])
        audit_service.record(self.user.pk, "event_rsvp_canceled", "rsvps", rsvp.pk, {"event_id": self.event_id})
        logger.info("rsvp_canceled", event_id=str(self.event_id), user_id=str(self.user.pk))
        return rsvp

    def _validate_order_request(self, ticket_type_id: uuid.UUID | None, quantity: int) -> None:
        if quantity < 1:
            raise InvalidArgumentError(_("Quantity must be at least 1."))
        if quantity > settings.MAX_TICKETS_PER_ORDER:
            raise InvalidArgumentError(
                _("You can order at most %(max)s tickets at once.") % {"max": settings.MAX_TICKETS_PER_ORDER},
                code=ErrorCode.PER_USER_LIMIT,
            )
        event = Event.objects.filter(pk=self.event_id).first()
        if event is None:
            return  # reported by the guard as event_unavailable
        if event.is_free:
            raise FailedPreconditionError(_("Free events don't require orders"))
        if ticket_type_id is None and event.ticket_types.exists():
            raise InvalidArgumentError(
                _("A ticket type is required for this event."), code=ErrorCode.INVALID_TICKET_TYPE
            )

    def _assert_capacity_for(self, event: Event, ticket_type: TicketType | None, quantity: int) -> None:
        """Advisory, quantity-aware capacity check. Issuance re-checks."""
        if ticket_type is not None and ticket_type.capacity is not None:
            if ticket_type.sold + quantity > ticket_type.capacity:
                raise ResourceExhaustedError(_(Reasons.TICKET_TYPE_SOLD_OUT), code=ErrorCode.SOLD_OUT)
        if not event.has_room_for(quantity):
            raise ResourceExhaustedError(_(Reasons.EVENT_SOLD_OUT), code=ErrorCode.SOLD_OUT)

    def create_order(self, ticket_type_id: uuid.UUID | None, quantity: int = 1) -> OrderCreated:
        """Create a pending order for a paid event. No tickets are issued yet.

        Raises:
            InvalidArgumentError, FailedPreconditionError: malformed request or free event.
            ResourceExhaustedError: rate limited or not enough capacity left.
            UserIsIneligibleError: the guard denied the request.
        """
        self._validate_order_request(ticket_type_id, quantity)
        enforce_rate_limit(self.rate_limit_key, "create_order")
        self.check_eligibility(EligibilityContext.ORDER, ticket_type_id=ticket_type_id, raise_on_false=True)

        with transaction.atomic():
            event = Event.objects.select_for_update().get(pk=self.event_id)
            ticket_type = (
                TicketType.objects.select_for_update().get(pk=ticket_type_id, event=event) if ticket_type_id else None
            )
            if Order.objects.live().filter(event=event, user=self.user).exists():
                raise AlreadyExistsError(_(Reasons.ORDER_EXISTS), code=ErrorCode.ALREADY_JOINED)
            self._assert_capacity_for(event, ticket_type, quantity)

            unit_price = ticket_type.price if ticket_type else event.price
            order = Order.objects.create(
                user=self.user,
                event=event,
                club_id=event.club_id,
                ticket_type=ticket_type,
                quantity=quantity,
                unit_price=unit_price,
                total=unit_price * quantity,
                currency=event.currency or settings.DEFAULT_CURRENCY,
            )

        audit_service.record(
            self.user.pk,
            "order_created",
            "orders",
            order.pk,
            {"event_id": event.pk, "ticket_type_id": ticket_type_id, "quantity": quantity, "total": order.total},
        )
        logger.info("order_created", order_id=str(order.pk), event_id=str(event.pk), quantity=quantity)
        return OrderCreated(
            order_id=order.pk,
            payment_details=PaymentDetails(
                amount=order.total,
                currency=order.currency,
                event_name=event.name,
                ticket_type=ticket_type.name if ticket_type else None,
                quantity=quantity,
            ),
        )
