import typing as t
from decimal import Decimal

import pytest
from django.test import override_settings

from accounts.models import User
from common.enums import ErrorCode
from common.exceptions import (
    AlreadyExistsError,
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    ResourceExhaustedError,
)
from common.models import AuditLogEntry
from events.models import RSVP, Event, Order, TicketType
from events.service.event_manager import EventManager, UserIsIneligibleError

pytestmark = pytest.mark.django_db


class TestRsvp:
    def test_rsvp_creates_confirmed_rsvp(self, user: User, free_event: Event) -> None:
        rsvp = EventManager(user, free_event.pk).rsvp()
        assert rsvp.status == RSVP.Status.CONFIRMED
        assert AuditLogEntry.objects.filter(action="event_rsvp_created", target_id=str(rsvp.pk)).exists()

    def test_second_rsvp_is_rejected_by_guard(self, user: User, free_event: Event) -> None:
        EventManager(user, free_event.pk).rsvp()
        with pytest.raises(UserIsIneligibleError) as exc_info:
            EventManager(user, free_event.pk).rsvp()
        assert exc_info.value.eligibility.code == ErrorCode.ALREADY_JOINED
        assert RSVP.objects.filter(event=free_event, user=user).count() == 1

    def test_rsvp_when_full(self, user: User, other_user: User, free_event: Event) -> None:
        free_event.capacity = 1
        free_event.save()
        EventManager(other_user, free_event.pk).rsvp()
        with pytest.raises(UserIsIneligibleError) as exc_info:
            EventManager(user, free_event.pk).rsvp()
        assert exc_info.value.eligibility.code == ErrorCode.CAPACITY_REACHED

    @override_settings(RATE_LIMITS={"rsvp": {"max_calls": 1, "period_seconds": 60, "block_seconds": 60}})
    def test_rsvp_is_rate_limited(self, user: User, free_event: Event) -> None:
        manager = EventManager(user, free_event.pk)
        manager.rsvp()
        manager.cancel_rsvp()
        with pytest.raises(ResourceExhaustedError) as exc_info:
            manager.rsvp()
        assert exc_info.value.code == ErrorCode.POLICY_CAP_HIT

    def test_cancel_rsvp(self, user: User, free_event: Event) -> None:
        manager = EventManager(user, free_event.pk)
        manager.rsvp()
        rsvp = manager.cancel_rsvp()
        assert rsvp.status == RSVP.Status.CANCELED
        assert rsvp.canceled_at is not None
        assert manager.check_eligibility().allowed

    def test_paid_event_requires_an_order(self, user: User, paid_event: Event) -> None:
        with pytest.raises(FailedPreconditionError) as exc_info:
            EventManager(user, paid_event.pk).rsvp()
        assert exc_info.value.code == ErrorCode.FAILED_PRECONDITION
        assert not RSVP.objects.filter(event=paid_event).exists()
        paid_event.refresh_from_db()
        assert paid_event.seats_taken() == 0

    def test_cancel_without_rsvp(self, user: User, free_event: Event) -> None:
        with pytest.raises(NotFoundError):
            EventManager(user, free_event.pk).cancel_rsvp()


class TestCreateOrder:
    def test_create_order(self, user: User, paid_event: Event, ticket_type: TicketType) -> None:
        created = EventManager(user, paid_event.pk).create_order(ticket_type.pk, quantity=2)

        order = Order.objects.get(pk=created.order_id)
        assert order.status == Order.Status.PENDING
        assert order.total == Decimal("40.00")
        assert created.payment_details.amount == Decimal("40.00")
        assert created.payment_details.currency == "EUR"
        assert created.payment_details.event_name == "Gala"
        assert created.payment_details.ticket_type == "general"
        assert created.payment_details.quantity == 2
        assert not order.tickets.exists()
        assert AuditLogEntry.objects.filter(action="order_created", target_id=str(order.pk)).exists()

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(
        self, user: User, paid_event: Event, ticket_type: TicketType, quantity: int
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            EventManager(user, paid_event.pk).create_order(ticket_type.pk, quantity=quantity)

    @override_settings(MAX_TICKETS_PER_ORDER=3)
    def test_quantity_is_capped(self, user: User, paid_event: Event, ticket_type: TicketType) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            EventManager(user, paid_event.pk).create_order(ticket_type.pk, quantity=4)
        assert exc_info.value.code == ErrorCode.PER_USER_LIMIT

    def test_free_events_do_not_take_orders(self, user: User, free_event: Event) -> None:
        with pytest.raises(FailedPreconditionError):
            EventManager(user, free_event.pk).create_order(None)

    def test_ticket_type_required_when_event_has_types(self, user: User, paid_event: Event) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            EventManager(user, paid_event.pk).create_order(None)
        assert exc_info.value.code == ErrorCode.INVALID_TICKET_TYPE

    def test_sold_out_ticket_type(self, user: User, paid_event: Event, ticket_type: TicketType) -> None:
        ticket_type.sold = 2
        ticket_type.save()
        with pytest.raises(UserIsIneligibleError) as exc_info:
            EventManager(user, paid_event.pk).create_order(ticket_type.pk)
        assert exc_info.value.eligibility.code == ErrorCode.SOLD_OUT

    def test_quantity_beyond_remaining_capacity(
        self, user: User, paid_event: Event, ticket_type: TicketType
    ) -> None:
        ticket_type.sold = 1
        ticket_type.save()
        with pytest.raises(ResourceExhaustedError) as exc_info:
            EventManager(user, paid_event.pk).create_order(ticket_type.pk, quantity=2)
        assert exc_info.value.code == ErrorCode.SOLD_OUT

    def test_event_capacity_applies_to_typed_orders(
        self, user: User, paid_event: Event, ticket_type: TicketType
    ) -> None:
        ticket_type.capacity = None
        ticket_type.save()
        paid_event.capacity = 2
        paid_event.tickets_sold_count = 1
        paid_event.save()

        with pytest.raises(ResourceExhaustedError) as exc_info:
            EventManager(user, paid_event.pk).create_order(ticket_type.pk, quantity=2)
        assert exc_info.value.code == ErrorCode.SOLD_OUT

        paid_event.tickets_sold_count = 2
        paid_event.save()
        with pytest.raises(UserIsIneligibleError) as ineligible:
            EventManager(user, paid_event.pk).create_order(ticket_type.pk)
        assert ineligible.value.eligibility.code == ErrorCode.SOLD_OUT

    def test_one_live_order_per_user(self, user: User, paid_event: Event, ticket_type: TicketType) -> None:
        manager = EventManager(user, paid_event.pk)
        manager.create_order(ticket_type.pk)
        with pytest.raises(UserIsIneligibleError) as exc_info:
            manager.create_order(ticket_type.pk)
        assert exc_info.value.eligibility.code == ErrorCode.ALREADY_JOINED

    def test_untyped_order_uses_event_price(self, user: User, paid_event: Event) -> None:
        paid_event.ticket_types.all().delete()
        created = EventManager(user, paid_event.pk).create_order(None, quantity=3)
        assert created.payment_details.amount == Decimal("60.00")
        assert created.payment_details.ticket_type is None

    def test_rsvp_holder_cannot_order(self, user: User, paid_event: Event, ticket_type: TicketType) -> None:
        RSVP.objects.create(event=paid_event, user=user)
        with pytest.raises(UserIsIneligibleError):
            EventManager(user, paid_event.pk).create_order(ticket_type.pk)


def test_duplicate_rsvp_refused_under_lock(user: User, free_event: Event, monkeypatch: t.Any) -> None:
    """With the guard skipped, the re-check under the event lock still refuses the duplicate."""
    RSVP.objects.create(event=free_event, user=user)
    manager = EventManager(user, free_event.pk)
    monkeypatch.setattr(manager, "check_eligibility", lambda *args, **kwargs: None)
    with pytest.raises(AlreadyExistsError):
        manager.rsvp()
    assert RSVP.objects.filter(event=free_event, user=user, status=RSVP.Status.CONFIRMED).count() == 1
