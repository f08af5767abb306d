import typing as t
from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from accounts.models import User
from clubs.models import Club
from events.models import RSVP, Event, Order, Ticket, TicketType

pytestmark = pytest.mark.django_db

OrderFactory = t.Callable[..., Order]


def test_event_end_must_follow_start(club: Club) -> None:
    now = timezone.now()
    with pytest.raises(ValidationError):
        Event.objects.create(club=club, name="Backwards", start=now, end=now - timedelta(hours=1))


def test_event_rsvp_window_must_be_ordered(club: Club) -> None:
    now = timezone.now()
    with pytest.raises(ValidationError):
        Event.objects.create(
            club=club,
            name="Odd window",
            start=now + timedelta(days=2),
            end=now + timedelta(days=3),
            rsvp_open=now + timedelta(days=1),
            rsvp_close=now,
        )


def test_ticket_type_remaining(ticket_type: TicketType) -> None:
    assert ticket_type.remaining == 2
    ticket_type.sold = 2
    ticket_type.save()
    assert ticket_type.remaining == 0


def test_ticket_type_cannot_oversell(ticket_type: TicketType) -> None:
    ticket_type.sold = 3
    with pytest.raises(ValidationError):
        ticket_type.save()


def test_single_confirmed_rsvp_per_user(free_event: Event, user: User) -> None:
    RSVP.objects.create(event=free_event, user=user)
    with pytest.raises(ValidationError):
        RSVP.objects.create(event=free_event, user=user)


def test_canceled_rsvps_do_not_block(free_event: Event, user: User) -> None:
    RSVP.objects.create(event=free_event, user=user, status=RSVP.Status.CANCELED)
    RSVP.objects.create(event=free_event, user=user, status=RSVP.Status.CANCELED)
    assert RSVP.objects.create(event=free_event, user=user).status == RSVP.Status.CONFIRMED


@pytest.mark.parametrize("terminal", [Order.Status.APPROVED, Order.Status.REJECTED])
@pytest.mark.parametrize("target", [Order.Status.PENDING, Order.Status.AWAITING_REVIEW])
def test_order_never_moves_backwards(order_factory: OrderFactory, user: User, terminal: str, target: str) -> None:
    order = order_factory(user, status=terminal)
    order.status = target
    with pytest.raises(ValidationError):
        order.save()
    order.refresh_from_db()
    assert order.status == terminal


def test_order_allowed_transitions(order_factory: OrderFactory, user: User) -> None:
    order = order_factory(user)
    assert order.can_transition_to(Order.Status.AWAITING_REVIEW)
    assert order.can_transition_to(Order.Status.PAID)
    assert not order.can_transition_to(Order.Status.APPROVED)
    order.status = Order.Status.PAID
    order.save()
    assert order.can_transition_to(Order.Status.REJECTED)
    assert not order.can_transition_to(Order.Status.PENDING)


def test_used_ticket_cannot_be_reactivated(order_factory: OrderFactory, user: User, club: Club) -> None:
    order = order_factory(user, status=Order.Status.APPROVED)
    ticket = Ticket.objects.create(order=order, event=order.event, club=club, user=user, status=Ticket.Status.USED)
    ticket.status = Ticket.Status.VALID
    with pytest.raises(ValidationError):
        ticket.save()
