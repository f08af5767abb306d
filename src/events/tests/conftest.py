import typing as t
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from accounts.models import User
from clubs.models import Club
from events.models import Event, Order, TicketType


@pytest.fixture
def free_event(club: Club) -> Event:
    """A public free event starting tomorrow, without a capacity."""
    now = timezone.now()
    return Event.objects.create(
        club=club, name="Open Night", start=now + timedelta(days=1), end=now + timedelta(days=1, hours=3)
    )


@pytest.fixture
def paid_event(club: Club) -> Event:
    """An externally paid event with a single ticket type of capacity 2."""
    now = timezone.now()
    event = Event.objects.create(
        club=club,
        name="Gala",
        start=now + timedelta(days=7),
        end=now + timedelta(days=7, hours=4),
        payment_mode=Event.PaymentMode.EXTERNAL,
        price=Decimal("20.00"),
        currency="EUR",
    )
    TicketType.objects.create(event=event, name="general", price=Decimal("20.00"), capacity=2)
    return event


@pytest.fixture
def ticket_type(paid_event: Event) -> TicketType:
    return paid_event.ticket_types.get(name="general")


@pytest.fixture
def order_factory(paid_event: Event, ticket_type: TicketType) -> t.Callable[..., Order]:
    """Create orders directly, bypassing the admission checks."""

    def make(user: User, status: str = Order.Status.PENDING, quantity: int = 1, **kwargs: t.Any) -> Order:
        kwargs.setdefault("ticket_type", ticket_type)
        event = kwargs.pop("event", paid_event)
        unit_price = kwargs["ticket_type"].price if kwargs["ticket_type"] else event.price
        return Order.objects.create(
            user=user,
            event=event,
            club_id=event.club_id,
            quantity=quantity,
            unit_price=unit_price,
            total=unit_price * quantity,
            currency=event.currency,
            status=status,
            **kwargs,
        )

    return make
