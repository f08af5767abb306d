import typing as t

import pytest

from accounts.models import User
from events.models import Order

pytestmark = pytest.mark.django_db


def test_transition_into_paid_schedules_issuance(
    user: User, order_factory: t.Callable[..., Order], django_capture_on_commit_callbacks: t.Any
) -> None:
    order = order_factory(user, quantity=2)
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        order.status = Order.Status.PAID
        order.save()

    assert len(callbacks) == 1
    assert order.tickets.count() == 2


def test_other_transitions_do_not_schedule(
    user: User, order_factory: t.Callable[..., Order], django_capture_on_commit_callbacks: t.Any
) -> None:
    order = order_factory(user)
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        order.status = Order.Status.AWAITING_REVIEW
        order.save()
        order.notes = "looked at it"
        order.save()

    assert callbacks == []


def test_saving_a_paid_order_again_does_not_reschedule(
    user: User, order_factory: t.Callable[..., Order], django_capture_on_commit_callbacks: t.Any
) -> None:
    order = order_factory(user)
    with django_capture_on_commit_callbacks(execute=True):
        order.status = Order.Status.PAID
        order.save()
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        order.notes = "paid by bank transfer"
        order.save()

    assert callbacks == []
    assert order.tickets.count() == 1
