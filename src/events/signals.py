"""Payment-confirmed trigger."""

import typing as t

import structlog
from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from events.models import Order
from events.tasks import issue_tickets_for_paid_order

logger = structlog.get_logger(__name__)


@receiver(pre_save, sender=Order)
def capture_order_old_status(sender: type[Order], instance: Order, **kwargs: t.Any) -> None:
    instance._old_status = (  # type: ignore[attr-defined]
        Order.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


@receiver(post_save, sender=Order)
def handle_order_paid(sender: type[Order], instance: Order, created: bool, **kwargs: t.Any) -> None:
    """Issue tickets after commit once an order becomes paid."""
    old_status = getattr(instance, "_old_status", None)
    if instance.status != Order.Status.PAID or old_status == Order.Status.PAID:
        return
    order_id = str(instance.pk)
    logger.info("order_paid_issuance_scheduled", order_id=order_id, old_status=old_status)
    transaction.on_commit(lambda: issue_tickets_for_paid_order.delay(order_id))
