import typing as t
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from clubs.models import Club
from common.models import TimeStampedModel

from .event import Event, TicketType


class OrderQuerySet(models.QuerySet["Order"]):
    def live(self) -> t.Self:
        """Orders that still hold or may still hold a seat."""
        return self.filter(status__in=Order.LIVE_STATUSES)


class Order(TimeStampedModel):
    """A paid-attendance intent."""

    class Status(models.TextChoices):
        PENDING = "pending"
        AWAITING_REVIEW = "awaiting_review"
        PAID = "paid"
        APPROVED = "approved"
        REJECTED = "rejected"

    ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
        Status.PENDING: frozenset({Status.AWAITING_REVIEW, Status.PAID}),
        Status.AWAITING_REVIEW: frozenset({Status.APPROVED, Status.REJECTED}),
        # capacity_reached at issuance time
        Status.PAID: frozenset({Status.REJECTED}),
        Status.APPROVED: frozenset(),
        Status.REJECTED: frozenset(),
    }
    LIVE_STATUSES = (Status.PENDING, Status.AWAITING_REVIEW, Status.APPROVED, Status.PAID)
    ISSUABLE_STATUSES = (Status.PAID, Status.APPROVED)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="orders")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="orders")
    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="orders")
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.PROTECT, null=True, blank=True, related_name="orders"
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    currency = models.CharField(max_length=3)
    status = models.CharField(choices=Status.choices, max_length=20, default=Status.PENDING, db_index=True)
    receipt_url = models.URLField(max_length=1024, blank=True)
    notes = models.TextField(blank=True)
    rejected_reason = models.CharField(max_length=64, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_reference = models.CharField(max_length=255, blank=True, db_index=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name="order_quantity_positive"),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} ({self.status})"

    def can_transition_to(self, status: str, current: str | None = None) -> bool:
        return status in self.ALLOWED_TRANSITIONS[current or self.status]

    def clean(self) -> None:
        """Reject status changes that move backwards through the order graph."""
        if self._state.adding:
            return
        stored = Order.objects.filter(pk=self.pk).values_list("status", flat=True).first()
        if stored and stored != self.status and not self.can_transition_to(self.status, current=stored):
            raise ValidationError({"status": f"Cannot move an order from {stored} to {self.status}."})
