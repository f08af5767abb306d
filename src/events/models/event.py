import typing as t
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from accounts.models import University
from clubs.models import Club
from common.models import TimeStampedModel


class EventQuerySet(models.QuerySet["Event"]):
    def active(self) -> t.Self:
        return self.filter(status=Event.Status.ACTIVE)

    def upcoming(self) -> t.Self:
        return self.active().filter(end__gt=timezone.now())


class Event(TimeStampedModel):
    class Visibility(models.TextChoices):
        PUBLIC = "public"
        CAMPUS = "campus"
        MEMBERS = "members"

    class Status(models.TextChoices):
        ACTIVE = "active"
        CANCELED = "canceled"
        ARCHIVED = "archived"

    class PaymentMode(models.TextChoices):
        FREE = "free"
        EXTERNAL = "external"
        MANAGED = "managed"

    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="events")
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    visibility = models.CharField(choices=Visibility.choices, max_length=10, default=Visibility.PUBLIC)
    allowed_universities = models.ManyToManyField(University, related_name="restricted_events", blank=True)
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.ACTIVE, db_index=True)
    start = models.DateTimeField()
    end = models.DateTimeField()
    rsvp_open = models.DateTimeField(null=True, blank=True)
    rsvp_close = models.DateTimeField(null=True, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True, help_text="Leave empty for unlimited")
    tickets_sold_count = models.PositiveIntegerField(default=0)
    payment_mode = models.CharField(choices=PaymentMode.choices, max_length=10, default=PaymentMode.FREE)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    currency = models.CharField(max_length=3, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_events"
    )
    canceled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["start"]
        constraints = [
            models.CheckConstraint(condition=Q(end__gt=F("start")), name="event_end_after_start"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        """Validate the schedule and the RSVP window."""
        if self.start and self.end and self.end <= self.start:
            raise ValidationError({"end": "End must be after start."})
        if self.rsvp_open and self.rsvp_close and self.rsvp_close <= self.rsvp_open:
            raise ValidationError({"rsvp_close": "The RSVP window must close after it opens."})

    @property
    def is_free(self) -> bool:
        return self.payment_mode == self.PaymentMode.FREE

    def has_ended(self, now: datetime | None = None) -> bool:
        return self.end < (now or timezone.now())

    def seats_taken(self) -> int:
        """Confirmed RSVPs plus issued tickets, whatever their ticket type."""
        return self.rsvps.filter(status="confirmed").count() + self.tickets_sold_count

    def has_room_for(self, quantity: int = 1) -> bool:
        return self.capacity is None or self.seats_taken() + quantity <= self.capacity


class TicketType(TimeStampedModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    capacity = models.PositiveIntegerField(null=True, blank=True, help_text="Leave empty for unlimited")
    sold = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["price", "name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_ticket_type_name"),
            models.CheckConstraint(
                condition=Q(capacity__isnull=True) | Q(sold__lte=F("capacity")),
                name="ticket_type_sold_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event_id} {self.name}"

    @property
    def remaining(self) -> int | None:
        """Remaining units, or None when unlimited."""
        if self.capacity is None:
            return None
        return max(self.capacity - self.sold, 0)
