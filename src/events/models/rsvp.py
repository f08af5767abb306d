from django.conf import settings
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

from .event import Event


class RSVP(TimeStampedModel):
    """A free-attendance claim. At most one confirmed RSVP per user and event."""

    class Status(models.TextChoices):
        CONFIRMED = "confirmed"
        CANCELED = "canceled"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="rsvps")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="rsvps")
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.CONFIRMED, db_index=True)
    canceled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "RSVP"
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=Q(status="confirmed"),
                name="unique_confirmed_rsvp",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.event_id} ({self.status})"
