from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from clubs.models import Club
from common.models import TimeStampedModel

from .event import Event, TicketType
from .order import Order


class Ticket(TimeStampedModel):
    """Proof of admission. One per unit of a paid or approved order."""

    class Status(models.TextChoices):
        VALID = "valid"
        USED = "used"

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="tickets")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tickets")
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.PROTECT, null=True, blank=True, related_name="tickets"
    )
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.VALID, db_index=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_in_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"Ticket {self.pk} ({self.status})"

    def clean(self) -> None:
        """A used ticket never becomes valid again."""
        if self._state.adding or self.status != self.Status.VALID:
            return
        if Ticket.objects.filter(pk=self.pk, status=self.Status.USED).exists():
            raise ValidationError({"status": "A used ticket cannot be reactivated."})
