import typing as t
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Override the save method to call full_clean before saving."""
        self.full_clean()
        super().save(*args, **kwargs)


class AuditLogEntryQuerySet(models.QuerySet["AuditLogEntry"]):
    def for_target(self, collection: str, target_id: t.Any) -> t.Self:
        """Entries about a single target record."""
        return self.filter(target_collection=collection, target_id=str(target_id))

    def update(self, **kwargs: t.Any) -> int:
        """Audit entries are append-only."""
        raise TypeError("Audit log entries cannot be updated.")

    def delete(self) -> tuple[int, dict[str, int]]:
        """Audit entries are append-only."""
        raise TypeError("Audit log entries cannot be deleted.")


class AuditLogEntry(models.Model):
    """An immutable record of who did what to which record."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    actor_id = models.CharField(max_length=128, db_index=True)
    action = models.CharField(max_length=128, db_index=True)
    target_collection = models.CharField(max_length=64)
    target_id = models.CharField(max_length=128)
    meta = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogEntryQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["target_collection", "target_id"], name="audit_target_idx"),
        ]
        verbose_name_plural = "audit log entries"

    def __str__(self) -> str:
        return f"{self.actor_id} {self.action} {self.target_collection}/{self.target_id}"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Only inserts are allowed."""
        if not self._state.adding:
            raise TypeError("Audit log entries cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, *args: t.Any, **kwargs: t.Any) -> tuple[int, dict[str, int]]:
        """Audit entries are append-only."""
        raise TypeError("Audit log entries cannot be deleted.")


class RateLimitCounter(TimeStampedModel):
    """A shared, expiring request counter for one actor and one action.

    The actor key is ``user:<id>`` for authenticated callers and ``ip:<address>`` otherwise.
    """

    actor_key = models.CharField(max_length=128)
    action = models.CharField(max_length=64)
    count = models.PositiveIntegerField(default=0)
    window_started_at = models.DateTimeField()
    last_request_at = models.DateTimeField()
    blocked_until = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["actor_key", "action"], name="unique_rate_limit_counter"),
        ]
        indexes = [
            models.Index(fields=["last_request_at"], name="rate_limit_last_request_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.actor_key} {self.action}: {self.count}"
