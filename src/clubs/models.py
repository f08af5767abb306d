import typing as t

from django.conf import settings
from django.db import models
from django.db.models import Q

from accounts.models import University
from common.models import TimeStampedModel


class ClubQuerySet(models.QuerySet["Club"]):
    def active(self) -> t.Self:
        return self.filter(status=Club.Status.ACTIVE)


class Club(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING_APPROVAL = "pending_approval"
        ACTIVE = "active"
        ARCHIVED = "archived"

    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    status = models.CharField(
        choices=Status.choices, max_length=20, default=Status.PENDING_APPROVAL, db_index=True
    )
    universities = models.ManyToManyField(University, related_name="clubs", blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_clubs"
    )
    last_edited_by = models.CharField(max_length=128, blank=True, help_text="User id or system actor id")
    archived_at = models.DateTimeField(null=True, blank=True)
    archive_reason = models.TextField(blank=True)

    objects = ClubQuerySet.as_manager()

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class MembershipQuerySet(models.QuerySet["Membership"]):
    def approved(self) -> t.Self:
        return self.filter(status=Membership.Status.APPROVED)

    def officers(self) -> t.Self:
        """Approved memberships holding an officer-level role."""
        return self.approved().filter(role__in=Membership.OFFICER_ROLES)


class Membership(TimeStampedModel):
    """A user's relationship with a club. One record per (club, user), reused on re-request."""

    class Role(models.TextChoices):
        MEMBER = "member"
        OFFICER = "officer"
        OWNER = "owner"

    class Status(models.TextChoices):
        PENDING = "pending"
        APPROVED = "approved"
        REJECTED = "rejected"
        ARCHIVED = "archived"

    class DuesStatus(models.TextChoices):
        PAID = "paid"
        UNPAID = "unpaid"
        REQUIRED = "required"
        LATE = "late"

    OFFICER_ROLES = (Role.OFFICER, Role.OWNER)
    BLOCKING_DUES = (DuesStatus.REQUIRED, DuesStatus.LATE)
    # Statuses from which a new request reuses the record.
    REUSABLE_STATUSES = (Status.REJECTED, Status.ARCHIVED)

    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(choices=Role.choices, max_length=10, default=Role.MEMBER)
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.PENDING, db_index=True)
    dues_status = models.CharField(choices=DuesStatus.choices, max_length=10, default=DuesStatus.UNPAID)
    banned = models.BooleanField(default=False)
    message = models.TextField(blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    rejection_reason = models.TextField(blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)

    objects = MembershipQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["club", "user"], name="unique_club_membership"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} in {self.club_id} ({self.status})"

    @property
    def is_officer(self) -> bool:
        return self.status == self.Status.APPROVED and self.role in self.OFFICER_ROLES


class ApprovalRequest(TimeStampedModel):
    class RequestType(models.TextChoices):
        CLUB = "club"
        EVENT = "event"

    class Status(models.TextChoices):
        PENDING = "pending"
        APPROVED = "approved"
        REJECTED = "rejected"

    request_type = models.CharField(choices=RequestType.choices, max_length=10)
    resource_id = models.UUIDField(null=True, blank=True, help_text="Id of the club or event under review")
    club = models.ForeignKey(Club, on_delete=models.CASCADE, null=True, blank=True, related_name="approval_requests")
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.PENDING, db_index=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["request_type", "resource_id"],
                condition=Q(status="pending"),
                name="unique_pending_approval_request",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.request_type} {self.resource_id} ({self.status})"

    @property
    def target_club_id(self) -> t.Any:
        """The club this request activates, if any."""
        return self.resource_id or self.club_id
