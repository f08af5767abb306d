import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from common.models import TimeStampedModel


class UserQueryset(models.QuerySet["User"]):
    """Queryset for User."""


class ClubHubUserManager(UserManager["User"]):
    def get_queryset(self) -> UserQueryset:
        """Get queryset for User."""
        return UserQueryset(self.model)


class User(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    preferred_name = models.CharField(db_index=True, max_length=255, blank=True, help_text="Preferred name")
    language = models.CharField(
        max_length=7,
        choices=settings.LANGUAGES,
        default=settings.LANGUAGE_CODE,
        help_text="User's preferred language",
    )

    objects = ClubHubUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return self.preferred_name or self.get_full_name() or self.username


class University(TimeStampedModel):
    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, unique=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "universities"

    def __str__(self) -> str:
        return self.name


class UserProfile(TimeStampedModel):
    """Campus affiliation of a user, consulted by campus-restricted events."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    universities = models.ManyToManyField(University, related_name="profiles", blank=True)

    def __str__(self) -> str:
        return f"Profile of {self.user_id}"


class ClaimsSchema(BaseModel):
    """Derived authorization summary of a user.

    The club maps only hold ``True`` entries; a missing key means ``False``.
    """

    model_config = ConfigDict(extra="forbid")
    super_admin: bool = False
    officer_of_club: dict[uuid.UUID, bool] = Field(default_factory=dict)
    member_of_club: dict[uuid.UUID, bool] = Field(default_factory=dict)

    def is_officer_of(self, club_id: uuid.UUID | str) -> bool:
        return self.officer_of_club.get(uuid.UUID(str(club_id)), False)

    def is_member_of(self, club_id: uuid.UUID | str) -> bool:
        return self.member_of_club.get(uuid.UUID(str(club_id)), False)


def _get_default_claims() -> dict[str, t.Any]:
    return ClaimsSchema().model_dump(mode="json")


def _validate_claims(value: dict[str, t.Any]) -> None:
    try:
        ClaimsSchema.model_validate(value)
    except PydanticValidationError as e:
        raise DjangoValidationError(str(e))


class AuthorizationClaims(TimeStampedModel):
    """Cached claims of a user, recomputed from memberships. Not a source of truth."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="authorization_claims"
    )
    claims = models.JSONField(default=_get_default_claims, blank=True, validators=[_validate_claims])

    class Meta:
        verbose_name_plural = "authorization claims"

    def __str__(self) -> str:
        return f"Claims of {self.user_id}"

    def as_schema(self) -> ClaimsSchema:
        return ClaimsSchema.model_validate(self.claims)
