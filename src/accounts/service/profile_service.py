from uuid import UUID

import structlog
from django.db import transaction
from django.utils.translation import gettext as _

from accounts.models import University, User, UserProfile
from common.exceptions import InvalidArgumentError

logger = structlog.get_logger(__name__)


def get_profile(user: User) -> UserProfile:
    """Return the user's profile, creating an empty one on first access."""
    profile, _created = UserProfile.objects.get_or_create(user=user)
    return profile


def get_university_ids(user_id: UUID) -> set[UUID]:
    """The universities a user is affiliated with."""
    return set(University.objects.filter(profiles__user_id=user_id).values_list("id", flat=True))


@transaction.atomic
def set_universities(user: User, university_ids: list[UUID]) -> UserProfile:
    """Replace the user's campus affiliations.

    Raises:
        InvalidArgumentError: If any of the ids does not exist.
    """
    requested = set(university_ids)
    universities = list(University.objects.filter(id__in=requested))
    if len(universities) != len(requested):
        raise InvalidArgumentError(_("Unknown university."))
    profile = get_profile(user)
    profile.universities.set(universities)
    logger.info("profile_universities_updated", user_id=str(user.pk), count=len(universities))
    return profile
