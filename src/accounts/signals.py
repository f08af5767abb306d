"""Signal handlers for account-related operations."""

import structlog
from django.db.models.signals import post_save
from django.dispatch import receiver

from accounts.models import AuthorizationClaims, User, UserProfile

logger = structlog.get_logger(__name__)


@receiver(post_save, sender=User)
def create_user_records(sender: type[User], instance: User, created: bool, **kwargs: object) -> None:
    """Give every new user an empty profile and empty claims."""
    if not created:
        return
    UserProfile.objects.get_or_create(user=instance)
    AuthorizationClaims.objects.get_or_create(user=instance)
    logger.info("user_records_created", user_id=str(instance.pk))
