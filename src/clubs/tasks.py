import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


@shared_task
def sync_membership_claims(user_id: str, club_id: str) -> bool:
    """Recompute a user's claims for one club from the current membership record.

    Returns:
        True if the stored claims changed.
    """
    from clubs.service.membership_service import sync_claims_for

    changed = sync_claims_for(user_id, club_id)  # type: ignore[arg-type]
    logger.info("membership_claims_synced", user_id=user_id, club_id=club_id, changed=changed)
    return changed
