import structlog
from celery import shared_task

from common.service import rate_limit_service

logger = structlog.get_logger(__name__)


@shared_task
def purge_expired_rate_limit_counters() -> int:
    """Delete rate-limit counters that no longer affect any decision."""
    deleted = rate_limit_service.purge_expired_counters()
    logger.info("rate_limit_counters_purged", deleted=deleted)
    return deleted
