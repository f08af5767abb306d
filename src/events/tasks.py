import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


@shared_task
def issue_tickets_for_paid_order(order_id: str) -> list[str]:
    """Issue the tickets of an order whose payment was confirmed.

    Returns:
        The ids of the order's tickets. Empty when the order was rejected for capacity.
    """
    from common.service.audit_service import SYSTEM_ORDER_PAID
    from events.service.ticket_issuance import issue_tickets_for_order

    result = issue_tickets_for_order(order_id, actor_id=SYSTEM_ORDER_PAID)  # type: ignore[arg-type]
    logger.info(
        "paid_order_processed", order_id=order_id, status=result.status, created=result.created, count=len(result.ticket_ids)
    )
    return [str(ticket_id) for ticket_id in result.ticket_ids]
