"""EligibilityService for checking user eligibility for events."""

import uuid
from functools import cached_property

import structlog
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import ClaimsSchema, User
from accounts.service import claims_service
from common.enums import ErrorCode
from events.models import Event, TicketType

from .enums import EligibilityContext, Reasons
from .gates import ELIGIBILITY_GATES, BaseEligibilityGate
from .types import EventUserEligibility

logger = structlog.get_logger(__name__)


class EligibilityService:
    """The Eligibility Service Class.

    Decides whether a user may RSVP to, or order tickets for, an event. It only reads.
    An allowed result is not a reservation.
    """

    def __init__(
        self,
        user: User,
        event_id: uuid.UUID,
        ticket_type_id: uuid.UUID | None = None,
        context: EligibilityContext = EligibilityContext.RSVP,
    ) -> None:
        """Store the request; data is loaded lazily by the gates that need it."""
        self.user = user
        self.event_id = event_id
        self.ticket_type_id = ticket_type_id
        self.context = EligibilityContext(context)
        self.now = timezone.now()

    @cached_property
    def event(self) -> Event | None:
        return Event.objects.prefetch_related("allowed_universities").filter(pk=self.event_id).first()

    @cached_property
    def ticket_type(self) -> TicketType | None:
        if self.ticket_type_id is None:
            return None
        return TicketType.objects.filter(pk=self.ticket_type_id, event_id=self.event_id).first()

    @cached_property
    def claims(self) -> ClaimsSchema:
        return claims_service.get_claims(self.user)

    def check_eligibility(self) -> EventUserEligibility:
        """Run the gates in order and return the first denial, or an allowed result.

        Unexpected failures are reported as a generic ``server_error`` denial.
        """
        gates: list[BaseEligibilityGate] = [gate(self) for gate in ELIGIBILITY_GATES]
        try:
            for gate in gates:
                if result := gate.check():
                    logger.info(
                        "eligibility_denied",
                        user_id=str(self.user.pk),
                        event_id=str(self.event_id),
                        context=self.context,
                        gate=type(gate).__name__,
                        code=result.code,
                    )
                    return result
        except Exception:
            logger.exception("eligibility_check_failed", user_id=str(self.user.pk), event_id=str(self.event_id))
            return EventUserEligibility(
                allowed=False,
                event_id=self.event_id,
                code=ErrorCode.SERVER_ERROR,
                message=_(Reasons.UNEXPECTED_ERROR),
            )

        return EventUserEligibility(allowed=True, event_id=self.event_id, message=_(Reasons.ELIGIBLE))
