"""Eligibility gate classes for the event eligibility system.

Each gate performs one step of the admission check. The order of
``ELIGIBILITY_GATES`` is the evaluation order: the first gate that
returns a result decides the outcome, so an event that is both
inactive and outside its RSVP window reports ``event_unavailable``.
"""

from __future__ import annotations

import abc
import typing as t
from typing import TYPE_CHECKING

import structlog
from django.utils.translation import gettext as _

from accounts.models import UserProfile
from clubs.models import Membership
from common.enums import ErrorCode
from events.models import RSVP, Event, Order

from .enums import EligibilityContext, Reasons
from .types import EventUserEligibility

if TYPE_CHECKING:
    from accounts.models import User

    from .service import EligibilityService

logger = structlog.get_logger(__name__)


class BaseEligibilityGate(abc.ABC):
    """Abstract Base Class for a composable eligibility check."""

    def __init__(self, handler: EligibilityService) -> None:
        """Initialize the eligibility check."""
        self.handler = handler
        self.user: User = handler.user

    @property
    def event(self) -> Event:
        # Only reached after EventExistsGate has passed.
        return t.cast(Event, self.handler.event)

    def deny(self, code: ErrorCode, reason: Reasons) -> EventUserEligibility:
        return EventUserEligibility(
            allowed=False, event_id=self.handler.event_id, code=code, message=_(reason)
        )

    @abc.abstractmethod
    def check(self) -> EventUserEligibility | None:
        """Perform the eligibility check.

        Returns:
            EventUserEligibility if this gate blocks access, None to continue to next gate.
        """


class EventExistsGate(BaseEligibilityGate):
    """Gate #1: The event must exist."""

    def check(self) -> EventUserEligibility | None:
        """Check that the event was found."""
        if self.handler.event is None:
            return self.deny(ErrorCode.EVENT_UNAVAILABLE, Reasons.EVENT_NOT_FOUND)
        return None


class EventStatusGate(BaseEligibilityGate):
    """Gate #2: The event must be active."""

    def check(self) -> EventUserEligibility | None:
        """Check the event status."""
        if self.event.status != Event.Status.ACTIVE:
            return self.deny(ErrorCode.EVENT_UNAVAILABLE, Reasons.EVENT_NOT_ACTIVE)
        return None


class EventEndedGate(BaseEligibilityGate):
    """Gate #3: The event must not be over."""

    def check(self) -> EventUserEligibility | None:
        """Check the event end."""
        if self.event.end < self.handler.now:
            return self.deny(ErrorCode.OUTSIDE_WINDOW, Reasons.EVENT_HAS_ENDED)
        return None


class RsvpOpenGate(BaseEligibilityGate):
    """Gate #4: The RSVP window, if set, must have opened."""

    def check(self) -> EventUserEligibility | None:
        """Check the window opening."""
        if self.event.rsvp_open and self.event.rsvp_open > self.handler.now:
            return self.deny(ErrorCode.OUTSIDE_WINDOW, Reasons.RSVP_NOT_OPEN)
        return None


class RsvpCloseGate(BaseEligibilityGate):
    """Gate #5: The RSVP window, if set, must not have closed."""

    def check(self) -> EventUserEligibility | None:
        """Check the window closing."""
        if self.event.rsvp_close and self.event.rsvp_close < self.handler.now:
            return self.deny(ErrorCode.OUTSIDE_WINDOW, Reasons.RSVP_CLOSED)
        return None


class CampusGate(BaseEligibilityGate):
    """Gate #6: Campus events with a university list admit only affiliated users."""

    def check(self) -> EventUserEligibility | None:
        """Check the user's universities against the allowed set."""
        if self.event.visibility != Event.Visibility.CAMPUS:
            return None
        allowed = {u.pk for u in self.event.allowed_universities.all()}
        if not allowed:
            return None

        profile = UserProfile.objects.filter(user_id=self.user.pk).first()
        if profile is None:
            return self.deny(ErrorCode.NOT_ELIGIBLE, Reasons.PROFILE_MISSING)
        if not profile.universities.filter(pk__in=allowed).exists():
            return self.deny(ErrorCode.NOT_ELIGIBLE, Reasons.UNIVERSITY_NOT_ALLOWED)
        return None


class ExistingRsvpGate(BaseEligibilityGate):
    """Gate #7: The user must not hold a confirmed RSVP."""

    def check(self) -> EventUserEligibility | None:
        """Check for a confirmed RSVP."""
        if RSVP.objects.filter(event=self.event, user_id=self.user.pk, status=RSVP.Status.CONFIRMED).exists():
            return self.deny(ErrorCode.ALREADY_JOINED, Reasons.ALREADY_RSVPD)
        return None


class LiveOrderGate(BaseEligibilityGate):
    """Gate #8: The user must not hold a live order."""

    def check(self) -> EventUserEligibility | None:
        """Check for pending, awaiting review, approved or paid orders."""
        if Order.objects.live().filter(event=self.event, user_id=self.user.pk).exists():
            return self.deny(ErrorCode.ALREADY_JOINED, Reasons.ORDER_EXISTS)
        return None


class CapacityGate(BaseEligibilityGate):
    """Gate #9: Advisory capacity check, ticket type first and then the whole event.

    This is not a reservation: the write path re-checks under a lock.
    """

    def check(self) -> EventUserEligibility | None:
        """Check ticket-type and event capacity."""
        if self.handler.ticket_type_id is not None:
            ticket_type = self.handler.ticket_type
            if ticket_type is None:
                return self.deny(ErrorCode.INVALID_TICKET_TYPE, Reasons.TICKET_TYPE_NOT_FOUND)
            if ticket_type.capacity is not None and ticket_type.sold >= ticket_type.capacity:
                return self.deny(ErrorCode.SOLD_OUT, Reasons.TICKET_TYPE_SOLD_OUT)

        if not self.event.has_room_for():
            if self.handler.context == EligibilityContext.ORDER:
                return self.deny(ErrorCode.SOLD_OUT, Reasons.EVENT_SOLD_OUT)
            return self.deny(ErrorCode.CAPACITY_REACHED, Reasons.CAPACITY_REACHED)
        return None


class MembersOnlyGate(BaseEligibilityGate):
    """Gate #10: Members-only events require an approved, paid-up, unbanned membership.

    There is no claims fast path: the membership query always runs and its
    record decides. Claims are only compared against it so that a stale cache
    shows up in the logs.
    """

    def check(self) -> EventUserEligibility | None:
        """Check the membership of the event's club."""
        if self.event.visibility != Event.Visibility.MEMBERS:
            return None

        club_id = self.event.club_id
        claims_say_member = self.handler.claims.is_member_of(club_id)
        membership = Membership.objects.approved().filter(club_id=club_id, user_id=self.user.pk).first()
        if membership is None:
            if claims_say_member:
                logger.warning("membership_claims_stale", user_id=str(self.user.pk), club_id=str(club_id))
            return self.deny(ErrorCode.NOT_ELIGIBLE, Reasons.NOT_A_MEMBER)
        if not claims_say_member:
            logger.info("membership_claims_lagging", user_id=str(self.user.pk), club_id=str(club_id))

        if membership.dues_status in Membership.BLOCKING_DUES:
            return self.deny(ErrorCode.DUES_REQUIRED, Reasons.DUES_REQUIRED)
        if membership.banned:
            return self.deny(ErrorCode.BANNED, Reasons.BANNED)
        return None


ELIGIBILITY_GATES: list[type[BaseEligibilityGate]] = [
    EventExistsGate,
    EventStatusGate,
    EventEndedGate,
    RsvpOpenGate,
    RsvpCloseGate,
    CampusGate,
    ExistingRsvpGate,
    LiveOrderGate,
    CapacityGate,
    MembersOnlyGate,
]
