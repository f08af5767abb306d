"""Eligibility guard: one test per gate, plus ordering and failure handling."""

import typing as t
import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from accounts.models import University, User
from accounts.service import claims_service, profile_service
from clubs.models import Club, Membership
from common.enums import ErrorCode
from events.models import RSVP, Event, Order, TicketType
from events.service.event_manager import EligibilityContext, EligibilityService, Reasons
from events.service.event_manager.gates import ELIGIBILITY_GATES, EventExistsGate, MembersOnlyGate

pytestmark = pytest.mark.django_db


def check(user: User, event: Event, **kwargs: t.Any) -> t.Any:
    return EligibilityService(user, event.pk, **kwargs).check_eligibility()


def test_allowed_for_open_public_event(user: User, free_event: Event) -> None:
    eligibility = check(user, free_event)
    assert eligibility.allowed
    assert eligibility.code is None
    assert eligibility.event_id == free_event.pk


def test_unknown_event(user: User) -> None:
    eligibility = EligibilityService(user, uuid.uuid4()).check_eligibility()
    assert not eligibility.allowed
    assert eligibility.code == ErrorCode.EVENT_UNAVAILABLE
    assert eligibility.message == Reasons.EVENT_NOT_FOUND


def test_canceled_event(user: User, free_event: Event) -> None:
    free_event.status = Event.Status.CANCELED
    free_event.save()
    assert check(user, free_event).code == ErrorCode.EVENT_UNAVAILABLE


def test_ended_event(user: User, club: Club) -> None:
    now = timezone.now()
    event = Event.objects.create(club=club, name="Past", start=now - timedelta(hours=3), end=now - timedelta(hours=1))
    eligibility = check(user, event)
    assert eligibility.code == ErrorCode.OUTSIDE_WINDOW
    assert eligibility.message == Reasons.EVENT_HAS_ENDED


def test_rsvp_window_not_open(user: User, free_event: Event) -> None:
    free_event.rsvp_open = timezone.now() + timedelta(hours=1)
    free_event.save()
    eligibility = check(user, free_event)
    assert eligibility.code == ErrorCode.OUTSIDE_WINDOW
    assert eligibility.message == Reasons.RSVP_NOT_OPEN


def test_rsvp_window_closed(user: User, free_event: Event) -> None:
    free_event.rsvp_open = timezone.now() - timedelta(hours=2)
    free_event.rsvp_close = timezone.now() - timedelta(hours=1)
    free_event.save()
    eligibility = check(user, free_event)
    assert eligibility.code == ErrorCode.OUTSIDE_WINDOW
    assert eligibility.message == Reasons.RSVP_CLOSED


def test_inactive_beats_closed_window(user: User, free_event: Event) -> None:
    """An event that is both inactive and outside its window reports event_unavailable."""
    free_event.status = Event.Status.CANCELED
    free_event.rsvp_open = timezone.now() - timedelta(hours=2)
    free_event.rsvp_close = timezone.now() - timedelta(hours=1)
    free_event.save()
    assert check(user, free_event).code == ErrorCode.EVENT_UNAVAILABLE


def test_gate_order_is_fixed() -> None:
    assert ELIGIBILITY_GATES[0] is EventExistsGate
    assert ELIGIBILITY_GATES[-1] is MembersOnlyGate
    assert len(ELIGIBILITY_GATES) == 10


class TestCampusGate:
    @pytest.fixture
    def campus_event(self, free_event: Event) -> Event:
        university = University.objects.create(name="North University", slug="north")
        free_event.visibility = Event.Visibility.CAMPUS
        free_event.save()
        free_event.allowed_universities.set([university])
        return free_event

    def test_user_without_affiliation_is_not_eligible(self, user: User, campus_event: Event) -> None:
        eligibility = check(user, campus_event)
        assert eligibility.code == ErrorCode.NOT_ELIGIBLE
        assert eligibility.message == Reasons.UNIVERSITY_NOT_ALLOWED

    def test_affiliated_user_is_eligible(self, user: User, campus_event: Event) -> None:
        profile_service.set_universities(user, [campus_event.allowed_universities.get().pk])
        assert check(user, campus_event).allowed

    def test_missing_profile(self, user: User, campus_event: Event) -> None:
        user.profile.delete()
        eligibility = check(user, campus_event)
        assert eligibility.code == ErrorCode.NOT_ELIGIBLE
        assert eligibility.message == Reasons.PROFILE_MISSING

    def test_campus_event_without_list_is_open(self, user: User, free_event: Event) -> None:
        free_event.visibility = Event.Visibility.CAMPUS
        free_event.save()
        assert check(user, free_event).allowed


def test_existing_rsvp(user: User, free_event: Event) -> None:
    RSVP.objects.create(event=free_event, user=user)
    assert check(user, free_event).code == ErrorCode.ALREADY_JOINED


def test_live_order(user: User, paid_event: Event, order_factory: t.Callable[..., Order]) -> None:
    order_factory(user, status=Order.Status.AWAITING_REVIEW)
    eligibility = check(user, paid_event, context=EligibilityContext.ORDER)
    assert eligibility.code == ErrorCode.ALREADY_JOINED
    assert eligibility.message == Reasons.ORDER_EXISTS


def test_rejected_order_does_not_block(user: User, paid_event: Event, order_factory: t.Callable[..., Order]) -> None:
    order_factory(user, status=Order.Status.REJECTED)
    assert check(user, paid_event, context=EligibilityContext.ORDER).allowed


def test_sold_out_ticket_type(user: User, paid_event: Event, ticket_type: TicketType) -> None:
    """A ticket type with capacity 2 and 2 sold is sold out."""
    ticket_type.sold = 2
    ticket_type.save()
    eligibility = check(user, paid_event, ticket_type_id=ticket_type.pk, context=EligibilityContext.ORDER)
    assert eligibility.allowed is False
    assert eligibility.code == ErrorCode.SOLD_OUT


def test_unknown_ticket_type(user: User, paid_event: Event, free_event: Event) -> None:
    other = TicketType.objects.create(event=free_event, name="elsewhere")
    eligibility = check(user, paid_event, ticket_type_id=other.pk, context=EligibilityContext.ORDER)
    assert eligibility.code == ErrorCode.INVALID_TICKET_TYPE


def test_flat_capacity_counts_rsvps_and_tickets(user: User, other_user: User, free_event: Event) -> None:
    free_event.capacity = 2
    free_event.tickets_sold_count = 1
    free_event.save()
    assert check(user, free_event).allowed

    RSVP.objects.create(event=free_event, user=other_user)
    assert check(user, free_event).code == ErrorCode.CAPACITY_REACHED
    assert check(user, free_event, context=EligibilityContext.ORDER).code == ErrorCode.SOLD_OUT


def test_event_capacity_applies_with_ticket_type(user: User, paid_event: Event, ticket_type: TicketType) -> None:
    ticket_type.capacity = None
    ticket_type.save()
    paid_event.capacity = 3
    paid_event.tickets_sold_count = 3
    paid_event.save()
    eligibility = check(user, paid_event, ticket_type_id=ticket_type.pk, context=EligibilityContext.ORDER)
    assert eligibility.code == ErrorCode.SOLD_OUT


class TestMembersOnlyGate:
    @pytest.fixture
    def members_event(self, free_event: Event) -> Event:
        free_event.visibility = Event.Visibility.MEMBERS
        free_event.save()
        return free_event

    def test_non_member(self, user: User, members_event: Event) -> None:
        assert check(user, members_event).code == ErrorCode.NOT_ELIGIBLE

    def test_paid_up_member(self, user: User, member: Membership, members_event: Event) -> None:
        assert check(user, members_event).allowed

    def test_dues_required(self, user: User, member: Membership, members_event: Event) -> None:
        """An approved member with dues required is turned away."""
        member.dues_status = Membership.DuesStatus.REQUIRED
        member.save()
        eligibility = check(user, members_event)
        assert eligibility.allowed is False
        assert eligibility.code == ErrorCode.DUES_REQUIRED

    def test_late_dues(self, user: User, member: Membership, members_event: Event) -> None:
        member.dues_status = Membership.DuesStatus.LATE
        member.save()
        assert check(user, members_event).code == ErrorCode.DUES_REQUIRED

    def test_banned(self, user: User, member: Membership, members_event: Event) -> None:
        member.banned = True
        member.save()
        assert check(user, members_event).code == ErrorCode.BANNED

    def test_pending_membership_is_not_enough(self, user: User, club: Club, members_event: Event) -> None:
        Membership.objects.create(club=club, user=user, dues_status=Membership.DuesStatus.PAID)
        assert check(user, members_event).code == ErrorCode.NOT_ELIGIBLE

    def test_stale_claims_never_grant_access(self, user: User, club: Club, members_event: Event) -> None:
        """Claims saying member are ignored when the membership record disagrees."""
        claims_service.apply_membership_claims(user.pk, club.pk, is_member=True, is_officer=False, meta={})
        assert check(user, members_event).code == ErrorCode.NOT_ELIGIBLE

    def test_lagging_claims_do_not_deny(self, user: User, member: Membership, members_event: Event) -> None:
        """A fresh approval is honoured before the claims sync has run."""
        assert not claims_service.get_claims(user).is_member_of(member.club_id)
        assert check(user, members_event).allowed


def test_unexpected_error_is_a_generic_denial(user: User, free_event: Event) -> None:
    with patch.object(EventExistsGate, "check", side_effect=RuntimeError("db down")):
        eligibility = check(user, free_event)
    assert eligibility.allowed is False
    assert eligibility.code == ErrorCode.SERVER_ERROR
    assert eligibility.message == "An unexpected error occurred"
