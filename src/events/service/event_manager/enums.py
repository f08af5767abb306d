"""Enums for the event eligibility system."""

from enum import StrEnum

from django.utils.translation import gettext_noop


class EligibilityContext(StrEnum):
    """What the caller is about to do."""

    RSVP = "rsvp"
    ORDER = "order"


class Reasons(StrEnum):
    """Reasons why a user is not eligible for an event.

    Note: Strings are marked with _noop() for translation extraction.
    The actual translation happens in gates.py when using _(Reasons.XXX).
    """

    EVENT_NOT_FOUND = gettext_noop("Event not found")
    EVENT_NOT_ACTIVE = gettext_noop("Event is not active")
    EVENT_HAS_ENDED = gettext_noop("Event has already ended")
    RSVP_NOT_OPEN = gettext_noop("RSVP window has not opened yet")
    RSVP_CLOSED = gettext_noop("RSVP window has closed")
    PROFILE_MISSING = gettext_noop("User profile not found")
    UNIVERSITY_NOT_ALLOWED = gettext_noop("User not from allowed universities")
    ALREADY_RSVPD = gettext_noop("You have already RSVP'd to this event")
    ORDER_EXISTS = gettext_noop("You already have a pending or approved order for this event")
    TICKET_TYPE_NOT_FOUND = gettext_noop("Ticket type not found")
    TICKET_TYPE_SOLD_OUT = gettext_noop("Ticket type sold out")
    EVENT_SOLD_OUT = gettext_noop("Event is sold out")
    CAPACITY_REACHED = gettext_noop("Event has reached capacity")
    NOT_A_MEMBER = gettext_noop("You are not a member of this club")
    DUES_REQUIRED = gettext_noop("You must pay club dues before joining this event")
    BANNED = gettext_noop("You are banned from this club")
    ELIGIBLE = gettext_noop("You are eligible to join this event")
    UNEXPECTED_ERROR = gettext_noop("An unexpected error occurred")
