"""Types and exceptions for the event eligibility system."""

import uuid

from pydantic import BaseModel

from common.enums import ErrorCode


class EventUserEligibility(BaseModel):
    """Result of an eligibility check for a user on an event."""

    allowed: bool
    event_id: uuid.UUID
    code: ErrorCode | None = None
    message: str | None = None  # translated, hence not an enum


class UserIsIneligibleError(Exception):
    """Exception raised when a user is not eligible for an event action."""

    def __init__(self, message: str, eligibility: EventUserEligibility) -> None:
        """Initialize the exception with eligibility details."""
        super().__init__(message)
        self.eligibility = eligibility
