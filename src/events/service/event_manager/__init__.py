"""Event eligibility and admission package.

This package provides the eligibility guard and the admission manager
for RSVP and order operations.
"""

from common.enums import ErrorCode

from .enums import EligibilityContext, Reasons
from .manager import EventManager, OrderCreated, PaymentDetails
from .service import EligibilityService
from .types import EventUserEligibility, UserIsIneligibleError

__all__ = [
    "EligibilityContext",
    "ErrorCode",
    "Reasons",
    "EventUserEligibility",
    "UserIsIneligibleError",
    "EligibilityService",
    "EventManager",
    "OrderCreated",
    "PaymentDetails",
]
