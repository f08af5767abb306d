from .approvals import ApprovalController
from .clubs import ClubController
from .memberships import MembershipController

__all__ = ["ApprovalController", "ClubController", "MembershipController"]
