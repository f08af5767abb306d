from uuid import UUID

from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from clubs import schema
from clubs.models import Membership
from clubs.service import membership_service
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import WriteThrottle


@api_controller("/memberships", auth=I18nJWTAuth(), tags=["Memberships"], throttle=WriteThrottle())
class MembershipController(UserAwareController):
    def get_membership(self, membership_id: UUID) -> Membership:
        return get_object_or_404(Membership, pk=membership_id)

    @route.post("/{membership_id}/approve", url_name="approve_membership", response=schema.MembershipSchema)
    def approve_membership(self, membership_id: UUID) -> Membership:
        """Approve a pending membership request. Club officers and admins only."""
        return membership_service.approve_membership(self.get_membership(membership_id), self.user())

    @route.post("/{membership_id}/reject", url_name="reject_membership", response=schema.MembershipSchema)
    def reject_membership(self, membership_id: UUID, payload: schema.MembershipRejectSchema) -> Membership:
        """Reject a pending membership request. Club officers and admins only."""
        return membership_service.reject_membership(self.get_membership(membership_id), self.user(), payload.reason)

    @route.patch("/{membership_id}", url_name="update_membership", response=schema.MembershipSchema)
    def update_membership(self, membership_id: UUID, payload: schema.MembershipUpdateSchema) -> Membership:
        """Change the role, dues status or ban flag of a membership.

        Only administrators can assign the owner role.
        """
        return membership_service.update_membership(
            self.get_membership(membership_id),
            self.user(),
            role=payload.role,
            dues_status=payload.dues_status,
            banned=payload.banned,
        )
