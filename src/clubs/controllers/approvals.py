from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from clubs import schema
from clubs.models import ApprovalRequest
from clubs.service import club_service
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.permissions import IsSuperAdmin
from common.throttling import WriteThrottle


@api_controller("/approvals", auth=I18nJWTAuth(), permissions=[IsSuperAdmin()], tags=["Approvals"])
class ApprovalController(UserAwareController):
    @route.get("/", url_name="list_approval_requests", response=list[schema.ApprovalRequestSchema])
    def list_approval_requests(
        self, status: ApprovalRequest.Status = ApprovalRequest.Status.PENDING
    ) -> QuerySet[ApprovalRequest]:
        """List approval requests, pending ones by default."""
        return ApprovalRequest.objects.filter(status=status)

    @route.post(
        "/{request_id}/review",
        url_name="review_approval_request",
        response=schema.ApprovalRequestSchema,
        throttle=WriteThrottle(),
    )
    def review_approval_request(self, request_id: UUID, payload: schema.ReviewDecisionSchema) -> ApprovalRequest:
        """Approve or reject a request. Approving a club request activates the club."""
        request = get_object_or_404(ApprovalRequest, pk=request_id)
        return club_service.review_approval_request(request, self.user(), payload.decision, payload.notes)
