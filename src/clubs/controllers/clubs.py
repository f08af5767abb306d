import typing as t
from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from clubs import schema
from clubs.models import Club, Membership
from clubs.service import club_service, membership_service
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.service.rate_limit_service import enforce_rate_limit
from common.throttling import UserDefaultThrottle, WriteThrottle


@api_controller("/clubs", auth=I18nJWTAuth(), tags=["Clubs"], throttle=UserDefaultThrottle())
class ClubController(UserAwareController):
    def get_club(self, club_id: UUID) -> Club:
        return get_object_or_404(Club.objects.prefetch_related("universities"), pk=club_id)

    @route.post("/", url_name="create_club", response={201: schema.ApprovalCreateResponse}, throttle=WriteThrottle())
    def create_club(self, payload: schema.ClubCreateSchema) -> tuple[int, dict[str, t.Any]]:
        """Create a club. It stays pending until its approval request is approved. Super admins only."""
        club, request = club_service.create_club(
            self.user(), payload.name, payload.description, payload.university_ids
        )
        return 201, {"club": club, "approval_request": request}

    @route.get("/{club_id}", url_name="get_club", response=schema.ClubSchema)
    def get_club_detail(self, club_id: UUID) -> Club:
        """Retrieve a club."""
        return self.get_club(club_id)

    @route.post("/{club_id}/archive", url_name="archive_club", response=schema.ClubSchema, throttle=WriteThrottle())
    def archive_club(self, club_id: UUID, payload: schema.ClubArchiveSchema) -> Club:
        """Archive a club. Super admins only."""
        return club_service.archive_club(self.get_club(club_id), self.user(), payload.reason)

    @route.get("/{club_id}/memberships", url_name="list_memberships", response=list[schema.MembershipSchema])
    def list_memberships(self, club_id: UUID) -> QuerySet[Membership]:
        """List the memberships of a club. Officers and admins only."""
        club = self.get_club(club_id)
        membership_service.require_officer_or_admin(self.user(), club.pk)
        return Membership.objects.filter(club=club).order_by("status", "created_at")

    @route.post(
        "/{club_id}/memberships",
        url_name="request_membership",
        response={201: schema.MembershipSchema},
        throttle=WriteThrottle(),
    )
    def request_membership(self, club_id: UUID, payload: schema.MembershipRequestSchema) -> tuple[int, Membership]:
        """Ask to join a club. A rejected or archived membership is reopened as pending."""
        enforce_rate_limit(self.rate_limit_key(), "request_membership")
        membership = membership_service.request_membership(self.user(), self.get_club(club_id), payload.message)
        return 201, membership

    @route.post("/{club_id}/leave", url_name="leave_club", response=schema.MembershipSchema, throttle=WriteThrottle())
    def leave_club(self, club_id: UUID) -> Membership:
        """Leave a club. The membership is archived and the caller's claims for the club are cleared."""
        return membership_service.leave_club(self.user(), self.get_club(club_id))
