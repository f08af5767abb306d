import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema

from clubs.models import ApprovalRequest, Club, Membership


class ClubSchema(ModelSchema):
    university_ids: list[UUID]

    class Meta:
        model = Club
        fields = ("id", "name", "slug", "description", "status", "created_at")

    @staticmethod
    def resolve_university_ids(obj: Club) -> list[UUID]:
        return [u.pk for u in obj.universities.all()]


class ClubCreateSchema(Schema):
    name: str
    description: str = ""
    university_ids: list[UUID] = []


class ClubArchiveSchema(Schema):
    reason: str = ""


class ApprovalRequestSchema(ModelSchema):
    class Meta:
        model = ApprovalRequest
        fields = ("id", "request_type", "resource_id", "club", "status", "reviewed_at", "notes", "created_at")


class ApprovalCreateResponse(Schema):
    club: ClubSchema
    approval_request: ApprovalRequestSchema


class ReviewDecisionSchema(Schema):
    decision: t.Literal["approved", "rejected"]
    notes: str = ""


class MembershipSchema(ModelSchema):
    class Meta:
        model = Membership
        fields = (
            "id",
            "club",
            "user",
            "role",
            "status",
            "dues_status",
            "banned",
            "message",
            "approved_at",
            "rejected_at",
            "rejection_reason",
            "archived_at",
        )


class MembershipRequestSchema(Schema):
    message: str = ""


class MembershipRejectSchema(Schema):
    reason: str = ""


class MembershipUpdateSchema(Schema):
    role: Membership.Role | None = None
    dues_status: Membership.DuesStatus | None = None
    banned: bool | None = None
