"""Integration tests for the club, membership and approval controllers."""

import typing as t

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import User
from accounts.service import claims_service
from clubs.models import ApprovalRequest, Club, Membership

pytestmark = pytest.mark.django_db


def test_create_club_as_super_admin(super_admin_client: Client) -> None:
    response = super_admin_client.post(
        reverse("api:create_club"), data=orjson.dumps({"name": "Robotics"}), content_type="application/json"
    )
    assert response.status_code == 201
    data = response.json()
    assert data["club"]["status"] == "pending_approval"
    assert data["approval_request"]["status"] == "pending"


def test_create_club_forbidden_for_users(user_client: Client) -> None:
    response = user_client.post(
        reverse("api:create_club"), data=orjson.dumps({"name": "Robotics"}), content_type="application/json"
    )
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_get_unknown_club_is_404(user_client: Client) -> None:
    response = user_client.get(reverse("api:get_club", kwargs={"club_id": "00000000-0000-0000-0000-000000000000"}))
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_request_and_approve_membership(
    user_client: Client,
    officer_client: Client,
    user: User,
    club: Club,
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    """A user asks to join, an officer approves, and the user's claims follow."""
    response = user_client.post(
        reverse("api:request_membership", kwargs={"club_id": club.pk}),
        data=orjson.dumps({"message": "hi"}),
        content_type="application/json",
    )
    assert response.status_code == 201
    membership_id = response.json()["id"]

    with django_capture_on_commit_callbacks(execute=True):
        response = officer_client.post(reverse("api:approve_membership", kwargs={"membership_id": membership_id}))

    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert claims_service.get_claims(user).is_member_of(club.pk)


def test_duplicate_membership_request_conflicts(user_client: Client, club: Club, member: Membership) -> None:
    response = user_client.post(
        reverse("api:request_membership", kwargs={"club_id": club.pk}),
        data=orjson.dumps({}),
        content_type="application/json",
    )
    assert response.status_code == 409
    assert response.json()["code"] == "already_joined"


def test_member_cannot_approve(user_client: Client, member: Membership, other_user: User, club: Club) -> None:
    pending = Membership.objects.create(club=club, user=other_user)
    response = user_client.post(reverse("api:approve_membership", kwargs={"membership_id": pending.pk}))
    assert response.status_code == 403


def test_list_memberships_for_officers(
    officer_client: Client, user_client: Client, club: Club, member: Membership
) -> None:
    url = reverse("api:list_memberships", kwargs={"club_id": club.pk})
    assert officer_client.get(url).status_code == 200
    assert len(officer_client.get(url).json()) == 2
    assert user_client.get(url).status_code == 403


def test_update_membership_dues(officer_client: Client, member: Membership) -> None:
    response = officer_client.patch(
        reverse("api:update_membership", kwargs={"membership_id": member.pk}),
        data=orjson.dumps({"dues_status": "required"}),
        content_type="application/json",
    )
    assert response.status_code == 200
    assert response.json()["dues_status"] == "required"


def test_leave_club(user_client: Client, club: Club, member: Membership) -> None:
    response = user_client.post(reverse("api:leave_club", kwargs={"club_id": club.pk}))
    assert response.status_code == 200
    assert response.json()["status"] == "archived"


def test_approvals_are_admin_only(user_client: Client) -> None:
    assert user_client.get(reverse("api:list_approval_requests")).status_code == 403


def test_review_approval_request(
    super_admin_client: Client, super_admin: User, django_capture_on_commit_callbacks: t.Any
) -> None:
    club = Club.objects.create(name="Robotics", slug="robotics")
    request = ApprovalRequest.objects.create(
        request_type=ApprovalRequest.RequestType.CLUB, resource_id=club.pk, requested_by=super_admin
    )

    listing = super_admin_client.get(reverse("api:list_approval_requests"))
    assert [r["id"] for r in listing.json()] == [str(request.pk)]

    with django_capture_on_commit_callbacks(execute=True):
        response = super_admin_client.post(
            reverse("api:review_approval_request", kwargs={"request_id": request.pk}),
            data=orjson.dumps({"decision": "approved"}),
            content_type="application/json",
        )

    assert response.status_code == 200
    club.refresh_from_db()
    assert club.status == Club.Status.ACTIVE
