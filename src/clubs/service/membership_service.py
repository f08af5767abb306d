"""Membership workflow: request, review, leave and officer-side updates.

Every write goes through ``Membership.save`` so the claims trigger in
``clubs.signals`` observes it.
"""

import typing as t
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from accounts.models import User
from accounts.service import claims_service
from clubs.models import Club, Membership
from common.exceptions import (
    AlreadyExistsError,
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from common.service import audit_service

logger = structlog.get_logger(__name__)


class ClaimFlags(t.NamedTuple):
    is_member: bool
    is_officer: bool


def membership_claim_flags(status: str | None, role: str | None) -> ClaimFlags:
    """Derive the claim flags a membership state grants."""
    is_member = status == Membership.Status.APPROVED
    return ClaimFlags(is_member=is_member, is_officer=is_member and role in Membership.OFFICER_ROLES)


def is_officer(user: User, club_id: UUID) -> bool:
    """Officer check against the membership record, never the claims cache."""
    return Membership.objects.officers().filter(club_id=club_id, user_id=user.pk).exists()


def is_officer_or_admin(user: User, club_id: UUID) -> bool:
    return claims_service.get_claims(user).super_admin or is_officer(user, club_id)


def require_officer_or_admin(user: User, club_id: UUID) -> None:
    """Raise unless the user may manage the club."""
    if not is_officer_or_admin(user, club_id):
        raise PermissionDeniedError(_("Only club officers or administrators can perform this action."))


def require_super_admin(user: User) -> None:
    if not claims_service.get_claims(user).super_admin:
        raise PermissionDeniedError(_("Only administrators can perform this action."))


def _audit(actor: User, action: str, membership: Membership, **extra: t.Any) -> None:
    audit_service.record(
        actor.pk,
        action,
        "memberships",
        membership.pk,
        {"club_id": membership.club_id, "user_id": membership.user_id, **extra},
    )


@transaction.atomic
def request_membership(user: User, club: Club, message: str = "") -> Membership:
    """Ask to join a club.

    A previously rejected or archived membership is reused and reset to pending.

    Raises:
        FailedPreconditionError: If the club is not active.
        AlreadyExistsError: If the user is already a member or has a pending request.
    """
    if club.status != Club.Status.ACTIVE:
        raise FailedPreconditionError(_("This club is not accepting members."))

    membership = Membership.objects.select_for_update().filter(club=club, user=user).first()
    if membership is None:
        membership = Membership.objects.create(club=club, user=user, message=message)
    elif membership.status in (Membership.Status.APPROVED, Membership.Status.PENDING):
        raise AlreadyExistsError(_("You are already a member or have a pending request for this club."))
    else:
        membership.status = Membership.Status.PENDING
        membership.role = Membership.Role.MEMBER
        membership.message = message
        membership.rejected_at = None
        membership.rejected_by = None
        membership.rejection_reason = ""
        membership.archived_at = None
        membership.save()

    _audit(user, "membership_requested", membership)
    logger.info("membership_requested", club_id=str(club.pk), user_id=str(user.pk), membership_id=str(membership.pk))
    return membership


def _lock_pending(membership: Membership, reviewer: User) -> Membership:
    require_officer_or_admin(reviewer, membership.club_id)
    locked = Membership.objects.select_for_update().get(pk=membership.pk)
    if locked.status != Membership.Status.PENDING:
        raise FailedPreconditionError(_("Only pending membership requests can be reviewed."))
    return locked


@transaction.atomic
def approve_membership(membership: Membership, reviewer: User) -> Membership:
    """Approve a pending request."""
    membership = _lock_pending(membership, reviewer)
    membership.status = Membership.Status.APPROVED
    membership.approved_at = timezone.now()
    membership.approved_by = reviewer
    membership.save()
    _audit(reviewer, "membership_approved", membership)
    logger.info("membership_approved", membership_id=str(membership.pk), reviewer_id=str(reviewer.pk))
    return membership


@transaction.atomic
def reject_membership(membership: Membership, reviewer: User, reason: str = "") -> Membership:
    """Reject a pending request."""
    membership = _lock_pending(membership, reviewer)
    membership.status = Membership.Status.REJECTED
    membership.rejected_at = timezone.now()
    membership.rejected_by = reviewer
    membership.rejection_reason = reason
    membership.save()
    _audit(reviewer, "membership_rejected", membership, reason=reason)
    logger.info("membership_rejected", membership_id=str(membership.pk), reviewer_id=str(reviewer.pk))
    return membership


@transaction.atomic
def leave_club(user: User, club: Club) -> Membership:
    """Archive the user's approved membership.

    Raises:
        NotFoundError: If the user is not an approved member.
    """
    membership = Membership.objects.select_for_update().filter(club=club, user=user).first()
    if membership is None or membership.status != Membership.Status.APPROVED:
        raise NotFoundError(_("You are not a member of this club."))
    membership.status = Membership.Status.ARCHIVED
    membership.archived_at = timezone.now()
    membership.save()
    _audit(user, "membership_left", membership)
    logger.info("membership_left", membership_id=str(membership.pk))
    return membership


@transaction.atomic
def update_membership(
    membership: Membership,
    actor: User,
    *,
    role: str | None = None,
    dues_status: str | None = None,
    banned: bool | None = None,
) -> Membership:
    """Change role, dues status or ban flag of a membership.

    Raises:
        InvalidArgumentError: If nothing is being changed.
    """
    require_officer_or_admin(actor, membership.club_id)
    changes = {
        k: v for k, v in {"role": role, "dues_status": dues_status, "banned": banned}.items() if v is not None
    }
    if not changes:
        raise InvalidArgumentError(_("No changes were provided."))
    if changes.get("role") == Membership.Role.OWNER and not claims_service.get_claims(actor).super_admin:
        raise PermissionDeniedError(_("Only administrators can assign the owner role."))

    membership = Membership.objects.select_for_update().get(pk=membership.pk)
    for field, value in changes.items():
        setattr(membership, field, value)
    membership.save()
    _audit(actor, "membership_updated", membership, **changes)
    logger.info("membership_updated", membership_id=str(membership.pk), **changes)
    return membership


def sync_claims_for(user_id: UUID, club_id: UUID, *, source: str = "membership_change") -> bool:
    """Recompute claims from the current membership record (or its absence)."""
    if not User.objects.filter(pk=user_id).exists():
        logger.info("claims_sync_skipped_user_missing", user_id=str(user_id), club_id=str(club_id))
        return False
    membership = Membership.objects.filter(user_id=user_id, club_id=club_id).only("status", "role").first()
    status = membership.status if membership else None
    role = membership.role if membership else None
    flags = membership_claim_flags(status, role)
    return claims_service.apply_membership_claims(
        user_id,
        club_id,
        is_member=flags.is_member,
        is_officer=flags.is_officer,
        meta={"role": role, "status": status, "source": source},
    )
