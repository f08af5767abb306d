"""Derived authorization claims.

Claims are a cache of membership state used for quick UI and API checks.
Membership records remain authoritative wherever the two could disagree.
"""

import typing as t
from uuid import UUID

import structlog
from django.db import transaction

from accounts.models import AuthorizationClaims, ClaimsSchema, User
from common.service import audit_service

logger = structlog.get_logger(__name__)


def get_claims(user: User) -> ClaimsSchema:
    """Return the claims of a user; users without a record get empty claims."""
    record = AuthorizationClaims.objects.filter(user_id=user.pk).only("claims").first()
    if record is None:
        return ClaimsSchema()
    return record.as_schema()


def _set_flag(flags: dict[UUID, bool], club_id: UUID, value: bool) -> bool:
    """Set or clear a club flag. Returns whether anything changed."""
    if value:
        if flags.get(club_id) is True:
            return False
        flags[club_id] = True
        return True
    return flags.pop(club_id, None) is not None


@transaction.atomic
def apply_membership_claims(
    user_id: UUID,
    club_id: UUID,
    *,
    is_member: bool,
    is_officer: bool,
    meta: dict[str, t.Any] | None = None,
) -> bool:
    """Recompute the claims of one user for one club, preserving every other claim.

    Officer implies member: callers pass ``is_officer`` only for approved memberships.

    Returns:
        True if the stored claims changed.
    """
    record, _created = AuthorizationClaims.objects.select_for_update().get_or_create(user_id=user_id)
    claims = record.as_schema()
    club_id = UUID(str(club_id))

    changed = _set_flag(claims.member_of_club, club_id, is_member)
    changed = _set_flag(claims.officer_of_club, club_id, is_officer and is_member) or changed
    if not changed:
        logger.debug("claims_unchanged", user_id=str(user_id), club_id=str(club_id))
        return False

    record.claims = claims.model_dump(mode="json")
    record.save(update_fields=["claims", "updated_at"])
    audit_service.record(
        audit_service.SYSTEM_MEMBERSHIP_CHANGE,
        "custom_claims_updated",
        "users",
        user_id,
        {"club_id": club_id, **(meta or {})},
    )
    logger.info(
        "claims_updated",
        user_id=str(user_id),
        club_id=str(club_id),
        is_member=is_member,
        is_officer=is_officer and is_member,
    )
    return True


@transaction.atomic
def set_super_admin(user: User, enabled: bool = True) -> ClaimsSchema:
    """Grant or revoke the super admin claim."""
    record, _created = AuthorizationClaims.objects.select_for_update().get_or_create(user=user)
    claims = record.as_schema()
    if claims.super_admin != enabled:
        claims.super_admin = enabled
        record.claims = claims.model_dump(mode="json")
        record.save(update_fields=["claims", "updated_at"])
        audit_service.record(
            "system_management", "super_admin_granted" if enabled else "super_admin_revoked", "users", user.pk
        )
        logger.info("super_admin_changed", user_id=str(user.pk), enabled=enabled)
    return claims
