"""Club lifecycle and the approval-request queue."""

from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify
from django.utils.translation import gettext as _

from accounts.models import University, User
from clubs.models import ApprovalRequest, Club
from clubs.service.membership_service import require_super_admin
from common.exceptions import FailedPreconditionError, InvalidArgumentError
from common.service import audit_service

logger = structlog.get_logger(__name__)


def _unique_slug(name: str) -> str:
    base = slugify(name) or "club"
    slug, suffix = base, 2
    while Club.objects.filter(slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


@transaction.atomic
def create_club(
    creator: User, name: str, description: str = "", university_ids: list[UUID] | None = None
) -> tuple[Club, ApprovalRequest]:
    """Create a club pending approval, together with its approval request."""
    require_super_admin(creator)
    if not name.strip():
        raise InvalidArgumentError(_("A club name is required."))
    universities = list(University.objects.filter(id__in=university_ids or []))
    if len(universities) != len(set(university_ids or [])):
        raise InvalidArgumentError(_("Unknown university."))

    club = Club.objects.create(
        name=name.strip(),
        slug=_unique_slug(name),
        description=description,
        created_by=creator,
        last_edited_by=str(creator.pk),
    )
    club.universities.set(universities)
    request = ApprovalRequest.objects.create(
        request_type=ApprovalRequest.RequestType.CLUB, resource_id=club.pk, club=club, requested_by=creator
    )
    audit_service.record(creator.pk, "club_created", "clubs", club.pk, {"approval_request_id": request.pk})
    logger.info("club_created", club_id=str(club.pk), approval_request_id=str(request.pk))
    return club, request


@transaction.atomic
def archive_club(club: Club, actor: User, reason: str = "") -> Club:
    require_super_admin(actor)
    club = Club.objects.select_for_update().get(pk=club.pk)
    if club.status == Club.Status.ARCHIVED:
        raise FailedPreconditionError(_("This club is already archived."))
    club.status = Club.Status.ARCHIVED
    club.archived_at = timezone.now()
    club.archive_reason = reason
    club.last_edited_by = str(actor.pk)
    club.save()
    audit_service.record(actor.pk, "club_archived", "clubs", club.pk, {"reason": reason})
    logger.info("club_archived", club_id=str(club.pk))
    return club


@transaction.atomic
def review_approval_request(
    request: ApprovalRequest, reviewer: User, decision: str, notes: str = ""
) -> ApprovalRequest:
    """Approve or reject a pending request.

    Approving a club request activates the club through the approval reactor.
    """
    require_super_admin(reviewer)
    if decision not in (ApprovalRequest.Status.APPROVED, ApprovalRequest.Status.REJECTED):
        raise InvalidArgumentError(_("Decision must be 'approved' or 'rejected'."))
    request = ApprovalRequest.objects.select_for_update().get(pk=request.pk)
    if request.status != ApprovalRequest.Status.PENDING:
        raise FailedPreconditionError(_("This request has already been reviewed."))

    request.status = decision
    request.reviewed_by = reviewer
    request.reviewed_at = timezone.now()
    request.notes = notes
    request.save()
    audit_service.record(
        reviewer.pk,
        f"approval_request_{decision}",
        "approvals",
        request.pk,
        {"request_type": request.request_type, "resource_id": request.resource_id},
    )
    logger.info("approval_request_reviewed", request_id=str(request.pk), decision=decision)
    return request


def activate_club_from_approval(request_id: UUID) -> Club | None:
    """Activate the club targeted by an approved club request.

    Requests without a club id are logged and skipped.
    """
    request = ApprovalRequest.objects.filter(pk=request_id).first()
    if request is None:
        logger.warning("approval_request_missing", request_id=str(request_id))
        return None
    club_id = request.target_club_id
    if club_id is None:
        logger.warning("approval_request_without_club", request_id=str(request_id))
        return None

    with transaction.atomic():
        club = Club.objects.select_for_update().filter(pk=club_id).first()
        if club is None:
            logger.warning("approval_request_club_missing", request_id=str(request_id), club_id=str(club_id))
            return None
        if club.status == Club.Status.ACTIVE:
            return club
        club.status = Club.Status.ACTIVE
        club.last_edited_by = audit_service.SYSTEM_CLUB_APPROVAL
        club.save()
    audit_service.record(
        audit_service.SYSTEM_CLUB_APPROVAL, "club_activated", "clubs", club.pk, {"approval_request_id": request.pk}
    )
    logger.info("club_activated", club_id=str(club.pk), request_id=str(request.pk))
    return club
