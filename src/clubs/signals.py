"""Reactive triggers for membership and approval-request writes."""

import typing as t

import structlog
from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from clubs.models import ApprovalRequest, Membership
from clubs.service import club_service
from clubs.service.membership_service import membership_claim_flags
from clubs.tasks import sync_membership_claims

logger = structlog.get_logger(__name__)


@receiver(pre_save, sender=Membership)
def capture_membership_old_state(sender: type[Membership], instance: Membership, **kwargs: t.Any) -> None:
    """Remember status and role before the write so post_save can compare."""
    instance._old_claim_state = (  # type: ignore[attr-defined]
        Membership.objects.filter(pk=instance.pk).values_list("status", "role").first()
    )


def _schedule_claims_sync(membership: Membership, before: dict[str, t.Any] | None, after: dict[str, t.Any]) -> None:
    user_id, club_id = str(membership.user_id), str(membership.club_id)
    logger.info("membership_claims_sync_scheduled", user_id=user_id, club_id=club_id, before=before, after=after)
    transaction.on_commit(lambda: sync_membership_claims.delay(user_id, club_id))


@receiver(post_save, sender=Membership)
def handle_membership_change(
    sender: type[Membership], instance: Membership, created: bool, **kwargs: t.Any
) -> None:
    """Schedule a claims recomputation when the change affects the derived flags."""
    old: tuple[str, str] | None = getattr(instance, "_old_claim_state", None)
    before = {"status": old[0], "role": old[1]} if old else None
    after = {"status": instance.status, "role": instance.role}
    old_flags = membership_claim_flags(*(old or (None, None)))
    new_flags = membership_claim_flags(instance.status, instance.role)
    if old_flags == new_flags:
        logger.debug("membership_change_without_claim_effect", membership_id=str(instance.pk))
        return
    _schedule_claims_sync(instance, before, after)


@receiver(post_delete, sender=Membership)
def handle_membership_delete(sender: type[Membership], instance: Membership, **kwargs: t.Any) -> None:
    """A deleted membership grants nothing."""
    _schedule_claims_sync(instance, {"status": instance.status, "role": instance.role}, {})


@receiver(pre_save, sender=ApprovalRequest)
def capture_approval_old_status(sender: type[ApprovalRequest], instance: ApprovalRequest, **kwargs: t.Any) -> None:
    instance._old_status = (  # type: ignore[attr-defined]
        ApprovalRequest.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


@receiver(post_save, sender=ApprovalRequest)
def handle_approval_request_approved(
    sender: type[ApprovalRequest], instance: ApprovalRequest, created: bool, **kwargs: t.Any
) -> None:
    """Activate the club once its approval request becomes approved."""
    if instance.request_type != ApprovalRequest.RequestType.CLUB:
        return
    old_status = getattr(instance, "_old_status", None)
    if instance.status != ApprovalRequest.Status.APPROVED or old_status == ApprovalRequest.Status.APPROVED:
        return
    request_id = instance.pk
    transaction.on_commit(lambda: club_service.activate_club_from_approval(request_id))
