"""Campaign status machine, archiving, activation and spend bookkeeping."""
from __future__ import annotations

import logging
import secrets
from decimal import Decimal
from typing import Dict, Optional

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from backend.exceptions import ConflictError, NotFoundError, ServiceError
from campaigns.models import Campaign
from notifications.models import Notification
from notifications.services import notify_users

LOGGER = logging.getLogger(__name__)

Status = Campaign.Status

ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    Status.DRAFT: frozenset({Status.SCHEDULED, Status.ACTIVE, Status.CANCELLED}),
    Status.SCHEDULED: frozenset({Status.DRAFT, Status.ACTIVE, Status.CANCELLED}),
    Status.ACTIVE: frozenset({Status.PAUSED, Status.COMPLETED, Status.CANCELLED}),
    Status.PAUSED: frozenset({Status.ACTIVE, Status.COMPLETED, Status.CANCELLED}),
    Status.COMPLETED: frozenset({Status.ACTIVE}),
    Status.CANCELLED: frozenset({Status.DRAFT}),
}


class CampaignError(ServiceError):
    default_code = "CAMPAIGN_ERROR"


class CampaignNotFound(NotFoundError):
    default_code = "CAMPAIGN_NOT_FOUND"


class InvalidStatusTransition(CampaignError):
    default_code = "INVALID_STATUS_TRANSITION"


class CampaignDeleteBlocked(ConflictError):
    default_code = "CAMPAIGN_HAS_EARNINGS"


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def initial_status(requested: Optional[str], start_date) -> str:
    """Status for a newly created campaign."""
    if requested == Status.DRAFT:
        return Status.DRAFT
    if start_date and start_date > timezone.now():
        return Status.SCHEDULED
    # SCHEDULED requires a future start_date.
    return Status.ACTIVE


def change_status(campaign: Campaign, target: str, *, reason: Optional[str] = None) -> Campaign:
    """Move ``campaign`` to ``target`` honouring the transition table.

    Completing stamps ``completed_at``/``completion_reason``; re-activating a
    completed campaign clears them.
    """
    current = campaign.status
    if current == target:
        return campaign
    if not can_transition(current, target):
        raise InvalidStatusTransition(
            f"Cannot change campaign status from {current} to {target}.",
            details={"from": current, "to": target, "allowed": sorted(ALLOWED_TRANSITIONS.get(current, ()))},
        )

    update_fields = ["status", "updated_at"]
    if target == Status.COMPLETED:
        campaign.completed_at = timezone.now()
        campaign.completion_reason = reason or "Manually completed by admin"
        update_fields += ["completed_at", "completion_reason"]
    elif current == Status.COMPLETED:
        campaign.completed_at = None
        campaign.completion_reason = None
        campaign.budget_reached_at = None
        campaign.budget_reached_views = None
        update_fields += ["completed_at", "completion_reason", "budget_reached_at", "budget_reached_views"]

    campaign.status = target
    campaign.save(update_fields=update_fields)
    LOGGER.info(
        "Campaign status changed",
        extra={"campaign_id": campaign.pk, "from_status": current, "to_status": target},
    )
    if target == Status.ACTIVE and current in (Status.DRAFT, Status.SCHEDULED):
        announce_campaign(campaign)
    return campaign


def archive_campaign(campaign: Campaign) -> Campaign:
    campaign.deleted_at = timezone.now()
    campaign.status = Status.CANCELLED
    campaign.save(update_fields=["deleted_at", "status", "updated_at"])
    LOGGER.info("Campaign archived", extra={"campaign_id": campaign.pk})
    return campaign


def restore_campaign(campaign: Campaign) -> Campaign:
    if not campaign.is_archived:
        raise CampaignError("Only archived campaigns can be restored.", code="CAMPAIGN_NOT_ARCHIVED")
    campaign.deleted_at = None
    campaign.status = Status.DRAFT
    campaign.save(update_fields=["deleted_at", "status", "updated_at"])
    LOGGER.info("Campaign restored", extra={"campaign_id": campaign.pk})
    return campaign


def delete_campaign(campaign: Campaign, *, hard: bool = False) -> Optional[Campaign]:
    """Archive by default. Hard deletion is limited to test campaigns or ones nothing was earned on."""
    if not hard:
        return archive_campaign(campaign)

    from submissions.models import Clip

    has_earnings = Clip.objects.filter(submission__campaign=campaign, earnings__gt=0).exists()
    if has_earnings and not campaign.is_test:
        raise CampaignDeleteBlocked(
            "Campaign has clip earnings and can only be archived.",
            details={"campaign_id": campaign.pk},
        )
    campaign_id = campaign.pk
    campaign.delete()
    LOGGER.info("Campaign permanently deleted", extra={"campaign_id": campaign_id})
    return None


def set_team_update(campaign: Campaign, message: Optional[str]) -> Campaign:
    campaign.team_update = message or None
    campaign.team_update_at = timezone.now() if message else None
    campaign.save(update_fields=["team_update", "team_update_at", "updated_at"])
    return campaign


def ensure_client_token(campaign: Campaign, *, regenerate: bool = False) -> str:
    if campaign.client_access_token and not regenerate:
        return campaign.client_access_token
    campaign.client_access_token = secrets.token_urlsafe(24)
    campaign.save(update_fields=["client_access_token", "updated_at"])
    return campaign.client_access_token


def announce_campaign(campaign: Campaign) -> None:
    """Tell clippers a campaign just opened for submissions."""
    if campaign.hidden or campaign.is_test:
        return
    from django.contrib.auth import get_user_model

    User = get_user_model()
    clippers = User.objects.filter(is_active=True, role=User.Role.CLIPPER)
    notify_users(
        clippers,
        Notification.Type.NEW_CAMPAIGN_AVAILABLE,
        "New campaign available",
        f'"{campaign.title}" is now live. Submit your clips to start earning.',
        {"campaign_id": campaign.pk},
    )


def activate_scheduled_campaigns(now=None) -> Dict[str, int]:
    """Promote SCHEDULED campaigns whose start date has passed."""
    now = now or timezone.now()
    due = Campaign.objects.filter(
        status=Status.SCHEDULED,
        deleted_at__isnull=True,
        start_date__isnull=False,
        start_date__lte=now,
    )
    stats = {"activated": 0, "total": due.count()}
    for campaign in due:
        with transaction.atomic():
            locked = Campaign.objects.select_for_update().get(pk=campaign.pk)
            if locked.status != Status.SCHEDULED:
                continue
            change_status(locked, Status.ACTIVE)
        stats["activated"] += 1
    if stats["activated"]:
        LOGGER.info("Scheduled campaigns activated", extra=stats)
    return stats


def actual_campaign_spend(campaign: Campaign) -> Decimal:
    """Clip earnings of approved or paid submissions plus manual payouts on PAID ones."""
    from submissions.models import ClipSubmission

    earnings = (
        ClipSubmission.objects.filter(
            campaign=campaign,
            status__in=(ClipSubmission.Status.APPROVED, ClipSubmission.Status.PAID),
            clip__isnull=False,
        ).aggregate(total=Sum("clip__earnings"))["total"]
        or Decimal("0.00")
    )
    payouts = (
        ClipSubmission.objects.filter(
            campaign=campaign,
            status=ClipSubmission.Status.PAID,
        ).aggregate(total=Sum("payout_amount"))["total"]
        or Decimal("0.00")
    )
    return earnings + payouts


def sync_campaign_spend(campaign: Campaign) -> Dict[str, Decimal]:
    """Recompute ``spent`` and correct drift."""
    with transaction.atomic():
        locked = Campaign.objects.select_for_update().get(pk=campaign.pk)
        actual = actual_campaign_spend(locked)
        previous = locked.spent
        if previous != actual:
            locked.spent = actual
            locked.save(update_fields=["spent", "updated_at"])
            LOGGER.warning(
                "Campaign spend corrected",
                extra={"campaign_id": locked.pk, "previous": str(previous), "actual": str(actual)},
            )
    return {"previous": previous, "actual": actual, "difference": actual - previous}


def sync_all_campaigns() -> Dict[str, int]:
    stats = {"checked": 0, "corrected": 0}
    for campaign in Campaign.objects.filter(deleted_at__isnull=True).exclude(status=Status.DRAFT):
        result = sync_campaign_spend(campaign)
        stats["checked"] += 1
        if result["difference"]:
            stats["corrected"] += 1
    return stats


def visible_campaigns():
    """Campaigns clippers and the public may browse."""
    return Campaign.objects.filter(deleted_at__isnull=True, hidden=False, is_test=False)


def get_active_campaign(campaign_id) -> Campaign:
    campaign = (
        Campaign.objects.filter(Q(pk=campaign_id), deleted_at__isnull=True, status=Status.ACTIVE).first()
    )
    if campaign is None:
        raise CampaignNotFound("Campaign not found or not accepting submissions.")
    return campaign
