"""Budget-driven campaign completion."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from campaigns.models import Campaign
from notifications.models import Notification
from notifications.services import notify_users

from .lifecycle import CampaignError

LOGGER = logging.getLogger(__name__)

BUDGET_EXHAUSTED_REASON = "Budget exhausted"


@dataclass(frozen=True)
class CompletionCheck:
    campaign_id: int
    title: str
    budget: Decimal
    spent: Decimal
    progress: float
    should_complete: bool
    reason: Optional[str]


def _threshold() -> Decimal:
    return Decimal(str(getattr(settings, "CAMPAIGN_COMPLETION_THRESHOLD", "1.00")))


def evaluate(campaign: Campaign) -> CompletionCheck:
    effective = campaign.effective_budget
    should_complete = effective > 0 and campaign.spent >= effective * _threshold()
    reason = None
    if should_complete:
        reason = f"{BUDGET_EXHAUSTED_REASON}: ${campaign.spent} of ${effective} spent"
    return CompletionCheck(
        campaign_id=campaign.pk,
        title=campaign.title,
        budget=effective,
        spent=campaign.spent,
        progress=campaign.progress_percentage,
        should_complete=should_complete,
        reason=reason,
    )


def check_campaign_completion(campaign_id: Optional[int] = None) -> List[CompletionCheck]:
    qs = Campaign.objects.filter(status=Campaign.Status.ACTIVE, deleted_at__isnull=True)
    if campaign_id is not None:
        qs = qs.filter(pk=campaign_id)
    return [evaluate(campaign) for campaign in qs]


def _current_views(campaign: Campaign) -> int:
    from submissions.models import ClipSubmission

    return (
        ClipSubmission.objects.filter(
            campaign=campaign,
            status=ClipSubmission.Status.APPROVED,
            clip__isnull=False,
        ).aggregate(total=Sum("clip__views"))["total"]
        or 0
    )


def _notify_participants(campaign: Campaign) -> int:
    from submissions.models import ClipSubmission

    User = get_user_model()
    participant_ids = (
        ClipSubmission.objects.filter(
            campaign=campaign,
            status__in=(ClipSubmission.Status.APPROVED, ClipSubmission.Status.PENDING),
        )
        .values_list("user_id", flat=True)
        .distinct()
    )
    recipients = User.objects.filter(pk__in=list(participant_ids))
    created = notify_users(
        recipients,
        Notification.Type.CAMPAIGN_COMPLETED,
        "Campaign completed",
        f'"{campaign.title}" has reached its budget and is now complete. Views are no longer earning.',
        {"campaign_id": campaign.pk},
    )
    return len(created)


def complete_campaign(campaign: Campaign, reason: str, *, budget_reached: bool = False) -> Campaign:
    """Complete ``campaign`` under a row lock and notify its clippers.

    ``budget_reached`` records the budget-reached marker even when the
    configured threshold completed the campaign before spent hit the budget.
    """
    with transaction.atomic():
        locked = Campaign.objects.select_for_update().get(pk=campaign.pk)
        if locked.status == Campaign.Status.COMPLETED:
            raise CampaignError("Campaign is already completed.", code="CAMPAIGN_ALREADY_COMPLETED")
        now = timezone.now()
        locked.status = Campaign.Status.COMPLETED
        locked.completed_at = now
        locked.completion_reason = reason
        update_fields = ["status", "completed_at", "completion_reason", "updated_at"]
        reached = budget_reached or locked.spent >= locked.effective_budget
        if reached and locked.budget_reached_at is None:
            locked.budget_reached_at = now
            locked.budget_reached_views = _current_views(locked)
            update_fields += ["budget_reached_at", "budget_reached_views"]
        locked.save(update_fields=update_fields)

    notified = _notify_participants(locked)
    LOGGER.info(
        "Campaign completed",
        extra={"campaign_id": locked.pk, "reason": reason, "notified": notified},
    )
    return locked


def auto_complete_campaigns() -> List[CompletionCheck]:
    """Complete every active campaign whose budget is exhausted."""
    completed = []
    for check in check_campaign_completion():
        if not check.should_complete:
            continue
        try:
            complete_campaign(Campaign.objects.get(pk=check.campaign_id), check.reason, budget_reached=True)
        except CampaignError:
            # Completed concurrently
            continue
        completed.append(check)
    return completed


def manually_complete_campaign(campaign: Campaign, reason: Optional[str] = None) -> Campaign:
    text = reason.strip() if reason else "no reason given"
    return complete_campaign(campaign, f"Manually completed by admin: {text}")


def near_completion_campaigns(threshold: float = 80.0) -> List[CompletionCheck]:
    return [
        check
        for check in check_campaign_completion()
        if check.progress >= threshold and not check.should_complete
    ]
