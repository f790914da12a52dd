"""Clip submission workflow: create, review, pay out and dashboards."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, Sum
from django.utils import timezone

from backend.exceptions import ConflictError, ForbiddenError, NotFoundError, ServiceError
from campaigns.models import Campaign, Platform
from campaigns.services import get_active_campaign, visible_campaigns
from notifications.models import Notification
from notifications.services import notify, notify_admins

from .models import Clip, ClipSubmission
from .social_urls import parse_social_url

LOGGER = logging.getLogger(__name__)

Status = ClipSubmission.Status
DEFAULT_REJECTION_REASON = "Rejected by admin"
REVIEWABLE_STATUSES = (Status.PENDING, Status.REJECTED)


class SubmissionError(ServiceError):
    default_code = "SUBMISSION_ERROR"


class SubmissionNotFound(NotFoundError):
    default_code = "SUBMISSION_NOT_FOUND"


class DuplicateSubmission(ConflictError):
    default_code = "DUPLICATE_SUBMISSION"


class InvalidSubmissionState(ConflictError):
    default_code = "INVALID_SUBMISSION_STATUS"


def normalize_platform(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = str(value).strip().upper()
    if value == "X":
        return Platform.TWITTER
    return value


def get_submission(submission_id, *, for_update: bool = False) -> ClipSubmission:
    qs = ClipSubmission.objects.select_related("campaign", "clip", "user")
    if for_update:
        qs = qs.select_for_update(of=("self",))
    try:
        return qs.get(pk=submission_id)
    except ClipSubmission.DoesNotExist:
        raise SubmissionNotFound("Submission not found.")


def is_duplicate_post(campaign, clip_url: str, parsed) -> bool:
    """Same URL, or another URL pointing at the same post on the same platform."""
    existing = ClipSubmission.objects.filter(campaign=campaign, platform=parsed.platform)
    if existing.filter(clip_url=clip_url).exists():
        return True
    for other_url in existing.filter(clip_url__contains=parsed.post_id).values_list("clip_url", flat=True):
        other = parse_social_url(other_url)
        if other.is_post and other.post_id == parsed.post_id:
            return True
    return False


def create_submission(user, campaign_id, clip_url: str, platform: Optional[str] = None) -> ClipSubmission:
    """Validate and store a clipper's submission as PENDING."""
    campaign = get_active_campaign(campaign_id)

    clip_url = (clip_url or "").strip()
    parsed = parse_social_url(clip_url)
    if not parsed.is_valid:
        raise SubmissionError(parsed.error or "Unsupported URL.", code="INVALID_CLIP_URL")
    if not parsed.is_post:
        raise SubmissionError(
            "Submit a link to a specific post, not a profile.",
            code="INVALID_CLIP_URL",
            details={"platform": parsed.platform},
        )

    declared = normalize_platform(platform)
    if declared and declared != parsed.platform:
        raise SubmissionError(
            f"URL is a {parsed.platform} link but {declared} was selected.",
            code="PLATFORM_MISMATCH",
        )

    allowed = [normalize_platform(p) for p in campaign.target_platforms or []]
    if allowed and parsed.platform not in allowed:
        raise SubmissionError(
            f"This campaign does not accept {parsed.platform} clips.",
            code="PLATFORM_NOT_ALLOWED",
            details={"allowed_platforms": allowed},
        )

    if is_duplicate_post(campaign, clip_url, parsed):
        raise DuplicateSubmission("This clip has already been submitted to the campaign.")

    try:
        with transaction.atomic():
            submission = ClipSubmission.objects.create(
                user=user,
                campaign=campaign,
                clip_url=clip_url,
                platform=parsed.platform,
            )
    except IntegrityError:
        raise DuplicateSubmission("This clip has already been submitted to the campaign.")

    LOGGER.info(
        "Submission created",
        extra={"submission_id": submission.pk, "campaign_id": campaign.pk, "user_id": user.pk},
    )
    notify_admins(
        Notification.Type.SYSTEM_UPDATE,
        "New clip submission",
        f'{user.username} submitted a {parsed.platform} clip to "{campaign.title}".',
        {"submission_id": submission.pk, "campaign_id": campaign.pk},
    )
    return submission


def _initial_scrape(url: str, platform: str, scraper=None):
    from tracking.scrapers import MultiPlatformScraper

    scraper = scraper or MultiPlatformScraper()
    content = scraper.scrape(url, platform)
    if not content.success:
        LOGGER.warning("Initial scrape failed", extra={"url": url, "error": content.error})
    return content


def approve_submission(submission_id, reviewer, *, scraper=None) -> ClipSubmission:
    """Approve a PENDING (or previously rejected) submission and start tracking its clip."""
    from tracking.models import ViewTracking

    submission = get_submission(submission_id)
    if submission.status not in REVIEWABLE_STATUSES:
        raise InvalidSubmissionState(f"Cannot approve a {submission.status} submission.")

    content = None
    if submission.clip_id is None:
        content = _initial_scrape(submission.clip_url, submission.platform, scraper)

    now = timezone.now()
    with transaction.atomic():
        submission = get_submission(submission_id, for_update=True)
        if submission.status not in REVIEWABLE_STATUSES:
            raise InvalidSubmissionState(f"Cannot approve a {submission.status} submission.")

        clip = submission.clip
        if clip is None:
            views = content.views if content is not None and content.success else 0
            clip = Clip.objects.create(
                user=submission.user,
                url=submission.clip_url,
                platform=submission.platform,
                title=(content.title if content is not None else "")[:300],
                views=views,
                likes=(content.likes or 0) if content is not None else 0,
                shares=(content.shares or 0) if content is not None else 0,
            )
            submission.clip = clip
            submission.initial_views = views
            if views > 0:
                ViewTracking.objects.create(
                    user=submission.user,
                    clip=clip,
                    views=views,
                    platform=clip.platform,
                    date=now.date(),
                    scraped_at=now,
                )
        elif clip.status != Clip.Status.ACTIVE:
            clip.status = Clip.Status.ACTIVE
            clip.save(update_fields=["status", "updated_at"])

        submission.status = Status.APPROVED
        submission.rejection_reason = None
        submission.reviewed_by = reviewer
        submission.reviewed_at = now
        submission.save()

    LOGGER.info(
        "Submission approved",
        extra={"submission_id": submission.pk, "initial_views": submission.initial_views, "actor_id": reviewer.pk},
    )
    notify(
        submission.user,
        Notification.Type.SUBMISSION_APPROVED,
        "Submission approved",
        f'Your clip for "{submission.campaign.title}" was approved. Views are now being tracked.',
        {"submission_id": submission.pk, "campaign_id": submission.campaign_id},
    )
    return submission


def reject_submission(submission_id, reviewer, reason: Optional[str] = None) -> ClipSubmission:
    with transaction.atomic():
        submission = get_submission(submission_id, for_update=True)
        if submission.status == Status.PAID:
            raise InvalidSubmissionState("Paid submissions cannot be rejected.")
        submission.status = Status.REJECTED
        submission.rejection_reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        submission.reviewed_by = reviewer
        submission.reviewed_at = timezone.now()
        submission.save()
        if submission.clip_id:
            Clip.objects.filter(pk=submission.clip_id).update(status=Clip.Status.INACTIVE)

    LOGGER.info("Submission rejected", extra={"submission_id": submission.pk, "actor_id": reviewer.pk})
    notify(
        submission.user,
        Notification.Type.SUBMISSION_REJECTED,
        "Submission rejected",
        f'Your clip for "{submission.campaign.title}" was rejected: {submission.rejection_reason}',
        {"submission_id": submission.pk, "campaign_id": submission.campaign_id},
    )
    return submission


def mark_submission_paid(submission_id, reviewer, payout_amount: Decimal) -> ClipSubmission:
    """Record a manual payout for an APPROVED submission and charge it to the campaign."""
    if payout_amount is None or payout_amount <= 0:
        raise SubmissionError("Payout amount must be greater than zero.", code="INVALID_PAYOUT_AMOUNT")

    with transaction.atomic():
        submission = get_submission(submission_id, for_update=True)
        if submission.status != Status.APPROVED:
            raise InvalidSubmissionState("Only approved submissions can be marked as paid.")
        campaign = Campaign.objects.select_for_update().get(pk=submission.campaign_id)
        campaign.spent += payout_amount
        campaign.save(update_fields=["spent", "updated_at"])

        submission.status = Status.PAID
        submission.payout_amount = payout_amount
        submission.final_earnings = submission.clip.earnings if submission.clip_id else payout_amount
        submission.paid_at = timezone.now()
        submission.reviewed_by = reviewer
        submission.save()

    LOGGER.info(
        "Submission marked paid",
        extra={"submission_id": submission.pk, "amount": str(payout_amount), "actor_id": reviewer.pk},
    )
    notify(
        submission.user,
        Notification.Type.PAYOUT_PROCESSED,
        "Submission paid",
        f'You were paid ${payout_amount} for your clip in "{submission.campaign.title}".',
        {"submission_id": submission.pk, "amount": str(payout_amount)},
    )
    return submission


def delete_submission(submission: ClipSubmission, actor) -> None:
    """Owners may delete submissions that have not earned; admins may delete any."""
    is_admin = getattr(actor, "is_admin", False)
    if not is_admin and submission.user_id != actor.pk:
        raise ForbiddenError("You can only delete your own submissions.")
    clip = submission.clip
    if not is_admin and clip is not None and clip.earnings > 0:
        raise ConflictError(
            "Submissions that have already earned cannot be deleted.",
            code="SUBMISSION_HAS_EARNINGS",
        )
    submission_id = submission.pk
    with transaction.atomic():
        submission.delete()
        if clip is not None:
            clip.delete()
    LOGGER.info("Submission deleted", extra={"submission_id": submission_id, "actor_id": actor.pk})


def views_gained(submission: ClipSubmission) -> int:
    if submission.clip_id is None:
        return 0
    return max(0, submission.clip.views - submission.initial_views)


def clipper_dashboard(user) -> Dict[str, Any]:
    from payouts.models import PayoutRequest

    submissions = ClipSubmission.objects.filter(user=user)
    by_status = {value: 0 for value in Status.values}
    for row in submissions.values("status").annotate(total=Count("id")):
        by_status[row["status"]] = row["total"]

    clips = Clip.objects.filter(user=user)
    clip_totals = clips.aggregate(earned=Sum("earnings"), views=Sum("views"))
    pending_payout = PayoutRequest.objects.filter(
        user=user, status__in=PayoutRequest.OPEN_STATUSES
    ).aggregate(total=Sum("amount"))["total"] or Decimal("0.00")

    recent = []
    for submission in submissions.select_related("campaign", "clip").order_by("-created_at")[:5]:
        recent.append({
            "id": submission.pk,
            "campaign_id": submission.campaign_id,
            "campaign_title": submission.campaign.title,
            "platform": submission.platform,
            "status": submission.status,
            "clip_url": submission.clip_url,
            "views": submission.clip.views if submission.clip_id else 0,
            "earnings": submission.clip.earnings if submission.clip_id else Decimal("0.00"),
            "created_at": submission.created_at,
        })

    return {
        "balance": user.total_earnings,
        "total_views": user.total_views,
        "lifetime_earnings": clip_totals["earned"] or Decimal("0.00"),
        "tracked_views": clip_totals["views"] or 0,
        "clips": clips.count(),
        "submissions": by_status,
        "total_submissions": sum(by_status.values()),
        "active_campaigns": visible_campaigns().filter(status=Campaign.Status.ACTIVE).count(),
        "pending_payout_amount": pending_payout,
        "recent_submissions": recent,
    }


def clip_analytics(submission: ClipSubmission) -> Dict[str, Any]:
    from tracking.history import clip_view_history

    clip = submission.clip
    return {
        "submission_id": submission.pk,
        "status": submission.status,
        "clip_url": submission.clip_url,
        "platform": submission.platform,
        "initial_views": submission.initial_views,
        "current_views": clip.views if clip else 0,
        "views_gained": views_gained(submission),
        "earnings": clip.earnings if clip else Decimal("0.00"),
        "history": clip_view_history(clip) if clip else [],
    }
