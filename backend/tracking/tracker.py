"""View tracking and earnings accrual.

Each pass scrapes the current view count of every trackable clip, appends a
snapshot and converts view growth into clipper earnings. Earnings are the
target for the clip's total views since submission (``views / 1000 *
payout_rate``, capped per clip at a share of the campaign budget) minus what
the clip has already earned, never more than the campaign has left. Running a
pass twice with unchanged views therefore accrues nothing.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Case, F, IntegerField, Max, Value, When
from django.utils import timezone

from campaigns.models import Campaign
from submissions.models import Clip, ClipSubmission

from .models import ViewTracking
from .observability.logging import log_tracking_event
from .observability.metrics import EARNINGS_ACCRUED, VIEWS_GAINED
from .scrapers import MultiPlatformScraper, ScrapedContent

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
THOUSAND = Decimal(1000)
ZERO = Decimal("0.00")

TRACKED_SUBMISSION_STATUSES = (ClipSubmission.Status.APPROVED, ClipSubmission.Status.PENDING)
TRACKED_CAMPAIGN_STATUSES = (Campaign.Status.ACTIVE, Campaign.Status.COMPLETED)


@dataclass(frozen=True)
class ClipTrackingResult:
    submission_id: int
    clip_id: Optional[int]
    success: bool
    previous_views: int = 0
    current_views: int = 0
    views_gained: int = 0
    earnings_added: Decimal = ZERO
    provider: str = ""
    error: Optional[str] = None


@dataclass
class TrackingRunResult:
    processed: int = 0
    successful: int = 0
    failed: int = 0
    earnings_added: Decimal = ZERO
    views_gained: int = 0
    stopped_reason: str = "all_done"
    duration_seconds: float = 0.0
    errors: List[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "earnings_added": str(self.earnings_added),
            "views_gained": self.views_gained,
            "stopped_reason": self.stopped_reason,
            "duration_seconds": round(self.duration_seconds, 2),
            "errors": self.errors[:20],
        }


def target_earnings(current_views: int, initial_views: int, payout_rate: Decimal,
                    effective_budget: Decimal, cap_ratio: Optional[Decimal] = None) -> Decimal:
    """What a clip should have earned in total at ``current_views``."""
    if cap_ratio is None:
        cap_ratio = settings.CLIP_EARNINGS_CAP_RATIO
    views = max(0, current_views - initial_views)
    target = (Decimal(views) / THOUSAND * payout_rate).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    cap = (effective_budget * cap_ratio).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return max(ZERO, min(target, cap))


def accrual_amount(target: Decimal, already_earned: Decimal, remaining_budget: Decimal) -> Decimal:
    """Portion of ``target`` still owed, limited by the remaining campaign budget."""
    delta = max(ZERO, target - already_earned)
    return min(delta, max(ZERO, remaining_budget))


def eligible_submissions():
    return ClipSubmission.objects.filter(
        clip__isnull=False,
        status__in=TRACKED_SUBMISSION_STATUSES,
        campaign__status__in=TRACKED_CAMPAIGN_STATUSES,
        campaign__is_test=False,
        campaign__deleted_at__isnull=True,
    )


def clips_to_track(limit: Optional[int] = None):
    """Trackable submissions, ACTIVE campaigns first, then never tracked, then stalest."""
    qs = (
        eligible_submissions()
        .select_related("clip", "campaign", "user")
        .annotate(
            campaign_rank=Case(
                When(campaign__status=Campaign.Status.ACTIVE, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            ),
            last_scraped_at=Max("clip__view_tracking__scraped_at"),
        )
        .order_by("campaign_rank", F("last_scraped_at").asc(nulls_first=True), "id")
    )
    if limit is not None:
        qs = qs[:limit]
    return qs


def record_views(submission: ClipSubmission, content: ScrapedContent) -> ClipTrackingResult:
    """Persist a successful scrape and accrue earnings for it atomically."""
    User = get_user_model()
    now = timezone.now()

    with transaction.atomic():
        clip = Clip.objects.select_for_update().get(pk=submission.clip_id)
        campaign = Campaign.objects.select_for_update().get(pk=submission.campaign_id)
        status = ClipSubmission.objects.values_list("status", flat=True).get(pk=submission.pk)

        previous_views = (
            ViewTracking.objects.filter(clip=clip)
            .order_by("-scraped_at", "-id")
            .values_list("views", flat=True)
            .first()
        )
        if previous_views is None:
            previous_views = submission.initial_views

        # View counts never move backwards, even when a provider under-reports.
        new_views = max(clip.views, content.views)
        views_gained = max(0, new_views - previous_views)

        ViewTracking.objects.create(
            user_id=clip.user_id,
            clip=clip,
            views=new_views,
            platform=clip.platform,
            date=now.date(),
            scraped_at=now,
        )

        clip.views = new_views
        if content.likes is not None:
            clip.likes = content.likes
        if content.shares is not None:
            clip.shares = content.shares
        if content.title and not clip.title:
            clip.title = content.title[:300]
        clip_fields = ["views", "likes", "shares", "title", "updated_at"]

        earned = ZERO
        approved = status == ClipSubmission.Status.APPROVED
        # Completed campaigns stop earning but every tracked clip still counts toward total_views.
        counts_views = approved or campaign.status == Campaign.Status.COMPLETED
        if counts_views:
            user = User.objects.select_for_update().get(pk=clip.user_id)
            user_fields = []

            if approved and campaign.status == Campaign.Status.ACTIVE:
                target = target_earnings(
                    new_views, submission.initial_views, campaign.payout_rate, campaign.effective_budget
                )
                earned = accrual_amount(target, clip.earnings, campaign.remaining_budget)
                if earned > 0:
                    clip.earnings += earned
                    clip_fields.append("earnings")
                    campaign.spent += earned
                    campaign.save(update_fields=["spent", "updated_at"])
                    user.total_earnings += earned
                    user_fields.append("total_earnings")

            if views_gained:
                user.total_views += views_gained
                user_fields.append("total_views")
            if user_fields:
                user.save(update_fields=user_fields + ["updated_at"])

        clip.save(update_fields=clip_fields)

    if earned:
        EARNINGS_ACCRUED.labels(platform=clip.platform).inc(float(earned))
    if views_gained:
        VIEWS_GAINED.labels(platform=clip.platform).inc(views_gained)

    log_tracking_event(
        message="Clip views recorded",
        clip_id=clip.pk,
        campaign_id=submission.campaign_id,
        extra={
            "views": new_views,
            "views_gained": views_gained,
            "earnings_added": str(earned),
            "provider": content.provider,
        },
    )
    return ClipTrackingResult(
        submission_id=submission.pk,
        clip_id=clip.pk,
        success=True,
        previous_views=previous_views,
        current_views=new_views,
        views_gained=views_gained,
        earnings_added=earned,
        provider=content.provider,
    )


class ViewTracker:
    """Sequential, time boxed tracking pass over the trackable clips."""

    def __init__(self, scraper: Optional[MultiPlatformScraper] = None, *, max_duration: Optional[float] = None,
                 max_clips: Optional[int] = None, delay: Optional[float] = None,
                 min_remaining: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.scraper = scraper or MultiPlatformScraper()
        self.max_duration = max_duration if max_duration is not None else settings.VIEW_TRACKING_MAX_DURATION_SECONDS
        self.max_clips = max_clips if max_clips is not None else settings.VIEW_TRACKING_MAX_CLIPS
        self.delay = delay if delay is not None else settings.VIEW_TRACKING_DELAY_SECONDS
        self.min_remaining = (
            min_remaining if min_remaining is not None else settings.VIEW_TRACKING_MIN_REMAINING_SECONDS
        )
        self.clock = clock
        self.sleep = sleep

    def track_submission(self, submission: ClipSubmission) -> ClipTrackingResult:
        clip = submission.clip
        content = self.scraper.scrape(clip.url, clip.platform)
        if not content.success:
            log_tracking_event(
                message="Clip scrape failed",
                clip_id=clip.pk,
                campaign_id=submission.campaign_id,
                level=logging.WARNING,
                extra={"error": content.error},
            )
            return ClipTrackingResult(
                submission_id=submission.pk,
                clip_id=clip.pk,
                success=False,
                previous_views=clip.views,
                current_views=clip.views,
                error=content.error or "No views returned",
            )
        return record_views(submission, content)

    def run(self, submissions=None) -> TrackingRunResult:
        started = self.clock()
        result = TrackingRunResult()

        if submissions is None:
            eligible_total = eligible_submissions().count()
            batch = list(clips_to_track(limit=self.max_clips))
        else:
            batch = list(submissions)
            eligible_total = len(batch)

        logger.info(f"View tracking started: {len(batch)} of {eligible_total} clip(s) queued")

        for index, submission in enumerate(batch):
            elapsed = self.clock() - started
            if self.max_duration - elapsed < self.min_remaining:
                result.stopped_reason = "time_limit"
                break

            try:
                outcome = self.track_submission(submission)
            except Exception as exc:
                logger.exception(f"Unexpected error tracking submission {submission.pk}")
                outcome = ClipTrackingResult(
                    submission_id=submission.pk,
                    clip_id=submission.clip_id,
                    success=False,
                    error=str(exc),
                )

            result.processed += 1
            if outcome.success:
                result.successful += 1
                result.earnings_added += outcome.earnings_added
                result.views_gained += outcome.views_gained
            else:
                result.failed += 1
                result.errors.append({"submission_id": outcome.submission_id, "error": outcome.error})

            if self.delay and index < len(batch) - 1:
                self.sleep(self.delay)
        else:
            result.stopped_reason = "clip_limit" if eligible_total > len(batch) else "all_done"

        result.duration_seconds = self.clock() - started
        logger.info(
            f"View tracking finished: processed={result.processed} successful={result.successful} "
            f"failed={result.failed} earnings={result.earnings_added} reason={result.stopped_reason}"
        )
        return result


def track_single_clip(submission: ClipSubmission, scraper: Optional[MultiPlatformScraper] = None) -> ClipTrackingResult:
    """Refresh one clip outside the scheduled run (admin action)."""
    return ViewTracker(scraper=scraper, delay=0).track_submission(submission)
