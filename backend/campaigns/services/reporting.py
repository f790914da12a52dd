"""Read-only aggregates for the client portal, admin analytics and public stats."""
from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List

from django.contrib.auth import get_user_model
from django.db.models import Count, Max, Min, Q, Sum

from backend.exceptions import NotFoundError, ServiceError
from campaigns.models import Campaign

ZERO = Decimal("0.00")
RECENT_SUBMISSION_LIMIT = 50
MIN_TOKEN_LENGTH = 10


class InvalidClientToken(ServiceError):
    default_code = "INVALID_TOKEN"


class ClientReportNotFound(NotFoundError):
    default_code = "REPORT_NOT_FOUND"


def _percent(part, whole) -> float:
    if not whole:
        return 0.0
    return round(float(Decimal(part) / Decimal(whole) * 100), 2)


def _views_gained(submission) -> int:
    clip = submission.clip
    if clip is None:
        return 0
    return max(0, clip.views - submission.initial_views)


def campaign_for_token(token: str) -> Campaign:
    if not token or len(token) < MIN_TOKEN_LENGTH:
        raise InvalidClientToken("Invalid access token.")
    campaign = Campaign.objects.filter(client_access_token=token, deleted_at__isnull=True).first()
    if campaign is None:
        raise ClientReportNotFound("Report not found.")
    return campaign


def build_client_report(campaign: Campaign) -> Dict[str, Any]:
    """Campaign performance summary shown to the brand behind ``campaign``.

    Rejected submissions count towards the status tallies but never towards
    view or earnings totals.
    """
    from submissions.models import ClipSubmission
    from submissions.social_urls import extract_handle

    submissions = list(
        ClipSubmission.objects.filter(campaign=campaign)
        .select_related("clip", "user")
        .order_by("-created_at")
    )

    counts = {status: 0 for status in ClipSubmission.Status.values}
    approved_views = 0
    pending_views = 0
    views_gained = 0
    earnings = ZERO
    platforms: Dict[str, Dict[str, Any]] = defaultdict(
        lambda: {"submissions": 0, "approved": 0, "views": 0, "views_gained": 0, "earnings": ZERO}
    )
    pages: Dict[str, Dict[str, Any]] = {}

    for submission in submissions:
        counts[submission.status] += 1
        if submission.status == ClipSubmission.Status.REJECTED:
            continue
        clip = submission.clip
        current_views = clip.views if clip else 0
        gained = _views_gained(submission)
        clip_earnings = clip.earnings if clip else ZERO

        platform = platforms[submission.platform]
        platform["submissions"] += 1

        if submission.status in (ClipSubmission.Status.APPROVED, ClipSubmission.Status.PAID):
            approved_views += current_views
            views_gained += gained
            earnings += clip_earnings
            platform["approved"] += 1
            platform["views"] += current_views
            platform["views_gained"] += gained
            platform["earnings"] += clip_earnings
        else:
            pending_views += current_views

        handle = extract_handle(submission.clip_url) or submission.user.username
        key = f"{submission.platform}:{handle.lower()}"
        page = pages.setdefault(
            key,
            {"handle": handle, "platform": submission.platform, "clips": 0, "views": 0, "earnings": ZERO},
        )
        page["clips"] += 1
        page["views"] += current_views
        page["earnings"] += clip_earnings

    effective = campaign.effective_budget
    return {
        "campaign": {
            "id": campaign.pk,
            "title": campaign.title,
            "creator": campaign.creator,
            "status": campaign.status,
            "start_date": campaign.start_date,
            "end_date": campaign.end_date,
            "completed_at": campaign.completed_at,
            "payout_rate": campaign.payout_rate,
            "target_platforms": campaign.target_platforms,
        },
        "budget": {
            "total": campaign.budget,
            "effective": effective,
            "spent": campaign.spent,
            "remaining": campaign.remaining_budget,
            "utilization": _percent(campaign.spent, effective),
        },
        "submissions": {
            "total": len(submissions),
            "approved": counts[ClipSubmission.Status.APPROVED] + counts[ClipSubmission.Status.PAID],
            "pending": counts[ClipSubmission.Status.PENDING],
            "rejected": counts[ClipSubmission.Status.REJECTED],
        },
        "totals": {
            "views": approved_views,
            "pending_views": pending_views,
            "views_gained": views_gained,
            "earnings": earnings,
            "cost_per_thousand_views": (
                (campaign.spent / Decimal(views_gained) * 1000).quantize(Decimal("0.01"))
                if views_gained
                else None
            ),
        },
        "platforms": dict(platforms),
        "pages": sorted(pages.values(), key=lambda page: page["views"], reverse=True),
        "recent_submissions": [
            {
                "id": submission.pk,
                "clip_url": submission.clip_url,
                "platform": submission.platform,
                "status": submission.status,
                "views": submission.clip.views if submission.clip else 0,
                "views_gained": _views_gained(submission),
                "submitted_at": submission.created_at,
            }
            for submission in submissions[:RECENT_SUBMISSION_LIMIT]
            if submission.status != ClipSubmission.Status.REJECTED
        ],
    }


def campaign_analytics(campaign: Campaign) -> Dict[str, Any]:
    """Admin view of one campaign's funnel and spend."""
    from submissions.models import ClipSubmission

    base = ClipSubmission.objects.filter(campaign=campaign)
    by_status = {row["status"]: row["count"] for row in base.values("status").annotate(count=Count("id"))}
    approved = base.filter(status__in=(ClipSubmission.Status.APPROVED, ClipSubmission.Status.PAID))
    totals = approved.aggregate(
        views=Sum("clip__views"),
        initial_views=Sum("initial_views"),
        earnings=Sum("clip__earnings"),
        clippers=Count("user", distinct=True),
        first_submission=Min("created_at"),
        last_submission=Max("created_at"),
    )
    by_platform = list(
        approved.values("platform")
        .annotate(
            submissions=Count("id"),
            views=Sum("clip__views"),
            earnings=Sum("clip__earnings"),
        )
        .order_by("platform")
    )
    top_clips = list(
        approved.filter(clip__isnull=False)
        .order_by("-clip__views")
        .values("id", "clip_url", "platform", "user__username", "clip__views", "clip__earnings")[:10]
    )
    return {
        "campaign_id": campaign.pk,
        "status": campaign.status,
        "budget": campaign.budget,
        "effective_budget": campaign.effective_budget,
        "spent": campaign.spent,
        "remaining": campaign.remaining_budget,
        "progress": campaign.progress_percentage,
        "submissions_by_status": {status: by_status.get(status, 0) for status in ClipSubmission.Status.values},
        "views": totals["views"] or 0,
        "views_gained": max(0, (totals["views"] or 0) - (totals["initial_views"] or 0)),
        "earnings": totals["earnings"] or ZERO,
        "clippers": totals["clippers"],
        "first_submission_at": totals["first_submission"],
        "last_submission_at": totals["last_submission"],
        "platforms": [
            {**row, "views": row["views"] or 0, "earnings": row["earnings"] or ZERO} for row in by_platform
        ],
        "top_clips": top_clips,
    }


def platform_overview() -> Dict[str, Any]:
    """Marketplace-wide admin numbers."""
    from payouts.models import PayoutRequest
    from submissions.models import Clip, ClipSubmission

    User = get_user_model()
    campaigns = Campaign.objects.filter(deleted_at__isnull=True, is_test=False)
    campaign_totals = campaigns.aggregate(
        budget=Sum("budget"),
        spent=Sum("spent"),
        active=Count("id", filter=Q(status=Campaign.Status.ACTIVE)),
        completed=Count("id", filter=Q(status=Campaign.Status.COMPLETED)),
    )
    submission_counts = {
        row["status"]: row["count"]
        for row in ClipSubmission.objects.filter(campaign__is_test=False)
        .values("status")
        .annotate(count=Count("id"))
    }
    return {
        "users": {
            "total": User.objects.count(),
            "clippers": User.objects.filter(role=User.Role.CLIPPER).count(),
            "admins": User.objects.filter(role=User.Role.ADMIN).count(),
        },
        "campaigns": {
            "active": campaign_totals["active"],
            "completed": campaign_totals["completed"],
            "total_budget": campaign_totals["budget"] or ZERO,
            "total_spent": campaign_totals["spent"] or ZERO,
        },
        "submissions": {status: submission_counts.get(status, 0) for status in ClipSubmission.Status.values},
        "views": Clip.objects.aggregate(total=Sum("views"))["total"] or 0,
        "outstanding_balances": User.objects.aggregate(total=Sum("total_earnings"))["total"] or ZERO,
        "pending_payouts": PayoutRequest.objects.filter(status__in=PayoutRequest.OPEN_STATUSES).aggregate(
            total=Sum("amount")
        )["total"] or ZERO,
    }


def public_stats() -> Dict[str, Any]:
    """Headline numbers for marketing pages."""
    from payouts.models import Payout
    from submissions.models import Clip

    User = get_user_model()
    live = Campaign.objects.filter(deleted_at__isnull=True, hidden=False, is_test=False)
    return {
        "active_campaigns": live.filter(status=Campaign.Status.ACTIVE).count(),
        "total_budget": live.aggregate(total=Sum("budget"))["total"] or ZERO,
        "total_paid_out": Payout.objects.filter(status=Payout.Status.COMPLETED).aggregate(
            total=Sum("amount")
        )["total"] or ZERO,
        "total_views": Clip.objects.aggregate(total=Sum("views"))["total"] or 0,
        "clippers": User.objects.filter(role=User.Role.CLIPPER, is_active=True).count(),
    }


def leaderboard(limit: int = 10) -> List[Dict[str, Any]]:
    User = get_user_model()
    rows = (
        User.objects.filter(role=User.Role.CLIPPER, is_active=True, total_views__gt=0)
        .order_by("-total_views")
        .values("id", "username", "display_name", "total_views")[:limit]
    )
    return [
        {**row, "display_name": row["display_name"] or row["username"]}
        for row in rows
    ]
