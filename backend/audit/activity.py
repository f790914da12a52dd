"""Admin activity feed built from the marketplace tables rather than the request log."""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone

from .models import ApiAccessLog

USER_SIGNUP = "USER_SIGNUP"
CLIP_SUBMISSION = "CLIP_SUBMISSION"
PAYOUT_REQUEST = "PAYOUT_REQUEST"
VIEW_UPDATE = "VIEW_UPDATE"


def _person(user) -> Dict[str, Any]:
    return {"id": user.pk, "username": user.username, "email": user.email}


def recent_activity(limit: int = 20) -> List[Dict[str, Any]]:
    """Newest signups, submissions, payout requests and view snapshots, merged by time."""
    from payouts.models import PayoutRequest
    from submissions.models import ClipSubmission
    from tracking.models import ViewTracking

    User = get_user_model()
    events: List[Dict[str, Any]] = []

    for user in User.objects.order_by("-created_at")[:limit]:
        events.append({
            "type": USER_SIGNUP,
            "timestamp": user.created_at,
            "data": {**_person(user), "role": user.role},
        })

    submissions = ClipSubmission.objects.select_related("user", "campaign").order_by("-created_at")[:limit]
    for submission in submissions:
        events.append({
            "type": CLIP_SUBMISSION,
            "timestamp": submission.created_at,
            "data": {
                "submission_id": submission.pk,
                "status": submission.status,
                "platform": submission.platform,
                "clip_url": submission.clip_url,
                "campaign_title": submission.campaign.title,
                "user": _person(submission.user),
            },
        })

    for request in PayoutRequest.objects.select_related("user").order_by("-requested_at")[:limit]:
        events.append({
            "type": PAYOUT_REQUEST,
            "timestamp": request.requested_at,
            "data": {
                "payout_request_id": request.pk,
                "amount": str(request.amount),
                "status": request.status,
                "payment_method": request.payment_method,
                "user": _person(request.user),
            },
        })

    for snapshot in ViewTracking.objects.select_related("user", "clip").order_by("-scraped_at")[:limit]:
        events.append({
            "type": VIEW_UPDATE,
            "timestamp": snapshot.scraped_at,
            "data": {
                "clip_id": snapshot.clip_id,
                "url": snapshot.clip.url,
                "views": snapshot.views,
                "platform": snapshot.platform,
                "user": _person(snapshot.user),
            },
        })

    events.sort(key=lambda event: event["timestamp"], reverse=True)
    return events[:limit]


def request_summary(hours: int = 24) -> Dict[str, Any]:
    """Request volume and error counts for the trailing window."""
    since = timezone.now() - timedelta(hours=hours)
    logs = ApiAccessLog.objects.filter(timestamp__gte=since)
    totals = logs.aggregate(
        total=Count("id"),
        client_errors=Count("id", filter=Q(status_code__gte=400, status_code__lt=500)),
        server_errors=Count("id", filter=Q(status_code__gte=500)),
    )
    failing = (
        logs.filter(status_code__gte=500)
        .values("path")
        .annotate(count=Count("id"))
        .order_by("-count", "path")[:5]
    )
    return {
        "since": since,
        "hours": hours,
        **totals,
        "active_users": logs.exclude(user=None).values("user").distinct().count(),
        "top_failing_paths": list(failing),
    }
