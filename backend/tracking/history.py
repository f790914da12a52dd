"""Read side of the snapshot table: per-clip history and growth stats."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from django.utils import timezone

from submissions.models import Clip

from .models import ViewTracking


def _baseline(clip: Clip) -> int:
    submission = getattr(clip, "submission", None)
    return submission.initial_views if submission is not None else 0


def views_as_of(clip: Clip, moment: datetime) -> int:
    """Views of the last snapshot strictly before ``moment``."""
    views = (
        ViewTracking.objects.filter(clip=clip, scraped_at__lt=moment)
        .order_by("-scraped_at", "-id")
        .values_list("views", flat=True)
        .first()
    )
    return views if views is not None else _baseline(clip)


def clip_view_history(clip: Clip) -> List[Dict[str, Any]]:
    snapshots = ViewTracking.objects.filter(clip=clip).order_by("scraped_at", "id")
    history = []
    previous = _baseline(clip)
    for snapshot in snapshots:
        history.append({
            "views": snapshot.views,
            "gained": max(0, snapshot.views - previous),
            "date": snapshot.date,
            "scraped_at": snapshot.scraped_at,
        })
        previous = snapshot.views
    return history


def clip_view_stats(clip: Clip, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or timezone.now()
    today_start = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    yesterday_start = today_start - timedelta(days=1)
    week_start = now - timedelta(days=7)

    current = clip.views
    at_today = views_as_of(clip, today_start)
    at_yesterday = views_as_of(clip, yesterday_start)
    at_week = views_as_of(clip, week_start)
    week_gain = max(0, current - at_week)

    return {
        "clip_id": clip.pk,
        "current_views": current,
        "today": max(0, current - at_today),
        "yesterday": max(0, at_today - at_yesterday),
        "week": week_gain,
        "average_daily": round(week_gain / 7, 2),
        "since_submission": max(0, current - _baseline(clip)),
        "snapshots": ViewTracking.objects.filter(clip=clip).count(),
    }
