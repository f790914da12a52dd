"""Scheduled job runners recorded in ``CronJobLog``."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from campaigns.services import activate_scheduled_campaigns, auto_complete_campaigns

from .models import CronJobLog
from .observability.logging import log_tracking_event
from .observability.metrics import LAST_RUN_CLIPS, TRACKING_RUN_DURATION, TRACKING_RUN_RESULT
from .tracker import ViewTracker

logger = logging.getLogger(__name__)

VIEW_TRACKING_JOB = "view-tracking"
CAMPAIGN_ACTIVATION_JOB = "campaign-activation"


def acquire_job_lock(job_name: str, lock_minutes: Optional[int] = None) -> Optional[CronJobLog]:
    """Open a RUNNING log for ``job_name`` unless a recent one is still running.

    Returns ``None`` (after recording a SKIPPED row) when the lock is held.
    RUNNING rows older than the lock window are closed as FAILED.
    """
    if lock_minutes is None:
        lock_minutes = settings.VIEW_TRACKING_LOCK_MINUTES
    now = timezone.now()
    cutoff = now - timedelta(minutes=lock_minutes)

    with transaction.atomic():
        running = CronJobLog.objects.select_for_update().filter(
            job_name=job_name, status=CronJobLog.Status.RUNNING
        )
        if running.filter(started_at__gte=cutoff).exists():
            CronJobLog.objects.create(
                job_name=job_name,
                status=CronJobLog.Status.SKIPPED,
                started_at=now,
                completed_at=now,
                duration_seconds=0,
                details={"reason": "already_running"},
            )
            logger.info(f"{job_name} skipped: another run is in progress")
            return None

        stale = running.filter(started_at__lt=cutoff).update(
            status=CronJobLog.Status.FAILED,
            completed_at=now,
            error_message="Run did not finish within the lock window",
        )
        if stale:
            logger.warning(f"{job_name}: closed {stale} stale RUNNING log(s)")

        return CronJobLog.objects.create(job_name=job_name, status=CronJobLog.Status.RUNNING, started_at=now)


def _close_log(log: CronJobLog, status: str, **fields) -> CronJobLog:
    finished = timezone.now()
    log.status = status
    log.completed_at = finished
    log.duration_seconds = (finished - log.started_at).total_seconds()
    for name, value in fields.items():
        setattr(log, name, value)
    log.save()
    return log


def run_view_tracking_job(tracker: Optional[ViewTracker] = None) -> Dict[str, Any]:
    """Track views for every eligible clip, then complete exhausted campaigns."""
    log = acquire_job_lock(VIEW_TRACKING_JOB)
    if log is None:
        TRACKING_RUN_RESULT.labels(status=CronJobLog.Status.SKIPPED).inc()
        return {"status": CronJobLog.Status.SKIPPED, "reason": "already_running"}

    tracker = tracker or ViewTracker()
    try:
        result = tracker.run()
        completed = auto_complete_campaigns()
    except Exception as exc:
        logger.exception("View tracking job failed")
        _close_log(log, CronJobLog.Status.FAILED, error_message=str(exc))
        TRACKING_RUN_RESULT.labels(status=CronJobLog.Status.FAILED).inc()
        raise

    if result.processed and result.failed == result.processed:
        status = CronJobLog.Status.FAILED
    elif result.failed:
        status = CronJobLog.Status.PARTIAL_SUCCESS
    else:
        status = CronJobLog.Status.SUCCESS

    completed_ids = [check.campaign_id for check in completed]
    _close_log(
        log,
        status,
        clips_processed=result.processed,
        clips_successful=result.successful,
        clips_failed=result.failed,
        earnings_calculated=result.earnings_added,
        details={
            "views_gained": result.views_gained,
            "stopped_reason": result.stopped_reason,
            "completed_campaigns": completed_ids,
            "errors": result.errors[:20],
        },
        error_message=f"{result.failed} clip(s) failed" if result.failed else None,
    )

    TRACKING_RUN_RESULT.labels(status=status).inc()
    TRACKING_RUN_DURATION.observe(log.duration_seconds)
    LAST_RUN_CLIPS.labels(outcome="successful").set(result.successful)
    LAST_RUN_CLIPS.labels(outcome="failed").set(result.failed)

    log_tracking_event(
        message="View tracking job finished",
        run_id=log.pk,
        extra={"status": status, "completed_campaigns": completed_ids},
    )
    return {"status": status, "log_id": log.pk, **result.as_dict(), "completed_campaigns": completed_ids}


def run_campaign_activation_job() -> Dict[str, Any]:
    """Promote due SCHEDULED campaigns and record the run."""
    log = acquire_job_lock(CAMPAIGN_ACTIVATION_JOB)
    if log is None:
        return {"status": CronJobLog.Status.SKIPPED, "reason": "already_running"}
    try:
        stats = activate_scheduled_campaigns()
    except Exception as exc:
        logger.exception("Campaign activation job failed")
        _close_log(log, CronJobLog.Status.FAILED, error_message=str(exc))
        raise
    _close_log(log, CronJobLog.Status.SUCCESS, details=stats)
    return {"status": CronJobLog.Status.SUCCESS, "log_id": log.pk, **stats}


def cleanup_cron_logs(days: Optional[int] = None) -> int:
    """Delete finished job logs older than ``days``."""
    if days is None:
        days = settings.CRON_LOG_RETENTION_DAYS
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = CronJobLog.objects.filter(started_at__lt=cutoff).exclude(
        status=CronJobLog.Status.RUNNING
    ).delete()
    logger.info(f"Deleted {deleted} cron log(s) older than {days} day(s)")
    return deleted
