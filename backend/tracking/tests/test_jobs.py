from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.utils import timezone

from campaigns.models import Campaign
from tracking.jobs import (
    VIEW_TRACKING_JOB,
    acquire_job_lock,
    cleanup_cron_logs,
    run_campaign_activation_job,
    run_view_tracking_job,
)
from tracking.models import CronJobLog
from tracking.tracker import ViewTracker

URL = "https://www.tiktok.com/@clipper/video/7300000000000000001"


@pytest.mark.django_db
def test_recent_running_log_blocks_second_run():
    CronJobLog.objects.create(job_name=VIEW_TRACKING_JOB, status=CronJobLog.Status.RUNNING,
                              started_at=timezone.now())

    summary = run_view_tracking_job(tracker=ViewTracker(scraper=object(), delay=0))

    assert summary == {"status": "SKIPPED", "reason": "already_running"}
    skipped = CronJobLog.objects.get(status=CronJobLog.Status.SKIPPED)
    assert skipped.details["reason"] == "already_running"


@pytest.mark.django_db
def test_stale_running_log_is_closed_and_lock_taken():
    stale = CronJobLog.objects.create(job_name=VIEW_TRACKING_JOB, status=CronJobLog.Status.RUNNING,
                                      started_at=timezone.now() - timedelta(hours=2))

    log = acquire_job_lock(VIEW_TRACKING_JOB, lock_minutes=20)

    assert log is not None
    assert log.status == CronJobLog.Status.RUNNING
    stale.refresh_from_db()
    assert stale.status == CronJobLog.Status.FAILED
    assert stale.completed_at is not None


@pytest.mark.django_db
def test_job_records_run_and_completes_exhausted_campaign(clipper, make_campaign, make_tracked_submission,
                                                          stub_scraper):
    campaign = make_campaign(budget=Decimal("10.00"), spent=Decimal("9.00"))
    make_tracked_submission(clipper, campaign, url=URL)
    tracker = ViewTracker(stub_scraper({URL: 1000}), max_duration=300, delay=0)

    summary = run_view_tracking_job(tracker=tracker)

    assert summary["status"] == CronJobLog.Status.SUCCESS
    assert summary["processed"] == 1
    assert summary["earnings_added"] == "1.00"
    assert summary["completed_campaigns"] == [campaign.pk]

    campaign.refresh_from_db()
    assert campaign.status == Campaign.Status.COMPLETED
    assert campaign.budget_reached_at is not None

    log = CronJobLog.objects.get(pk=summary["log_id"])
    assert log.status == CronJobLog.Status.SUCCESS
    assert log.clips_successful == 1
    assert log.earnings_calculated == Decimal("1.00")
    assert log.details["completed_campaigns"] == [campaign.pk]


@pytest.mark.django_db
def test_job_marks_all_failed_run_as_failed(clipper, campaign, make_tracked_submission, stub_scraper):
    make_tracked_submission(clipper, campaign, url=URL)

    summary = run_view_tracking_job(tracker=ViewTracker(stub_scraper(error="blocked"), delay=0))

    assert summary["status"] == CronJobLog.Status.FAILED
    log = CronJobLog.objects.get(pk=summary["log_id"])
    assert log.clips_failed == 1
    assert log.error_message == "1 clip(s) failed"


@pytest.mark.django_db
def test_job_with_nothing_to_track_succeeds(stub_scraper):
    summary = run_view_tracking_job(tracker=ViewTracker(stub_scraper(), delay=0))

    assert summary["status"] == CronJobLog.Status.SUCCESS
    assert summary["processed"] == 0
    assert summary["stopped_reason"] == "all_done"


@pytest.mark.django_db
def test_campaign_activation_job_promotes_due_campaigns(make_campaign):
    due = make_campaign(status=Campaign.Status.SCHEDULED, start_date=timezone.now() - timedelta(minutes=1))
    later = make_campaign(status=Campaign.Status.SCHEDULED, start_date=timezone.now() + timedelta(days=1))

    summary = run_campaign_activation_job()

    assert summary["status"] == CronJobLog.Status.SUCCESS
    assert summary["activated"] == 1
    due.refresh_from_db()
    later.refresh_from_db()
    assert due.status == Campaign.Status.ACTIVE
    assert later.status == Campaign.Status.SCHEDULED


@pytest.mark.django_db
def test_cleanup_keeps_recent_and_running_logs():
    old = timezone.now() - timedelta(days=60)
    CronJobLog.objects.create(job_name=VIEW_TRACKING_JOB, status=CronJobLog.Status.SUCCESS, started_at=old)
    running = CronJobLog.objects.create(job_name=VIEW_TRACKING_JOB, status=CronJobLog.Status.RUNNING,
                                        started_at=old)
    recent = CronJobLog.objects.create(job_name=VIEW_TRACKING_JOB, status=CronJobLog.Status.SUCCESS,
                                       started_at=timezone.now())

    assert cleanup_cron_logs(days=30) == 1
    assert set(CronJobLog.objects.values_list("pk", flat=True)) == {running.pk, recent.pk}


@pytest.mark.django_db
def test_track_views_command_refreshes_single_clip(monkeypatch, clipper, campaign, make_tracked_submission,
                                                   stub_scraper, capsys):
    submission = make_tracked_submission(clipper, campaign, url=URL)
    monkeypatch.setattr("tracking.tracker.MultiPlatformScraper", lambda: stub_scraper({URL: 2500}))

    call_command("track_views", clip=submission.clip_id)

    assert "0 -> 2500 views" in capsys.readouterr().out
    submission.clip.refresh_from_db()
    assert submission.clip.views == 2500
