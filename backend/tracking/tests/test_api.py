from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from tracking.history import clip_view_history, clip_view_stats
from tracking.models import CronJobLog, ViewTracking

URL = "https://www.tiktok.com/@clipper/video/7300000000000000001"


@pytest.mark.django_db
def test_cron_endpoint_requires_bearer_secret(api_client, settings):
    settings.CRON_SECRET = "s3cret"

    with patch("tracking.views.run_view_tracking_job") as job:
        missing = api_client.get("/api/cron/view-tracking/")
        wrong = api_client.get("/api/cron/view-tracking/", HTTP_AUTHORIZATION="Bearer nope")

    assert missing.status_code == 401
    assert wrong.status_code == 401
    job.assert_not_called()


@pytest.mark.django_db
def test_cron_endpoint_runs_job_with_valid_secret(api_client, settings):
    settings.CRON_SECRET = "s3cret"

    with patch("tracking.views.run_view_tracking_job", return_value={"status": "SUCCESS", "processed": 3}):
        get_response = api_client.get("/api/cron/view-tracking/", HTTP_AUTHORIZATION="Bearer s3cret")
        post_response = api_client.post("/api/cron/view-tracking/", HTTP_AUTHORIZATION="Bearer s3cret")

    assert get_response.status_code == 200
    assert get_response.json()["processed"] == 3
    assert post_response.status_code == 200


@pytest.mark.django_db
def test_cron_endpoint_reports_failures_as_json(api_client, settings):
    settings.CRON_SECRET = ""

    with patch("tracking.views.run_campaign_activation_job", side_effect=RuntimeError("db down")):
        response = api_client.post("/api/cron/campaign-activation/")

    assert response.status_code == 500
    assert response.json() == {"status": "FAILED", "error": "db down"}


@pytest.mark.django_db
def test_cron_logs_are_admin_only(api_client, clipper, admin_user):
    CronJobLog.objects.create(job_name="view-tracking", status=CronJobLog.Status.SUCCESS, started_at=timezone.now())

    api_client.force_authenticate(clipper)
    assert api_client.get("/api/tracking/cron-logs/").status_code == 403

    api_client.force_authenticate(admin_user)
    response = api_client.get("/api/tracking/cron-logs/", {"status": "SUCCESS"})
    assert response.status_code == 200
    payload = response.json()
    results = payload["results"] if isinstance(payload, dict) else payload
    assert [row["job_name"] for row in results] == ["view-tracking"]


@pytest.mark.django_db
def test_manual_trigger_conflicts_when_already_running(api_client, admin_user):
    api_client.force_authenticate(admin_user)

    with patch("tracking.views.run_view_tracking_job", return_value={"status": "SKIPPED", "reason": "already_running"}):
        response = api_client.post("/api/tracking/cron-logs/trigger/")

    assert response.status_code == 409


@pytest.mark.django_db
def test_refresh_scrapes_single_clip(api_client, admin_user, clipper, campaign, make_tracked_submission,
                                     stub_scraper):
    submission = make_tracked_submission(clipper, campaign, url=URL)
    api_client.force_authenticate(admin_user)

    with patch("tracking.tracker.MultiPlatformScraper", lambda: stub_scraper({URL: 3000})):
        response = api_client.post(f"/api/tracking/clips/{submission.clip_id}/refresh/")

    assert response.status_code == 200
    body = response.json()
    assert body["current_views"] == 3000
    assert body["earnings_added"] == "6.00"


@pytest.mark.django_db
def test_refresh_returns_bad_gateway_when_scrape_fails(api_client, admin_user, clipper, campaign,
                                                       make_tracked_submission, stub_scraper):
    submission = make_tracked_submission(clipper, campaign, url=URL)
    api_client.force_authenticate(admin_user)

    with patch("tracking.tracker.MultiPlatformScraper", lambda: stub_scraper(error="rate limited")):
        response = api_client.post(f"/api/tracking/clips/{submission.clip_id}/refresh/")

    assert response.status_code == 502
    assert response.json()["error"] == "rate limited"


@pytest.fixture
def clip_with_history(clipper, campaign, make_tracked_submission):
    now = timezone.now()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    submission = make_tracked_submission(clipper, campaign, url=URL, initial_views=100)
    clip = submission.clip
    for views, moment in (
        (150, today_start - timedelta(days=1, hours=1)),
        (300, today_start - timedelta(hours=1)),
        (500, now - timedelta(seconds=1)),
    ):
        ViewTracking.objects.create(user=clipper, clip=clip, views=views, platform=clip.platform,
                                    date=moment.date(), scraped_at=moment)
    clip.views = 500
    clip.save()
    return clip, now


@pytest.mark.django_db
def test_clip_view_history_reports_gain_per_snapshot(clip_with_history):
    clip, _ = clip_with_history

    history = clip_view_history(clip)

    assert [row["views"] for row in history] == [150, 300, 500]
    assert [row["gained"] for row in history] == [50, 150, 200]


@pytest.mark.django_db
def test_clip_view_stats(clip_with_history):
    clip, now = clip_with_history

    stats = clip_view_stats(clip, now=now)

    assert stats["current_views"] == 500
    assert stats["today"] == 200
    assert stats["yesterday"] == 150
    assert stats["week"] == 400
    assert stats["average_daily"] == 57.14
    assert stats["since_submission"] == 400
    assert stats["snapshots"] == 3


@pytest.mark.django_db
def test_clip_stats_endpoint(api_client, admin_user, clip_with_history):
    clip, _ = clip_with_history
    api_client.force_authenticate(admin_user)

    response = api_client.get(f"/api/tracking/clips/{clip.pk}/stats/")

    assert response.status_code == 200
    assert response.json()["since_submission"] == 400
