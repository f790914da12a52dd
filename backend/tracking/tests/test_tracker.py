from decimal import Decimal

import pytest

from campaigns.models import Campaign
from submissions.models import ClipSubmission
from tracking.models import ViewTracking
from tracking.scrapers import ScrapedContent
from tracking.tracker import ViewTracker, accrual_amount, clips_to_track, record_views, target_earnings

TIKTOK_URL = "https://www.tiktok.com/@clipper/video/{}"


def scraped(views, url=TIKTOK_URL.format(1)):
    return ScrapedContent(platform="TIKTOK", url=url, views=views, likes=5, shares=1, provider="stub")


def test_target_earnings_pays_per_thousand_views_since_submission():
    assert target_earnings(11000, 1000, Decimal("2.00"), Decimal("1000.00"), Decimal("0.30")) == Decimal("20.00")


def test_target_earnings_capped_per_clip():
    target = target_earnings(10_000_000, 0, Decimal("2.00"), Decimal("1000.00"), Decimal("0.30"))
    assert target == Decimal("300.00")


def test_target_earnings_never_negative_when_views_drop_below_baseline():
    assert target_earnings(500, 1000, Decimal("2.00"), Decimal("1000.00"), Decimal("0.30")) == Decimal("0.00")


def test_accrual_amount_limits_to_remaining_budget():
    assert accrual_amount(Decimal("20.00"), Decimal("5.00"), Decimal("100.00")) == Decimal("15.00")
    assert accrual_amount(Decimal("20.00"), Decimal("5.00"), Decimal("4.00")) == Decimal("4.00")
    assert accrual_amount(Decimal("20.00"), Decimal("25.00"), Decimal("100.00")) == Decimal("0.00")


@pytest.mark.django_db
def test_record_views_accrues_earnings_across_clip_campaign_and_user(clipper, campaign, make_tracked_submission):
    submission = make_tracked_submission(clipper, campaign, url=TIKTOK_URL.format(1), initial_views=1000)

    result = record_views(submission, scraped(6000))

    assert result.success
    assert result.previous_views == 1000
    assert result.views_gained == 5000
    assert result.earnings_added == Decimal("10.00")

    submission.clip.refresh_from_db()
    campaign.refresh_from_db()
    clipper.refresh_from_db()
    assert submission.clip.views == 6000
    assert submission.clip.earnings == Decimal("10.00")
    assert campaign.spent == Decimal("10.00")
    assert clipper.total_earnings == Decimal("10.00")
    assert clipper.total_views == 5000
    assert ViewTracking.objects.filter(clip=submission.clip).count() == 1


@pytest.mark.django_db
def test_record_views_is_idempotent_for_unchanged_views(clipper, campaign, make_tracked_submission):
    submission = make_tracked_submission(clipper, campaign, initial_views=0)

    record_views(submission, scraped(5000))
    second = record_views(submission, scraped(5000))

    assert second.views_gained == 0
    assert second.earnings_added == Decimal("0.00")
    campaign.refresh_from_db()
    clipper.refresh_from_db()
    assert campaign.spent == Decimal("10.00")
    assert clipper.total_earnings == Decimal("10.00")
    assert ViewTracking.objects.filter(clip=submission.clip).count() == 2


@pytest.mark.django_db
def test_record_views_never_moves_backwards(clipper, campaign, make_tracked_submission):
    submission = make_tracked_submission(clipper, campaign, initial_views=0)
    record_views(submission, scraped(5000))

    result = record_views(submission, scraped(3000))

    assert result.current_views == 5000
    submission.clip.refresh_from_db()
    assert submission.clip.views == 5000
    assert ViewTracking.objects.filter(clip=submission.clip).order_by("-id").first().views == 5000


@pytest.mark.django_db
def test_record_views_respects_per_clip_cap(clipper, make_campaign, make_tracked_submission):
    campaign = make_campaign(budget=Decimal("100.00"), payout_rate=Decimal("50.00"))
    submission = make_tracked_submission(clipper, campaign)

    result = record_views(submission, scraped(1_000_000))

    assert result.earnings_added == Decimal("30.00")
    campaign.refresh_from_db()
    assert campaign.spent == Decimal("30.00")


@pytest.mark.django_db
def test_record_views_stops_at_remaining_budget(clipper, make_campaign, make_tracked_submission):
    campaign = make_campaign(budget=Decimal("1000.00"), spent=Decimal("995.00"))
    submission = make_tracked_submission(clipper, campaign)

    result = record_views(submission, scraped(10_000))

    assert result.earnings_added == Decimal("5.00")
    campaign.refresh_from_db()
    assert campaign.spent == Decimal("1000.00")
    assert campaign.remaining_budget == Decimal("0.00")


@pytest.mark.django_db
def test_reserved_amount_is_excluded_from_budget(clipper, make_campaign, make_tracked_submission):
    campaign = make_campaign(budget=Decimal("100.00"), reserved_amount=Decimal("90.00"))
    submission = make_tracked_submission(clipper, campaign)

    result = record_views(submission, scraped(100_000))

    # 30% of the 10.00 effective budget
    assert result.earnings_added == Decimal("3.00")


@pytest.mark.django_db
def test_completed_campaign_tracks_views_without_earning(clipper, make_campaign, make_tracked_submission):
    campaign = make_campaign(status=Campaign.Status.COMPLETED)
    submission = make_tracked_submission(clipper, campaign)

    result = record_views(submission, scraped(4000))

    assert result.earnings_added == Decimal("0.00")
    assert result.views_gained == 4000
    clipper.refresh_from_db()
    campaign.refresh_from_db()
    assert clipper.total_views == 4000
    assert clipper.total_earnings == Decimal("0.00")
    assert campaign.spent == Decimal("0.00")


@pytest.mark.django_db
def test_pending_submission_records_views_only(clipper, campaign, make_tracked_submission):
    submission = make_tracked_submission(clipper, campaign, status=ClipSubmission.Status.PENDING)

    result = record_views(submission, scraped(4000))

    assert result.success
    assert result.earnings_added == Decimal("0.00")
    clipper.refresh_from_db()
    assert clipper.total_views == 0
    submission.clip.refresh_from_db()
    assert submission.clip.views == 4000


@pytest.mark.django_db
def test_pending_submission_in_completed_campaign_counts_views(clipper, make_campaign, make_tracked_submission):
    completed = make_campaign(status=Campaign.Status.COMPLETED)
    submission = make_tracked_submission(clipper, completed, status=ClipSubmission.Status.PENDING)

    result = record_views(submission, scraped(4000))

    assert result.earnings_added == Decimal("0.00")
    clipper.refresh_from_db()
    assert clipper.total_views == 4000
    assert clipper.total_earnings == Decimal("0.00")

    record_views(submission, scraped(4500))

    clipper.refresh_from_db()
    assert clipper.total_views == 4500


@pytest.mark.django_db
def test_clips_to_track_orders_active_campaigns_and_untracked_first(clipper, make_campaign, make_tracked_submission):
    active = make_campaign()
    completed = make_campaign(status=Campaign.Status.COMPLETED)
    make_campaign(status=Campaign.Status.PAUSED)
    done = make_tracked_submission(clipper, completed, url=TIKTOK_URL.format(1))
    tracked = make_tracked_submission(clipper, active, url=TIKTOK_URL.format(2))
    fresh = make_tracked_submission(clipper, active, url=TIKTOK_URL.format(3))
    make_tracked_submission(clipper, active, url=TIKTOK_URL.format(4), status=ClipSubmission.Status.REJECTED)
    record_views(tracked, scraped(100, url=TIKTOK_URL.format(2)))

    ordered = [submission.pk for submission in clips_to_track()]

    assert ordered == [fresh.pk, tracked.pk, done.pk]


class SteppingClock:
    def __init__(self, step):
        self.step = step
        self.now = 0.0

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.mark.django_db
def test_run_stops_when_time_budget_is_nearly_spent(clipper, campaign, make_tracked_submission, stub_scraper):
    urls = [TIKTOK_URL.format(i) for i in range(1, 5)]
    for url in urls:
        make_tracked_submission(clipper, campaign, url=url)
    scraper = stub_scraper({url: 1000 for url in urls})
    tracker = ViewTracker(scraper, max_duration=100, min_remaining=20, max_clips=10, delay=0,
                          clock=SteppingClock(30))

    result = tracker.run()

    assert result.stopped_reason == "time_limit"
    assert result.processed == 2
    assert len(scraper.calls) == 2


@pytest.mark.django_db
def test_run_reports_clip_limit(clipper, campaign, make_tracked_submission, stub_scraper):
    urls = [TIKTOK_URL.format(i) for i in range(1, 4)]
    for url in urls:
        make_tracked_submission(clipper, campaign, url=url)
    tracker = ViewTracker(stub_scraper({url: 1000 for url in urls}), max_duration=300, max_clips=2, delay=0)

    result = tracker.run()

    assert result.processed == 2
    assert result.stopped_reason == "clip_limit"


@pytest.mark.django_db
def test_run_counts_failures_and_keeps_going(clipper, campaign, make_tracked_submission, stub_scraper):
    ok_url, bad_url = TIKTOK_URL.format(1), TIKTOK_URL.format(2)
    make_tracked_submission(clipper, campaign, url=ok_url)
    make_tracked_submission(clipper, campaign, url=bad_url)
    slept = []
    tracker = ViewTracker(stub_scraper({ok_url: 2000}), max_duration=300, max_clips=10, delay=0.5,
                          sleep=slept.append)

    result = tracker.run()

    assert result.processed == 2
    assert result.successful == 1
    assert result.failed == 1
    assert result.earnings_added == Decimal("4.00")
    assert result.stopped_reason == "all_done"
    assert result.errors[0]["error"] == "no data"
    assert slept == [0.5]


@pytest.mark.django_db
def test_run_survives_scraper_exceptions(clipper, campaign, make_tracked_submission):
    make_tracked_submission(clipper, campaign)

    class ExplodingScraper:
        def scrape(self, url, platform=None):
            raise RuntimeError("provider crashed")

    result = ViewTracker(ExplodingScraper(), max_duration=300, delay=0).run()

    assert result.failed == 1
    assert "provider crashed" in result.errors[0]["error"]
