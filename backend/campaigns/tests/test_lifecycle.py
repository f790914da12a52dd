from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from campaigns.models import Campaign
from campaigns.services import (
    CampaignDeleteBlocked,
    CampaignError,
    InvalidStatusTransition,
    actual_campaign_spend,
    auto_complete_campaigns,
    can_transition,
    change_status,
    check_campaign_completion,
    delete_campaign,
    initial_status,
    manually_complete_campaign,
    near_completion_campaigns,
    restore_campaign,
    sync_campaign_spend,
)
from notifications.models import Notification
from submissions.models import ClipSubmission

Status = Campaign.Status


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        (Status.DRAFT, Status.ACTIVE, True),
        (Status.ACTIVE, Status.PAUSED, True),
        (Status.PAUSED, Status.ACTIVE, True),
        (Status.COMPLETED, Status.ACTIVE, True),
        (Status.CANCELLED, Status.ACTIVE, False),
        (Status.COMPLETED, Status.PAUSED, False),
        (Status.ACTIVE, Status.DRAFT, False),
    ],
)
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_initial_status_schedules_future_campaigns():
    assert initial_status(None, None) == Status.ACTIVE
    assert initial_status(Status.ACTIVE, timezone.now() + timedelta(days=2)) == Status.SCHEDULED
    assert initial_status(Status.DRAFT, timezone.now() + timedelta(days=2)) == Status.DRAFT


def test_scheduled_request_without_future_start_goes_live():
    assert initial_status(Status.SCHEDULED, None) == Status.ACTIVE
    assert initial_status(Status.SCHEDULED, timezone.now() - timedelta(hours=1)) == Status.ACTIVE
    assert initial_status(Status.PAUSED, None) == Status.ACTIVE
    assert initial_status(Status.SCHEDULED, timezone.now() + timedelta(hours=1)) == Status.SCHEDULED


@pytest.mark.django_db
def test_invalid_transition_raises(make_campaign):
    campaign = make_campaign(status=Status.CANCELLED)

    with pytest.raises(InvalidStatusTransition) as exc:
        change_status(campaign, Status.ACTIVE)

    assert exc.value.details["allowed"] == [Status.DRAFT]


@pytest.mark.django_db
def test_activating_draft_announces_to_clippers(make_campaign, clipper):
    campaign = make_campaign(status=Status.DRAFT)

    change_status(campaign, Status.ACTIVE)

    assert Notification.objects.filter(user=clipper, type=Notification.Type.NEW_CAMPAIGN_AVAILABLE).exists()


@pytest.mark.django_db
def test_reactivating_completed_campaign_clears_completion(make_campaign):
    campaign = make_campaign()
    manually_complete_campaign(campaign, "Brand asked to stop")
    campaign.refresh_from_db()
    assert campaign.completion_reason == "Manually completed by admin: Brand asked to stop"

    change_status(campaign, Status.ACTIVE)

    campaign.refresh_from_db()
    assert campaign.completed_at is None
    assert campaign.completion_reason is None


@pytest.mark.django_db
def test_auto_completion_uses_effective_budget(make_campaign, clipper, make_tracked_submission):
    exhausted = make_campaign(budget=Decimal("100.00"), reserved_amount=Decimal("20.00"), spent=Decimal("80.00"))
    make_tracked_submission(clipper, exhausted, views=4000)
    running = make_campaign(budget=Decimal("100.00"), spent=Decimal("85.00"))

    completed = auto_complete_campaigns()

    assert [check.campaign_id for check in completed] == [exhausted.pk]
    exhausted.refresh_from_db()
    running.refresh_from_db()
    assert exhausted.status == Status.COMPLETED
    assert exhausted.completion_reason.startswith("Budget exhausted")
    assert exhausted.budget_reached_views == 4000
    assert running.status == Status.ACTIVE
    assert Notification.objects.filter(user=clipper, type=Notification.Type.CAMPAIGN_COMPLETED).exists()
    assert [check.campaign_id for check in near_completion_campaigns(80.0)] == [running.pk]


@pytest.mark.django_db
def test_completion_threshold_is_configurable(make_campaign, clipper, make_tracked_submission, settings):
    settings.CAMPAIGN_COMPLETION_THRESHOLD = "0.90"
    campaign = make_campaign(budget=Decimal("100.00"), spent=Decimal("91.00"))
    make_tracked_submission(clipper, campaign, views=2500)

    [check] = check_campaign_completion(campaign.pk)
    assert check.should_complete

    assert [done.campaign_id for done in auto_complete_campaigns()] == [campaign.pk]

    campaign.refresh_from_db()
    assert campaign.status == Status.COMPLETED
    assert campaign.budget_reached_at is not None
    assert campaign.budget_reached_views == 2500


@pytest.mark.django_db
def test_manual_completion_below_budget_has_no_budget_marker(make_campaign):
    campaign = make_campaign(budget=Decimal("100.00"), spent=Decimal("40.00"))

    completed = manually_complete_campaign(campaign, "Brand paused the launch")

    assert completed.budget_reached_at is None
    assert completed.budget_reached_views is None


@pytest.mark.django_db
def test_completing_twice_is_an_error(make_campaign):
    campaign = make_campaign()
    manually_complete_campaign(campaign)

    with pytest.raises(CampaignError) as exc:
        manually_complete_campaign(campaign)

    assert exc.value.code == "CAMPAIGN_ALREADY_COMPLETED"


@pytest.mark.django_db
def test_delete_archives_by_default_and_can_restore(make_campaign):
    campaign = make_campaign()

    archived = delete_campaign(campaign)
    assert archived.is_archived
    assert archived.status == Status.CANCELLED

    restored = restore_campaign(archived)
    assert not restored.is_archived
    assert restored.status == Status.DRAFT


@pytest.mark.django_db
def test_hard_delete_blocked_when_clips_earned(make_campaign, clipper, make_tracked_submission):
    campaign = make_campaign()
    make_tracked_submission(clipper, campaign, earnings=Decimal("2.00"))

    with pytest.raises(CampaignDeleteBlocked):
        delete_campaign(campaign, hard=True)

    test_campaign = make_campaign(is_test=True)
    make_tracked_submission(clipper, test_campaign, url="https://youtu.be/dQw4w9WgXcQ", earnings=Decimal("2.00"))
    assert delete_campaign(test_campaign, hard=True) is None
    assert not Campaign.objects.filter(pk=test_campaign.pk).exists()


@pytest.mark.django_db
def test_spend_sync_counts_earnings_and_manual_payouts(make_campaign, clipper, make_tracked_submission):
    campaign = make_campaign(spent=Decimal("999.00"))
    make_tracked_submission(clipper, campaign, earnings=Decimal("12.00"))
    make_tracked_submission(clipper, campaign, url="https://youtu.be/dQw4w9WgXcQ", earnings=Decimal("3.00"),
                            status=ClipSubmission.Status.PAID)
    ClipSubmission.objects.filter(status=ClipSubmission.Status.PAID).update(payout_amount=Decimal("5.00"))
    make_tracked_submission(clipper, campaign, url="https://x.com/a/status/1", earnings=Decimal("7.00"),
                            status=ClipSubmission.Status.REJECTED)

    assert actual_campaign_spend(campaign) == Decimal("20.00")
    result = sync_campaign_spend(campaign)

    assert result["previous"] == Decimal("999.00")
    assert result["actual"] == Decimal("20.00")
    campaign.refresh_from_db()
    assert campaign.spent == Decimal("20.00")
