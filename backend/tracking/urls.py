"""
URL configuration for the tracking app.

Admin routes are mounted under '/api/tracking/'. The scheduler endpoints live
in ``cron_urlpatterns`` and are mounted under '/api/cron/'.
"""
from django.urls import path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "tracking"

router = DefaultRouter()
router.register(r"cron-logs", views.CronJobLogViewSet, basename="cron-log")
router.register(r"clips", views.ClipTrackingViewSet, basename="clip-tracking")

urlpatterns = router.urls

cron_urlpatterns = [
    path("view-tracking/", views.ViewTrackingCronView.as_view(), name="cron-view-tracking"),
    path("campaign-activation/", views.CampaignActivationCronView.as_view(), name="cron-campaign-activation"),
]

# Complete list of generated API endpoints:
#
# ADMIN (role ADMIN):
# - GET    /api/tracking/cron-logs/                    → Job runs (?job_name=, ?status=, ?started_after=)
# - GET    /api/tracking/cron-logs/{id}/               → Single run
# - POST   /api/tracking/cron-logs/trigger/            → Run view tracking now (409 when already running)
# - GET    /api/tracking/clips/{id}/history/           → Snapshots in scrape order with per-step gain
# - GET    /api/tracking/clips/{id}/stats/             → Views gained today, yesterday, this week, daily average
# - POST   /api/tracking/clips/{id}/refresh/           → Scrape and accrue a single clip
#
# SCHEDULER (Authorization: Bearer CRON_SECRET):
# - GET|POST /api/cron/view-tracking/                  → Tracking pass + campaign auto-completion
# - GET|POST /api/cron/campaign-activation/            → Activate due scheduled campaigns
