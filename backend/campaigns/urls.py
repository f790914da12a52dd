"""
URL configuration for the campaigns app.

Routes are mounted under '/api/campaigns/' in backend/urls.py. Clippers browse
campaigns, admins manage them, and brands read a token protected report.
"""
from django.urls import path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r"admin", views.AdminCampaignViewSet, basename="admin-campaign")
router.register(r"", views.CampaignViewSet, basename="campaign")

urlpatterns = [
    path("stats/", views.public_stats_view, name="campaign-public-stats"),
    path("leaderboard/", views.leaderboard_view, name="campaign-leaderboard"),
    path("client/<str:token>/", views.client_report_view, name="campaign-client-report"),
] + router.urls

# Complete list of generated API endpoints:
#
# CLIPPER / PUBLIC:
# - GET    /api/campaigns/                               → Active campaigns (?status=, ?platform=, ?search=)
# - GET    /api/campaigns/{id}/                          → Campaign detail including the team update
# - GET    /api/campaigns/stats/                         → Public marketplace stats (no auth)
# - GET    /api/campaigns/leaderboard/                   → Top clippers by tracked views (no auth)
# - GET    /api/campaigns/client/{token}/                → Brand report by access token (no auth)
#
# ADMIN (role ADMIN):
# - GET    /api/campaigns/admin/                         → All campaigns (?archived=true, ?status=, ?is_test=)
# - POST   /api/campaigns/admin/                         → Create campaign
# - GET    /api/campaigns/admin/{id}/                    → Campaign detail
# - PATCH  /api/campaigns/admin/{id}/                    → Update fields and/or status
# - DELETE /api/campaigns/admin/{id}/                    → Archive (?hard=true deletes when allowed)
# - POST   /api/campaigns/admin/{id}/restore/            → Restore an archived campaign to DRAFT
# - POST   /api/campaigns/admin/{id}/complete/           → Manually complete
# - POST   /api/campaigns/admin/{id}/team-update/        → Set or clear the announcement
# - GET    /api/campaigns/admin/{id}/client-token/       → Read client portal token
# - POST   /api/campaigns/admin/{id}/client-token/       → Generate (or regenerate) the token
# - GET    /api/campaigns/admin/{id}/analytics/          → Funnel, views and spend breakdown
# - POST   /api/campaigns/admin/{id}/sync-spend/         → Recompute spent from clip earnings
# - GET    /api/campaigns/admin/completion-check/        → Budget completion status of active campaigns
# - GET    /api/campaigns/admin/overview/                → Marketplace-wide admin numbers
