"""
URL configuration for the submissions app.

Routes are mounted under '/api/submissions/' in backend/urls.py.
"""
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r"admin", views.AdminSubmissionViewSet, basename="admin-submission")
router.register(r"", views.SubmissionViewSet, basename="submission")

urlpatterns = router.urls

# Complete list of generated API endpoints:
#
# CLIPPER:
# - GET    /api/submissions/                          → Own submissions (?status=, ?campaign=)
# - POST   /api/submissions/                          → Submit a clip {campaign, clip_url, platform?} (throttled)
# - GET    /api/submissions/{id}/                     → Own submission detail
# - DELETE /api/submissions/{id}/                     → Delete while the clip has no earnings
# - GET    /api/submissions/dashboard/                → Balance, views, counts and recent submissions
# - GET    /api/submissions/{id}/analytics/           → View history and growth of the clip
#
# ADMIN (role ADMIN):
# - GET    /api/submissions/admin/                    → Review queue (?status=, ?campaign=, ?platform=, ?user=, ?search=)
# - GET    /api/submissions/admin/{id}/               → Detail with clip and views gained since submission
# - DELETE /api/submissions/admin/{id}/               → Delete any submission
# - POST   /api/submissions/admin/{id}/approve/       → Approve and start tracking
# - POST   /api/submissions/admin/{id}/reject/        → Reject {reason?}
# - POST   /api/submissions/admin/{id}/mark-paid/     → Record a manual payout {payout_amount}
# - GET    /api/submissions/admin/{id}/analytics/     → View history of the clip
