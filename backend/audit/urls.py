"""
URL configuration for the audit app, mounted under '/api/audit/'.

- GET /api/audit/logs/            → Request log (?start=, ?end=, ?method=, ?status_code=, ?min_status=, ?campaign_id=, ?user=)
- GET /api/audit/logs/{id}/       → Single entry
- GET /api/audit/logs/activity/   → Admin activity feed (?limit=)
- GET /api/audit/logs/summary/    → Admin request volume and error counts (?hours=)
"""
from rest_framework.routers import SimpleRouter

from .views import ApiAccessLogViewSet

router = SimpleRouter()
router.register(r"logs", ApiAccessLogViewSet, basename="audit-log")

urlpatterns = router.urls
