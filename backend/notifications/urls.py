from rest_framework.routers import SimpleRouter

from .views import NotificationViewSet

router = SimpleRouter()
router.register(r"", NotificationViewSet, basename="notification")

urlpatterns = router.urls

# - GET    /api/notifications/                → Own notifications (?read=false, ?type=)
# - GET    /api/notifications/unread-count/   → Number of unread notifications
# - POST   /api/notifications/{id}/read/      → Mark one notification read
# - POST   /api/notifications/read-all/       → Mark every notification read
