"""
URL configuration for the support app.

Routes are mounted under '/api/support/' in backend/urls.py.
"""
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r"tickets", views.SupportTicketViewSet, basename="support-ticket")

urlpatterns = router.urls

# Complete list of generated API endpoints:
#
# - GET    /api/support/tickets/                       → Own tickets (admins: all) (?status=, ?category=, ?search=)
# - POST   /api/support/tickets/                       → Open a ticket {category, subject, message, image_url?}
# - GET    /api/support/tickets/{id}/                  → Ticket detail (owner or admin)
# - PATCH  /api/support/tickets/{id}/admin-update/     → Admin: {status?, admin_response?}
# - POST   /api/support/tickets/{id}/reply/            → Owner follow-up {reply} after an admin response
