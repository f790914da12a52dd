"""
URL configuration for the payouts app.

Routes are mounted under '/api/payouts/' in backend/urls.py.
"""
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r"admin/requests", views.AdminPayoutRequestViewSet, basename="admin-payout-request")
router.register(r"requests", views.PayoutRequestViewSet, basename="payout-request")

urlpatterns = router.urls

# Complete list of generated API endpoints:
#
# CLIPPER:
# - GET    /api/payouts/requests/                          → Own payout requests
# - POST   /api/payouts/requests/                          → Request {amount, payment_method, payment_details} (throttled)
# - GET    /api/payouts/requests/{id}/                     → Request detail
# - POST   /api/payouts/requests/{id}/cancel/              → Cancel a PENDING request
# - GET    /api/payouts/requests/history/                  → Completed payouts
#
# ADMIN (role ADMIN):
# - GET    /api/payouts/admin/requests/                    → All requests (?status=, ?payment_method=, ?user=, ?search=)
# - GET    /api/payouts/admin/requests/{id}/               → Request with user balance and payout
# - POST   /api/payouts/admin/requests/{id}/process/       → {action: approve|reject|complete|revert, transaction_id?, notes?, platform_fee_rate?}
# - GET    /api/payouts/admin/requests/summary/            → Totals per status, fees, outstanding balances
