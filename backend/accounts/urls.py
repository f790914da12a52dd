"""
URL configuration for the accounts app.

All routes are exposed under '/api/account/' as configured in backend/urls.py.

The accounts app provides:
- Registration and authentication (login/logout, token verification)
- Profile management including the PayPal payout email
- Password changes (rotates the API token)
- Admin user management (listing, role changes)
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'accounts'

router = DefaultRouter()
router.register(r'admin/users', views.AdminUserViewSet, basename='admin-user')

urlpatterns = [
    # Authentication
    path('register/', views.register_view, name='register'),
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),

    # Profile management
    path('profile/', views.profile_view, name='profile'),
    path('profile/update/', views.profile_update_view, name='profile_update'),

    # Security
    path('password/change/', views.change_password_view, name='change_password'),
    path('verify/', views.verify_token_view, name='verify_token'),
    path('csrf/', views.csrf_token_view, name='csrf_token'),
] + router.urls

# Complete list of generated API endpoints:
#
# AUTHENTICATION & REGISTRATION:
# - POST   /api/account/register/                 → Create a clipper account and return a token
# - POST   /api/account/login/                    → Authenticate by username or email
# - POST   /api/account/logout/                   → Delete the token and end the session
#
# PROFILE MANAGEMENT:
# - GET    /api/account/profile/                  → Current user's profile, balance and view totals
# - PUT    /api/account/profile/update/           → Update profile fields
# - PATCH  /api/account/profile/update/           → Partially update profile fields
#
# SECURITY:
# - POST   /api/account/password/change/          → Change password (returns a new token)
# - GET    /api/account/verify/                   → Verify token validity
# - GET    /api/account/csrf/                     → Issue CSRF cookie
#
# ADMIN USER MANAGEMENT (role ADMIN):
# - GET    /api/account/admin/users/              → List users (?role=, ?search=, ?ordering=)
# - GET    /api/account/admin/users/{id}/         → User detail with submission/payout counts
# - POST   /api/account/admin/users/{id}/role/    → Change a user's role
