"""Role based permission classes shared across the API."""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allows access to users with the ADMIN role (or superusers)."""

    message = "Admin access required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_admin", False))


class IsOwnerOrAdmin(BasePermission):
    """Object level check: owner of ``obj.user`` or an admin."""

    message = "You do not have access to this resource."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if getattr(user, "is_admin", False):
            return True
        return getattr(obj, "user_id", None) == user.id
