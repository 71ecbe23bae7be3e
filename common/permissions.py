"""
Role gates shared by the REST endpoints.

Services do not check who is calling; the viewsets do, through these
permission classes and helpers.
"""
from rest_framework.permissions import BasePermission


def is_platform_admin(user) -> bool:
    """True for users with the admin role, and for superusers."""
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return bool(user.is_superuser or getattr(user, "role", None) == "admin")


class IsPlatformAdmin(BasePermission):
    message = "Admin access required"

    def has_permission(self, request, view):
        return is_platform_admin(request.user)


class IsActiveMember(BasePermission):
    """Authenticated and not suspended."""

    message = "Your account is suspended"

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return not getattr(user, "is_suspended", False)

