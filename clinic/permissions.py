"""
Permission classes for role and claim based access control.

Checks read the roles and permissions cached in the session token
(``request.auth``), the same data the route guard uses, so an API call
and the page that issues it agree on what the caller may do.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework.permissions import BasePermission


def session_roles(request) -> set[str]:
    token = getattr(request, 'auth', None)
    return set(getattr(token, 'role_names', ()) or ())


def session_permissions(request) -> set[str]:
    token = getattr(request, 'auth', None)
    return set(getattr(token, 'permission_names', ()) or ())


def is_admin(request) -> bool:
    return settings.ADMIN_ROLE in session_roles(request)


def is_doctor(request) -> bool:
    return settings.DOCTOR_ROLE in session_roles(request)


class IsAdminRole(BasePermission):
    """Allow access only to sessions holding the admin role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and is_admin(request))


class IsDoctorRole(BasePermission):
    """Doctors (and admins)."""
    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and (is_doctor(request) or is_admin(request)))


def HasPermission(name: str):
    """Build a permission class requiring ``name`` in the session claims."""
    class _HasPermission(BasePermission):
        def has_permission(self, request, view) -> bool:
            user = getattr(request, "user", None)
            return bool(user and user.is_authenticated and name in session_permissions(request))
    _HasPermission.__name__ = f"HasPermission[{name}]"
    return _HasPermission
