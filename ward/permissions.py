"""
Role based permission classes.

Roles are a closed set (see ``User.Role``).  Administrators may perform
every front desk and labor nurse action as well.
"""
from rest_framework.permissions import BasePermission

ADMIN = 'admin'
FRONT_DESK = 'front_desk'
LABOR_NURSE = 'labor_nurse'


def _has_role(request, roles) -> bool:
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _has_role(request, {ADMIN})


class IsFrontDeskRole(BasePermission):
    """Front desk staff or administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _has_role(request, {FRONT_DESK, ADMIN})


class IsLaborNurseRole(BasePermission):
    """Labor nurses or administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _has_role(request, {LABOR_NURSE, ADMIN})
