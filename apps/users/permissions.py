"""Permission classes shared by the domain apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_staff_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_staff_member") and user.is_staff_member()


class IsStaffMember(permissions.BasePermission):
    """
    Only rental staff (role staff/admin or Django staff flag).

    Used for the fleet calendar, reservation status changes and rental checklists.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_staff_user(request.user)
