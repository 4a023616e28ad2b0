"""Role permission table and the DRF permission class that enforces it."""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from rest_framework.permissions import BasePermission

from .models import Profile

PERMISSIONS = (
    "canViewAllTickets",
    "canCreateTickets",
    "canUpdateTickets",
    "canCloseTickets",
    "canManageUsers",
    "canManageProperties",
    "canBlockProperties",
    "canManageProviders",
    "canViewAnalytics",
)

ROLE_PERMISSIONS: Dict[str, Dict[str, bool]] = {
    Profile.ADMIN: {name: True for name in PERMISSIONS},
    Profile.SUB_DIRECTOR: {
        "canViewAllTickets": True,
        "canCreateTickets": True,
        "canUpdateTickets": False,
        "canCloseTickets": False,
        "canManageUsers": False,
        "canManageProperties": False,
        "canBlockProperties": True,
        "canManageProviders": False,
        "canViewAnalytics": True,
    },
    # Maintenance staff only see and update tickets assigned to them.
    Profile.MAINTENANCE: {
        "canViewAllTickets": False,
        "canCreateTickets": True,
        "canUpdateTickets": True,
        "canCloseTickets": False,
        "canManageUsers": False,
        "canManageProperties": False,
        "canBlockProperties": False,
        "canManageProviders": False,
        "canViewAnalytics": False,
    },
    Profile.HOUSEKEEPER: {
        "canViewAllTickets": True,
        "canCreateTickets": True,
        "canUpdateTickets": True,
        "canCloseTickets": False,
        "canManageUsers": False,
        "canManageProperties": False,
        "canBlockProperties": False,
        "canManageProviders": False,
        "canViewAnalytics": False,
    },
    # Reporters only see and update their own tickets.
    Profile.REPORTER: {
        "canViewAllTickets": False,
        "canCreateTickets": True,
        "canUpdateTickets": True,
        "canCloseTickets": False,
        "canManageUsers": False,
        "canManageProperties": False,
        "canBlockProperties": False,
        "canManageProviders": False,
        "canViewAnalytics": False,
    },
}


def has_permission(profile: Optional[Profile], permission: str) -> bool:
    if profile is None or not getattr(profile, "is_active", False):
        return False
    return ROLE_PERMISSIONS.get(profile.role, {}).get(permission, False)


class RolePermission(BasePermission):
    """Check the acting profile against the view's ``permission_map``.

    ``permission_map`` maps a viewset action (or ``"*"``) to the permission
    name required for it. Actions missing from the map only need an
    authenticated actor.
    """

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        profile = request.user
        if profile is None or not getattr(profile, "is_authenticated", False):
            return False
        permission_map: Mapping[str, str] = getattr(view, "permission_map", {})
        action = getattr(view, "action", None) or request.method.lower()
        required = permission_map.get(action, permission_map.get("*"))
        if required is None:
            return True
        return has_permission(profile, required)
