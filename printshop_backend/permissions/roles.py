# permissions/roles.py

from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_USER = "USER"
ROLE_MODERATOR = "MODERATOR"
ROLE_ADMIN = "ADMIN"

ROLE_CHOICES = [
    (ROLE_USER, "User"),
    (ROLE_MODERATOR, "Moderator"),
    (ROLE_ADMIN, "Admin"),
]

ALL_ROLES = frozenset({ROLE_USER, ROLE_MODERATOR, ROLE_ADMIN})

# Roles allowed to run the privileged compound operations
# (budget conversion, direct order creation, generic order edits).
PRIVILEGED_ROLES = frozenset({ROLE_MODERATOR, ROLE_ADMIN})


# =========================================================
# ROLE HIERARCHY
# =========================================================
# Used for "at least this role" checks outside the workflow.
# Status transitions do NOT use it: they use the per-target-state
# allow-lists in workflow.services.transition_table.
ROLE_HIERARCHY: dict[str, int] = {
    ROLE_USER: 1,
    ROLE_MODERATOR: 2,
    ROLE_ADMIN: 3,
}


def get_user_role(user) -> Optional[str]:
    role = getattr(user, "role", None)
    return role if role in ALL_ROLES else None


def has_at_least_role(role: Optional[str], minimum: str) -> bool:
    if role not in ROLE_HIERARCHY:
        return False
    return ROLE_HIERARCHY[role] >= ROLE_HIERARCHY[minimum]


def ordered_roles(roles: Iterable[str]) -> list[str]:
    """Roles sorted from least to most privileged."""
    return sorted(roles, key=lambda r: ROLE_HIERARCHY.get(r, 0))


# =========================================================
# Base Role Permission
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: frozenset[str] = frozenset()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


class IsWorkflowUser(BaseRolePermission):
    """
    Any authenticated account carrying one of the three known roles.
    """

    allowed_roles = ALL_ROLES
