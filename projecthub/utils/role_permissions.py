"""
Role-based permission utilities for project members.

Roles form a strict hierarchy (viewer < editor < admin < owner). Every
predicate here is pure and returns a boolean or a role list; unknown roles
never satisfy a hierarchy check.
"""

from typing import Dict, List, Set, FrozenSet
from enum import Enum


# Central role constants to ensure consistency across the codebase
ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_EDITOR = "editor"
ROLE_VIEWER = "viewer"

# Lowest to highest; the index is the role level
ROLE_HIERARCHY: List[str] = [ROLE_VIEWER, ROLE_EDITOR, ROLE_ADMIN, ROLE_OWNER]

ALLOWED_ROLES = set(ROLE_HIERARCHY)

# Derived role groups
MANAGE_ROLES: FrozenSet[str] = frozenset({ROLE_OWNER, ROLE_ADMIN})
# Roles an admin may neither change nor remove
PROTECTED_ROLES: FrozenSet[str] = frozenset({ROLE_OWNER, ROLE_ADMIN})

ROLE_DISPLAY_NAMES: Dict[str, str] = {
    ROLE_OWNER: "Owner",
    ROLE_ADMIN: "Admin",
    ROLE_EDITOR: "Editor",
    ROLE_VIEWER: "Viewer",
}

ROLE_COLORS: Dict[str, str] = {
    ROLE_OWNER: "teal",
    ROLE_ADMIN: "yellow",
    ROLE_EDITOR: "blue",
    ROLE_VIEWER: "gray",
}
DEFAULT_ROLE_COLOR = "gray"


class RoleEnum(str, Enum):
    """Enum for project roles used in schemas and validation."""
    owner = ROLE_OWNER
    admin = ROLE_ADMIN
    editor = ROLE_EDITOR
    viewer = ROLE_VIEWER


def _role_level(role: str | None) -> int:
    try:
        return ROLE_HIERARCHY.index(role)
    except ValueError:
        return -1


def has_role_level(user_role: str | None, required_role: str) -> bool:
    """Return True if ``user_role`` is at or above ``required_role``."""
    level = _role_level(user_role)
    return level >= 0 and level >= _role_level(required_role)


def get_allowed_roles() -> Set[str]:
    """Get the set of all allowed roles."""
    return ALLOWED_ROLES.copy()


def validate_role(role: str) -> None:
    """
    Validate that a role is allowed.

    Args:
        role: The role name to validate

    Raises:
        ValueError: If role is not allowed
    """
    if role not in ALLOWED_ROLES:
        raise ValueError(f"Invalid role '{role}'. Allowed roles: {sorted(ALLOWED_ROLES)}")


def can_edit_project(user_role: str | None) -> bool:
    """Owner, admin and editor can edit project content; viewer cannot."""
    return has_role_level(user_role, ROLE_EDITOR)


def can_manage_members(user_role: str | None) -> bool:
    """Only owner and admin can manage project members."""
    return has_role_level(user_role, ROLE_ADMIN)


def can_delete_project(user_role: str | None) -> bool:
    """Only the owner can delete a project. Not hierarchy based."""
    return user_role == ROLE_OWNER


def can_invite_members(user_role: str | None) -> bool:
    """Owner and admin can invite new members."""
    return has_role_level(user_role, ROLE_ADMIN)


def can_view_activity_log(user_role: str | None) -> bool:
    """Every valid role can view the activity log."""
    return user_role in ALLOWED_ROLES


def can_change_role(user_role: str | None, target_role: str | None) -> bool:
    """
    Check if a user may change the role of a member currently holding ``target_role``.

    Owner can change any role. Admin can change roles below admin.
    This does not bound the role being assigned; see ``get_assignable_roles``.
    """
    if user_role == ROLE_OWNER:
        return True
    if user_role == ROLE_ADMIN:
        return target_role not in PROTECTED_ROLES
    return False


def can_remove_member(user_role: str | None, target_role: str | None, user_id, target_user_id) -> bool:
    """
    Check if a user may remove another member from the project.

    Nobody can remove themselves. Owner can remove anyone else; admin can
    remove editors and viewers only.
    """
    if user_id == target_user_id:
        return False
    if user_role == ROLE_OWNER:
        return True
    if user_role == ROLE_ADMIN:
        return target_role not in PROTECTED_ROLES
    return False


def get_assignable_roles(user_role: str | None) -> List[str]:
    """Roles a user may grant: owner any role, admin editor/viewer, others none."""
    if user_role == ROLE_OWNER:
        return [ROLE_OWNER, ROLE_ADMIN, ROLE_EDITOR, ROLE_VIEWER]
    if user_role == ROLE_ADMIN:
        return [ROLE_EDITOR, ROLE_VIEWER]
    return []


def get_role_display_name(role: str) -> str:
    return ROLE_DISPLAY_NAMES.get(role, role)


def get_role_color(role: str) -> str:
    return ROLE_COLORS.get(role, DEFAULT_ROLE_COLOR)
