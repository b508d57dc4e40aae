"""
Group-based permission utilities.

Members belong to exactly one of two fixed groups, ``consulting`` or
``client``. Groups gate document visibility independently of the role
hierarchy. Every fallback value used by this module (and by the services
that read legacy records) lives in ``GROUP_DEFAULTS``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Set

from projecthub.utils.role_permissions import ROLE_OWNER, MANAGE_ROLES


GROUP_CONSULTING = "consulting"
GROUP_CLIENT = "client"
ALLOWED_GROUPS = {GROUP_CONSULTING, GROUP_CLIENT}

VISIBILITY_CONSULTING_ONLY = "consulting_only"
VISIBILITY_CLIENT_ONLY = "client_only"
# Displayed as "All"; the stored value stays "both"
VISIBILITY_BOTH = "both"
ALLOWED_VISIBILITIES = {VISIBILITY_CONSULTING_ONLY, VISIBILITY_CLIENT_ONLY, VISIBILITY_BOTH}


class GroupEnum(str, Enum):
    consulting = GROUP_CONSULTING
    client = GROUP_CLIENT


class VisibilityEnum(str, Enum):
    consulting_only = VISIBILITY_CONSULTING_ONLY
    client_only = VISIBILITY_CLIENT_ONLY
    both = VISIBILITY_BOTH


@dataclass(frozen=True)
class GroupDefaults:
    # Memberships written before groups existed have no group
    legacy_member_group: str
    # Group used when an invitation does not name one
    invitation_group: str
    # Group given to a project creator
    owner_group: str
    # Fail-open visibility for an unknown or missing uploader group
    unknown_group_visibility: str
    visibility_by_group: Mapping[str, str] = field(default_factory=dict)


GROUP_DEFAULTS = GroupDefaults(
    legacy_member_group=GROUP_CONSULTING,
    invitation_group=GROUP_CLIENT,
    owner_group=GROUP_CONSULTING,
    unknown_group_visibility=VISIBILITY_BOTH,
    visibility_by_group=MappingProxyType({
        GROUP_CONSULTING: VISIBILITY_CONSULTING_ONLY,
        GROUP_CLIENT: VISIBILITY_BOTH,
    }),
)

GROUP_DISPLAY_NAMES = {
    GROUP_CONSULTING: "Consulting Group",
    GROUP_CLIENT: "Client Group",
}

VISIBILITY_DISPLAY_NAMES = {
    VISIBILITY_CONSULTING_ONLY: "Consulting Only",
    VISIBILITY_CLIENT_ONLY: "Client Only",
    VISIBILITY_BOTH: "All",
}


def get_allowed_groups() -> Set[str]:
    return set(ALLOWED_GROUPS)


def validate_group(group: str) -> None:
    """Raise ValueError when ``group`` is not one of the fixed groups."""
    if group not in ALLOWED_GROUPS:
        raise ValueError(f"Invalid group '{group}'. Allowed groups: {sorted(ALLOWED_GROUPS)}")


def validate_visibility(visibility: str) -> None:
    """Raise ValueError when ``visibility`` is not a known document visibility."""
    if visibility not in ALLOWED_VISIBILITIES:
        raise ValueError(
            f"Invalid visibility '{visibility}'. Allowed values: {sorted(ALLOWED_VISIBILITIES)}"
        )


def normalize_member_group(group: Optional[str]) -> str:
    """Return the stored group, or the legacy default when the record has none."""
    return group or GROUP_DEFAULTS.legacy_member_group


def can_view_document(user_group: Optional[str], document_visibility: Optional[str], user_role: Optional[str] = None) -> bool:
    """
    Check whether a member may see a document.

    The owner sees everything. Otherwise ``both`` is visible to every group and
    the ``*_only`` values are visible to the matching group only.
    """
    if user_role == ROLE_OWNER:
        return True
    if document_visibility == VISIBILITY_BOTH:
        return True
    if document_visibility == VISIBILITY_CONSULTING_ONLY and user_group == GROUP_CONSULTING:
        return True
    if document_visibility == VISIBILITY_CLIENT_ONLY and user_group == GROUP_CLIENT:
        return True
    return False


def can_set_document_visibility(user_role: Optional[str], user_group: Optional[str] = None) -> bool:
    """Owner and admin from either group can change document visibility."""
    return user_role in MANAGE_ROLES


def can_move_user_between_groups(user_role: Optional[str]) -> bool:
    """Only owner and admin can move members between groups."""
    return user_role in MANAGE_ROLES


def get_default_document_visibility(user_group: Optional[str]) -> str:
    """Visibility given to a new document uploaded by a member of ``user_group``."""
    return GROUP_DEFAULTS.visibility_by_group.get(user_group, GROUP_DEFAULTS.unknown_group_visibility)


def get_group_display_name(group: str) -> str:
    return GROUP_DISPLAY_NAMES.get(group, group)


def get_visibility_display_name(visibility: str) -> str:
    return VISIBILITY_DISPLAY_NAMES.get(visibility, visibility)
