"""
Per (project, user) permissions.

``resolve_project_permissions`` looks up the user's role and group
concurrently and folds both through the role and group policies into one
``ProjectPermissions`` value. Resolution never raises: a failed lookup yields
fail-closed permissions with ``error`` set.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import sessionmaker

from projecthub.utils import group_permissions as groups
from projecthub.utils import role_permissions as roles

logger = logging.getLogger(__name__)


class MembershipLookup(Protocol):
    """Anything that can report a user's role and group in a project (sync or async)."""

    def get_user_role(self, project_id: str, user_id: str) -> Optional[str]: ...

    def get_user_group(self, project_id: str, user_id: str) -> Optional[str]: ...


class SessionMembershipLookup:
    """
    Lookup backed by the membership table.

    Each call opens its own session from ``session_factory`` so the two
    lookups can run on separate threads at the same time.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_user_role(self, project_id: str, user_id: str) -> Optional[str]:
        from projecthub.services.project_service import ProjectService

        with self.session_factory() as db:
            return ProjectService(db).get_user_role(project_id, user_id)

    def get_user_group(self, project_id: str, user_id: str) -> Optional[str]:
        from projecthub.services.project_service import ProjectService

        with self.session_factory() as db:
            return ProjectService(db).get_user_group(project_id, user_id)


@dataclass(frozen=True)
class ProjectPermissions:
    user_id: Optional[str] = None
    role: Optional[str] = None
    group: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    can_edit: bool = False
    can_manage_members: bool = False
    can_delete: bool = False
    can_invite: bool = False
    can_view_activity: bool = False
    assignable_roles: List[str] = field(default_factory=list)
    default_document_visibility: str = groups.GROUP_DEFAULTS.unknown_group_visibility

    @classmethod
    def pending(cls) -> "ProjectPermissions":
        """Value while the lookups are in flight: nothing allowed yet."""
        return cls(loading=True)

    @classmethod
    def denied(cls, user_id: Optional[str] = None, error: Optional[str] = None) -> "ProjectPermissions":
        return cls(user_id=user_id, error=error)

    @classmethod
    def from_membership(cls, user_id: str, role: Optional[str], group: Optional[str]) -> "ProjectPermissions":
        return cls(
            user_id=user_id,
            role=role,
            group=group,
            can_edit=roles.can_edit_project(role),
            can_manage_members=roles.can_manage_members(role),
            can_delete=roles.can_delete_project(role),
            can_invite=roles.can_invite_members(role),
            can_view_activity=roles.can_view_activity_log(role),
            assignable_roles=roles.get_assignable_roles(role),
            default_document_visibility=groups.get_default_document_visibility(group),
        )

    @property
    def is_member(self) -> bool:
        return self.role in roles.ALLOWED_ROLES

    def can_change_role(self, target_role: str) -> bool:
        return self.is_member and roles.can_change_role(self.role, target_role)

    def can_assign_role(self, target_role: str, new_role: str) -> bool:
        """Change a member currently holding ``target_role`` to ``new_role``."""
        return self.can_change_role(target_role) and new_role in self.assignable_roles

    def can_remove_member(self, target_role: str, target_user_id: str) -> bool:
        if not self.is_member or self.user_id is None:
            return False
        return roles.can_remove_member(self.role, target_role, self.user_id, target_user_id)

    def can_view_document(self, visibility: str) -> bool:
        if not self.is_member or self.group is None:
            return False
        return groups.can_view_document(self.group, visibility, self.role)

    def can_set_document_visibility(self) -> bool:
        if not self.is_member or self.group is None:
            return False
        return groups.can_set_document_visibility(self.role, self.group)

    def can_move_user_between_groups(self) -> bool:
        return self.is_member and groups.can_move_user_between_groups(self.role)

    def can_revoke_link(self, link) -> bool:
        """Owner and admin may revoke any link; others only the links they created."""
        if not self.is_member:
            return False
        if self.role in roles.MANAGE_ROLES:
            return True
        return self.user_id is not None and link.created_by == self.user_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "group": self.group,
            "loading": self.loading,
            "error": self.error,
            "can_edit": self.can_edit,
            "can_manage_members": self.can_manage_members,
            "can_delete": self.can_delete,
            "can_invite": self.can_invite,
            "can_view_activity": self.can_view_activity,
            "can_set_document_visibility": self.can_set_document_visibility(),
            "can_move_user_between_groups": self.can_move_user_between_groups(),
            "assignable_roles": list(self.assignable_roles),
            "default_document_visibility": self.default_document_visibility,
        }


async def _call(fn, *args):
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    return await asyncio.to_thread(fn, *args)


async def resolve_project_permissions(
    lookup: MembershipLookup,
    project_id: Optional[str],
    user_id: Optional[str],
) -> ProjectPermissions:
    """Resolve the permissions of ``user_id`` in ``project_id``. Never raises."""
    if not project_id or not user_id:
        return ProjectPermissions.denied(user_id=user_id)
    try:
        role, group = await asyncio.gather(
            _call(lookup.get_user_role, project_id, user_id),
            _call(lookup.get_user_group, project_id, user_id),
        )
    except Exception as e:
        logger.error("Failed to resolve permissions for user %s in project %s: %s", user_id, project_id, e)
        return ProjectPermissions.denied(user_id=user_id, error=str(e) or e.__class__.__name__)
    return ProjectPermissions.from_membership(user_id, role, group)
