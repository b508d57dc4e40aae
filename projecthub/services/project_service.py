"""
Project and membership management.

Every mutation here is authorized against the actor's stored membership using
the role and group policies, then emits a best-effort activity entry. Role
and group changes also notify the member concerned.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from projecthub.audit import ActivityAction, ResourceType
from projecthub.db import models
from projecthub.db.repositories import invitations as invitation_repo
from projecthub.db.repositories import invite_links as link_repo
from projecthub.db.repositories import memberships as membership_repo
from projecthub.db.repositories import projects as project_repo
from projecthub.services.activity_log_service import ActivityLogService
from projecthub.services.errors import InvalidValueError, NotFoundError, PermissionDenied
from projecthub.services.notification_service import NotificationService
from projecthub.utils.group_permissions import (
    GROUP_DEFAULTS,
    can_move_user_between_groups,
    normalize_member_group,
    validate_group,
)
from projecthub.utils.role_permissions import (
    ROLE_OWNER,
    can_change_role,
    can_delete_project,
    can_edit_project,
    can_remove_member,
    get_assignable_roles,
    validate_role,
)

logger = logging.getLogger(__name__)

NOT_A_MEMBER_MESSAGE = "You are not a member of this project"


class ProjectService:
    """Projects and their memberships. Takes its ``Session`` from the caller."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = models.now_utc):
        self.db = db
        self.clock = clock
        self.activity = ActivityLogService(db, clock=clock)
        self.notifications = NotificationService(db, clock=clock)

    # Lookups

    def get_project(self, project_id: str) -> Optional[models.Project]:
        return project_repo.get_project(self.db, project_id)

    def get_user_projects(self, user_id: str) -> List[models.Project]:
        return project_repo.get_projects_for_user(self.db, user_id)

    def get_members(self, project_id: str) -> List[models.ProjectMembership]:
        return membership_repo.get_project_memberships(self.db, project_id)

    def get_user_role(self, project_id: str, user_id: str) -> Optional[str]:
        """Role of ``user_id`` in the project, or None for a non-member."""
        membership = membership_repo.get_membership(self.db, project_id, user_id)
        return membership.role if membership else None

    def get_user_group(self, project_id: str, user_id: str) -> Optional[str]:
        """Group of ``user_id`` in the project; legacy memberships without one read as the legacy default."""
        membership = membership_repo.get_membership(self.db, project_id, user_id)
        if membership is None:
            return None
        return normalize_member_group(membership.group)

    def _require_project(self, project_id: str) -> models.Project:
        project = project_repo.get_project(self.db, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def _require_actor(self, project_id: str, actor_id: str) -> models.ProjectMembership:
        membership = membership_repo.get_membership(self.db, project_id, actor_id)
        if membership is None:
            raise PermissionDenied(NOT_A_MEMBER_MESSAGE)
        return membership

    def _require_target(self, project_id: str, target_id: str) -> models.ProjectMembership:
        membership = membership_repo.get_membership(self.db, project_id, target_id)
        if membership is None:
            raise NotFoundError("Member not found")
        return membership

    # Mutations

    def create_project(self, name: str, owner_user_id: str) -> models.Project:
        """Create a project with its creator as the single owner."""
        name = (name or "").strip()
        if not name:
            raise InvalidValueError("Project name is required")
        now = self.clock()
        project = project_repo.create_project(self.db, name=name, owner_user_id=owner_user_id, commit=False)
        membership_repo.create_membership(
            self.db,
            project_id=project.id,
            user_id=owner_user_id,
            role=ROLE_OWNER,
            group=GROUP_DEFAULTS.owner_group,
            invited_by=owner_user_id,
            joined_at=now,
            commit=False,
        )
        self.db.commit()
        self.db.refresh(project)
        logger.info("Project %s created by %s", project.id, owner_user_id)
        self.activity.emit_activity(
            project.id,
            owner_user_id,
            ActivityAction.PROJECT_CREATED,
            ResourceType.PROJECT,
            project.id,
            metadata={"name": project.name},
            group_context=GROUP_DEFAULTS.owner_group,
        )
        return project

    def update_project(self, project_id: str, actor_id: str, name: str) -> models.Project:
        """Rename a project. Owners, admins and editors may do this."""
        project = self._require_project(project_id)
        actor = self._require_actor(project_id, actor_id)
        if not can_edit_project(actor.role):
            raise PermissionDenied("You do not have permission to edit this project")
        name = (name or "").strip()
        if not name:
            raise InvalidValueError("Project name is required")

        old_name = project.name
        project = project_repo.update_project(self.db, project_id, name=name, updated_at=self.clock())
        self.activity.emit_activity(
            project_id,
            actor_id,
            ActivityAction.PROJECT_UPDATED,
            ResourceType.PROJECT,
            project_id,
            metadata={"old_name": old_name, "new_name": name},
            group_context=normalize_member_group(actor.group),
        )
        return project

    def change_member_role(self, project_id: str, actor_id: str, target_id: str, new_role: str) -> models.ProjectMembership:
        try:
            validate_role(new_role)
        except ValueError as e:
            raise InvalidValueError(str(e)) from e
        if actor_id == target_id:
            raise PermissionDenied("You cannot change your own role")

        actor = self._require_actor(project_id, actor_id)
        target = self._require_target(project_id, target_id)
        old_role = target.role
        if not can_change_role(actor.role, old_role):
            raise PermissionDenied("You do not have permission to change this member's role")
        if new_role not in get_assignable_roles(actor.role):
            raise PermissionDenied(f"You cannot assign the {new_role} role")

        updated = membership_repo.update_membership(self.db, project_id, target_id, role=new_role, last_active_at=self.clock())
        self.activity.emit_activity(
            project_id,
            actor_id,
            ActivityAction.MEMBER_ROLE_CHANGED,
            ResourceType.MEMBER,
            target_id,
            metadata={"old_role": old_role, "new_role": new_role},
            group_context=normalize_member_group(updated.group),
        )
        self.notifications.notify_role_changed(target_id, project_id, old_role, new_role, changed_by=actor_id)
        return updated

    def change_member_group(self, project_id: str, actor_id: str, target_id: str, new_group: str) -> models.ProjectMembership:
        try:
            validate_group(new_group)
        except ValueError as e:
            raise InvalidValueError(str(e)) from e

        actor = self._require_actor(project_id, actor_id)
        if not can_move_user_between_groups(actor.role):
            raise PermissionDenied("You do not have permission to move members between groups")
        target = self._require_target(project_id, target_id)
        old_group = normalize_member_group(target.group)

        updated = membership_repo.update_membership(self.db, project_id, target_id, group=new_group, last_active_at=self.clock())
        self.activity.emit_activity(
            project_id,
            actor_id,
            ActivityAction.MEMBER_GROUP_CHANGED,
            ResourceType.MEMBER,
            target_id,
            metadata={"old_group": old_group, "new_group": new_group},
            group_context=new_group,
        )
        self.notifications.notify_group_changed(target_id, project_id, old_group, new_group, changed_by=actor_id)
        return updated

    def remove_member(self, project_id: str, actor_id: str, target_id: str) -> None:
        if actor_id == target_id:
            raise PermissionDenied("You cannot remove yourself from the project")
        actor = self._require_actor(project_id, actor_id)
        target = self._require_target(project_id, target_id)
        if not can_remove_member(actor.role, target.role, actor_id, target_id):
            raise PermissionDenied("You do not have permission to remove this member")

        removed_role, removed_group = target.role, normalize_member_group(target.group)
        membership_repo.delete_membership(self.db, project_id, target_id)
        self.activity.emit_activity(
            project_id,
            actor_id,
            ActivityAction.MEMBER_REMOVED,
            ResourceType.MEMBER,
            target_id,
            metadata={"role": removed_role, "group": removed_group},
            group_context=removed_group,
        )

    def delete_project(self, project_id: str, actor_id: str) -> None:
        """Delete the project and everything hanging off it except its activity trail."""
        self._require_project(project_id)
        actor = self._require_actor(project_id, actor_id)
        if not can_delete_project(actor.role):
            raise PermissionDenied("Only the project owner can delete the project")

        invitation_repo.delete_project_invitations(self.db, project_id, commit=False)
        link_repo.delete_project_invite_links(self.db, project_id, commit=False)
        project_repo.delete_project(self.db, project_id)
        logger.info("Project %s deleted by %s", project_id, actor_id)
        self.activity.emit_activity(
            project_id,
            actor_id,
            ActivityAction.PROJECT_DELETED,
            ResourceType.PROJECT,
            project_id,
        )

    def migrate_members_to_groups(self) -> Dict[str, Any]:
        """
        Give every membership without a group the legacy default group.

        Rows that already have a group are left alone. ``last_active_at`` is
        preserved since this is not member activity.
        """
        total = membership_repo.count_memberships(self.db)
        pending = membership_repo.get_memberships_without_group(self.db)
        keys = [(m.project_id, m.user_id, m.last_active_at) for m in pending]
        updated = 0
        errors = 0
        for project_id, user_id, last_active_at in keys:
            try:
                membership_repo.update_membership(
                    self.db,
                    project_id,
                    user_id,
                    group=GROUP_DEFAULTS.legacy_member_group,
                    last_active_at=last_active_at,
                )
                updated += 1
            except Exception as e:
                errors += 1
                logger.error("Failed to migrate membership %s/%s: %s", project_id, user_id, e)
                self.db.rollback()
        result = {
            "total": total,
            "updated": updated,
            "already_has_group": total - len(keys),
            "errors": errors,
            "success": errors == 0,
        }
        logger.info("Group migration finished: %s", result)
        return result
