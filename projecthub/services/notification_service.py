"""
Notification service: in-app notifications and per-user preferences.

The ``notify_*`` helpers are side effects of membership changes that have
already committed. Like ``emit_activity`` they never raise; a failed write is
logged and rolled back so the caller's action still succeeds.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from projecthub.db import models
from projecthub.db.repositories import notifications as notification_repo
from projecthub.services.errors import InvalidValueError
from projecthub.utils.group_permissions import get_group_display_name
from projecthub.utils.role_permissions import get_role_display_name

logger = logging.getLogger(__name__)

# Event type constants
EVENT_INVITATION = 'invitation'
EVENT_ROLE_CHANGE = 'role_change'
EVENT_GROUP_CHANGE = 'group_change'
EVENT_MENTION = 'mention'

EVENT_TYPES = (EVENT_INVITATION, EVENT_ROLE_CHANGE, EVENT_GROUP_CHANGE, EVENT_MENTION)

DEFAULT_EXPIRES_DAYS = 30
DEFAULT_LIMIT = 50


def project_path(project_id: str) -> str:
    return f"/projects/{project_id}"


class NotificationService:
    """Service class for in-app notifications. Takes its ``Session`` from the caller."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = models.now_utc):
        self.db = db
        self.clock = clock

    # === User Preference Management ===

    def get_user_preferences(self, user_id: str) -> Dict[str, bool]:
        """In-app switch per event type; event types never set default to enabled."""
        preferences = {event_type: True for event_type in EVENT_TYPES}
        for event_type, enabled in notification_repo.get_preferences(self.db, user_id).items():
            if event_type in preferences:
                preferences[event_type] = enabled
        return preferences

    def set_user_preference(self, user_id: str, event_type: str, in_app_enabled: bool) -> models.NotificationPreference:
        if event_type not in EVENT_TYPES:
            raise InvalidValueError(f"Invalid event type. Must be one of: {', '.join(EVENT_TYPES)}")
        return notification_repo.upsert_preference(self.db, user_id, event_type, in_app_enabled=in_app_enabled)

    def should_notify_user(self, user_id: str, event_type: str) -> bool:
        """
        Whether ``user_id`` wants in-app notifications of ``event_type``.

        Unknown event types are always delivered, and so is everything when
        the preferences cannot be read.
        """
        if event_type not in EVENT_TYPES:
            return True
        try:
            return self.get_user_preferences(user_id)[event_type]
        except Exception as e:
            logger.warning("Could not read notification preferences for %s: %s", user_id, e)
            self.db.rollback()
            return True

    # === In-App Notification Management ===

    def create_notification(
        self,
        user_id: str,
        event_type: str,
        title: str,
        message: str,
        project_id: Optional[str] = None,
        action_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        expires_days: Optional[int] = DEFAULT_EXPIRES_DAYS,
    ) -> models.Notification:
        """
        Create an in-app notification for a user. Raises if the write fails.

        Args:
            user_id: The recipient user ID
            event_type: One of ``EVENT_TYPES``
            title: Short notification title
            message: Detailed notification message
            project_id: Project the event happened in, if any
            action_url: Optional frontend path the notification links to
            metadata: Additional event-specific data
            expires_days: Days until the notification expires; None keeps it forever
        """
        now = self.clock()
        expires_at = now + timedelta(days=expires_days) if expires_days else None
        return notification_repo.create_notification(
            self.db,
            user_id=user_id,
            project_id=project_id,
            event_type=event_type,
            title=title,
            message=message,
            action_url=action_url,
            metadata=metadata,
            created_at=now,
            expires_at=expires_at,
        )

    def get_user_notifications(self, user_id: str, unread_only: bool = False, limit: int = DEFAULT_LIMIT) -> List[models.Notification]:
        """Unexpired notifications for a user, most recent first."""
        if limit is None or limit < 1:
            raise InvalidValueError("limit must be a positive integer")
        return notification_repo.get_user_notifications(
            self.db, user_id, now=self.clock(), unread_only=unread_only, limit=limit
        )

    def mark_notification_read(self, notification_id: str, user_id: str) -> bool:
        """False if the notification does not exist or belongs to someone else."""
        return notification_repo.mark_read(self.db, notification_id, user_id, read_at=self.clock())

    def mark_all_read(self, user_id: str) -> int:
        return notification_repo.mark_all_read(self.db, user_id, read_at=self.clock())

    def get_unread_count(self, user_id: str) -> int:
        return notification_repo.count_unread(self.db, user_id, now=self.clock())

    def cleanup_expired_notifications(self) -> int:
        count = notification_repo.delete_expired(self.db, now=self.clock())
        if count:
            logger.info("Deleted %d expired notifications", count)
        return count

    # === Membership events ===

    def _notify(self, user_id: str, event_type: str, **kwargs) -> None:
        try:
            if not self.should_notify_user(user_id, event_type):
                return
            self.create_notification(user_id, event_type, **kwargs)
        except Exception as e:
            logger.error("Failed to create %s notification for %s: %s", event_type, user_id, e)
            try:
                self.db.rollback()
            except Exception:  # pragma: no cover - connection already gone
                logger.warning("Rollback after failed notification write also failed")

    def notify_invitation_accepted(
        self,
        inviter_id: str,
        project_id: str,
        invitee_email: str,
        role: str,
        group: str,
        accepted_by: str,
    ) -> None:
        self._notify(
            inviter_id,
            EVENT_INVITATION,
            title="Invitation accepted",
            message=(
                f"{invitee_email} accepted your invitation to join as "
                f"{get_role_display_name(role)} in {get_group_display_name(group)}"
            ),
            project_id=project_id,
            action_url=project_path(project_id),
            metadata={"accepted_by": accepted_by, "email": invitee_email, "role": role, "group": group},
        )

    def notify_role_changed(self, user_id: str, project_id: str, old_role: str, new_role: str, changed_by: str) -> None:
        self._notify(
            user_id,
            EVENT_ROLE_CHANGE,
            title="Your role was changed",
            message=(
                f"Your role has been changed from {get_role_display_name(old_role)} "
                f"to {get_role_display_name(new_role)}"
            ),
            project_id=project_id,
            action_url=project_path(project_id),
            metadata={"old_role": old_role, "new_role": new_role, "changed_by": changed_by},
        )

    def notify_group_changed(self, user_id: str, project_id: str, old_group: str, new_group: str, changed_by: str) -> None:
        self._notify(
            user_id,
            EVENT_GROUP_CHANGE,
            title="You were moved to another group",
            message=(
                f"You have been moved from {get_group_display_name(old_group)} to "
                f"{get_group_display_name(new_group)}. Your document visibility has been updated."
            ),
            project_id=project_id,
            action_url=project_path(project_id),
            metadata={"old_group": old_group, "new_group": new_group, "changed_by": changed_by},
        )
