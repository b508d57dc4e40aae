"""
Activity logging helpers and enums.

Two entry points with different contracts:

- ``log`` persists one entry and raises on failure.
- ``emit`` is the best-effort form used for side-effect logging after a
  primary mutation has committed. It returns nothing, logs failures and
  never raises, so a broken activity store cannot fail a user action.
"""
from __future__ import annotations
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.orm import Session

from projecthub.db.repositories import activity_logs as activity_repo

logger = logging.getLogger(__name__)


class ActivityAction(str, Enum):
    # Project
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    # Membership
    MEMBER_ROLE_CHANGED = "member_role_changed"
    MEMBER_GROUP_CHANGED = "member_group_changed"
    MEMBER_REMOVED = "member_removed"
    # Invitations
    INVITATION_CREATED = "invitation_created"
    INVITATION_ACCEPTED = "invitation_accepted"
    INVITATION_DECLINED = "invitation_declined"
    INVITATION_CANCELLED = "invitation_cancelled"
    # Invite links
    INVITE_LINK_CREATED = "invite_link_created"
    INVITE_LINK_ACCEPTED = "invite_link_accepted"
    INVITE_LINK_REVOKED = "invite_link_revoked"
    # Documents
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_VISIBILITY_CHANGED = "document_visibility_changed"


class ResourceType(str, Enum):
    PROJECT = "project"
    MEMBER = "member"
    INVITATION = "invitation"
    INVITE_LINK = "invite_link"
    DOCUMENT = "document"


def _value(item) -> Optional[str]:
    # Persist pure string values, not Enum reprs
    if item is None:
        return None
    return item.value if isinstance(item, Enum) else str(item)


def log(
    db: Session,
    *,
    project_id: str,
    user_id: str,
    action: ActivityAction | str,
    resource_type: ResourceType | str,
    resource_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    group_context: Optional[str] = None,
    timestamp: Optional[datetime] = None,
):
    """Append one activity entry. Raises if the write fails."""
    return activity_repo.create_activity_log(
        db,
        project_id=project_id,
        user_id=user_id,
        action=_value(action),
        resource_type=_value(resource_type),
        resource_id=resource_id,
        group_context=_value(group_context),
        metadata=metadata,
        timestamp=timestamp,
    )


def emit(db: Session, **kwargs) -> None:
    """Best-effort ``log``. Failures are logged and discarded."""
    try:
        log(db, **kwargs)
    except Exception as e:
        logger.error(
            "Failed to log activity %s for project %s: %s",
            _value(kwargs.get("action")),
            kwargs.get("project_id"),
            e,
        )
        try:
            db.rollback()
        except Exception:  # pragma: no cover - connection already gone
            logger.warning("Rollback after failed activity write also failed")


__all__ = ["ActivityAction", "ResourceType", "log", "emit"]
