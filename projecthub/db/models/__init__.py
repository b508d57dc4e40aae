"""
Domain-split SQLAlchemy models with a package-level aggregator.

Exposes `Base`, the timestamp/id helpers, and all ORM classes.
"""

from .base import Base, now_utc, new_id, ensure_aware  # re-export

# Domain models
from .users import User
from .projects import Project, ProjectMembership, Document
from .invitations import Invitation, InviteLink
from .activity import ActivityLog
from .notifications import Notification, NotificationPreference

__all__ = [
    # base
    "Base",
    "now_utc",
    "new_id",
    "ensure_aware",
    # users/projects
    "User",
    "Project",
    "ProjectMembership",
    "Document",
    # invitations
    "Invitation",
    "InviteLink",
    # activity
    "ActivityLog",
    # notifications
    "Notification",
    "NotificationPreference",
]
