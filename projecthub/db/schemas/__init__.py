"""
Domain-split Pydantic schemas with a package-level aggregator.
"""

from .users import UserBase, User
from .projects import (
    ProjectCreate,
    ProjectUpdate,
    Project,
    ProjectMember,
    MemberRoleUpdate,
    MemberGroupUpdate,
    DocumentCreate,
    DocumentVisibilityUpdate,
    Document,
)
from .invitations import (
    InvitationCreate,
    Invitation,
    InviteLinkCreate,
    InviteLink,
    InviteLinkAcceptResult,
)
from .activity import ActivityLogEntry, ActivityPage, entry_to_schema
from .notifications import (
    Notification,
    notification_to_schema,
    NotificationListResponse,
    MarkAllReadResponse,
    NotificationPreferencesResponse,
    NotificationPreferenceUpdate,
    NotificationPreference,
)

__all__ = [
    "UserBase",
    "User",
    "ProjectCreate",
    "ProjectUpdate",
    "Project",
    "ProjectMember",
    "MemberRoleUpdate",
    "MemberGroupUpdate",
    "DocumentCreate",
    "DocumentVisibilityUpdate",
    "Document",
    "InvitationCreate",
    "Invitation",
    "InviteLinkCreate",
    "InviteLink",
    "InviteLinkAcceptResult",
    "ActivityLogEntry",
    "ActivityPage",
    "entry_to_schema",
    "Notification",
    "notification_to_schema",
    "NotificationListResponse",
    "MarkAllReadResponse",
    "NotificationPreferencesResponse",
    "NotificationPreferenceUpdate",
    "NotificationPreference",
]
