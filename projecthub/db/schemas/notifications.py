from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict


class Notification(BaseModel):
    id: str
    user_id: str
    project_id: Optional[str] = None
    event_type: str
    title: str
    message: str
    action_url: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


def notification_to_schema(row) -> Notification:
    """Build the response model from an ORM row (whose ``metadata`` attribute is the table MetaData)."""
    return Notification(
        id=row.id,
        user_id=row.user_id,
        project_id=row.project_id,
        event_type=row.event_type,
        title=row.title,
        message=row.message,
        action_url=row.action_url,
        metadata=row.get_metadata(),
        is_read=bool(row.is_read),
        read_at=row.read_at,
        created_at=row.created_at,
        expires_at=row.expires_at,
    )


class NotificationListResponse(BaseModel):
    notifications: List[Notification]
    unread_count: int
    total_count: int


class MarkAllReadResponse(BaseModel):
    updated: int


class NotificationPreferencesResponse(BaseModel):
    preferences: Dict[str, bool]


class NotificationPreferenceUpdate(BaseModel):
    in_app_enabled: bool


class NotificationPreference(BaseModel):
    user_id: str
    event_type: str
    in_app_enabled: bool
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
