from sqlalchemy import Column, String, Text, DateTime, Boolean, Index
from sqlalchemy.dialects.postgresql import JSONB
from .base import Base, now_utc, new_id


class Notification(Base):
    __tablename__ = 'notifications'
    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=False)
    # No foreign key: a notification outlives a deleted project
    project_id = Column(String, nullable=True)
    event_type = Column(String(50), nullable=False)  # invitation|role_change|group_change|mention
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(Text, nullable=True)
    metadata_json = Column('metadata', JSONB, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_notifications_user_id_created_at', 'user_id', 'created_at'),
        Index('ix_notifications_user_id_is_read', 'user_id', 'is_read'),
    )

    def get_metadata(self):
        return self.metadata_json or {}


class NotificationPreference(Base):
    __tablename__ = 'notification_preferences'
    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=False)
    event_type = Column(String(50), nullable=False)
    in_app_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('ix_notification_preferences_user_event', 'user_id', 'event_type', unique=True),
    )
