"""
Notification and notification preference repository functions.

Reads skip expired rows; a notification without ``expires_at`` never expires.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from projecthub.db import models


def create_notification(
    db: Session,
    *,
    user_id: str,
    event_type: str,
    title: str,
    message: str,
    project_id: Optional[str] = None,
    action_url: Optional[str] = None,
    metadata: Optional[dict] = None,
    created_at: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
) -> models.Notification:
    db_notification = models.Notification(
        user_id=user_id,
        project_id=project_id,
        event_type=event_type,
        title=title,
        message=message,
        action_url=action_url,
        metadata_json=metadata or {},
        is_read=False,
        created_at=created_at or models.now_utc(),
        expires_at=expires_at,
    )
    db.add(db_notification)
    db.commit()
    db.refresh(db_notification)
    return db_notification


def _live(query, now: datetime):
    return query.filter(
        or_(models.Notification.expires_at.is_(None), models.Notification.expires_at > now)
    )


def get_user_notifications(
    db: Session,
    user_id: str,
    *,
    now: datetime,
    unread_only: bool = False,
    limit: int = 50,
) -> List[models.Notification]:
    query = _live(db.query(models.Notification).filter(models.Notification.user_id == user_id), now)
    if unread_only:
        query = query.filter(models.Notification.is_read.is_(False))
    return (
        query.order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
        .limit(limit)
        .all()
    )


def count_unread(db: Session, user_id: str, *, now: datetime) -> int:
    return _live(
        db.query(models.Notification).filter(
            models.Notification.user_id == user_id,
            models.Notification.is_read.is_(False),
        ),
        now,
    ).count()


def mark_read(db: Session, notification_id: str, user_id: str, *, read_at: datetime) -> bool:
    """Mark one of ``user_id``'s notifications read. False when it is not theirs or does not exist."""
    notification = (
        db.query(models.Notification)
        .filter(models.Notification.id == notification_id, models.Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        return False
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = read_at
        db.commit()
    return True


def mark_all_read(db: Session, user_id: str, *, read_at: datetime) -> int:
    count = (
        db.query(models.Notification)
        .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
        .update({"is_read": True, "read_at": read_at}, synchronize_session=False)
    )
    db.commit()
    return count


def delete_expired(db: Session, *, now: datetime) -> int:
    count = (
        db.query(models.Notification)
        .filter(models.Notification.expires_at.isnot(None), models.Notification.expires_at <= now)
        .delete(synchronize_session=False)
    )
    db.commit()
    return count


def get_preferences(db: Session, user_id: str) -> Dict[str, bool]:
    rows = db.query(models.NotificationPreference).filter(models.NotificationPreference.user_id == user_id).all()
    return {row.event_type: bool(row.in_app_enabled) for row in rows}


def upsert_preference(db: Session, user_id: str, event_type: str, *, in_app_enabled: bool) -> models.NotificationPreference:
    existing = (
        db.query(models.NotificationPreference)
        .filter(
            models.NotificationPreference.user_id == user_id,
            models.NotificationPreference.event_type == event_type,
        )
        .first()
    )
    if existing:
        existing.in_app_enabled = in_app_enabled
        existing.updated_at = models.now_utc()
    else:
        existing = models.NotificationPreference(user_id=user_id, event_type=event_type, in_app_enabled=in_app_enabled)
        db.add(existing)
    db.commit()
    db.refresh(existing)
    return existing
