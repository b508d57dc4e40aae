"""
Notification API endpoints.

In-app notifications and preferences of the calling user.
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from projecthub.api.deps import get_current_user
from projecthub.db import models, schemas
from projecthub.db.database import get_db
from projecthub.services.notification_service import DEFAULT_LIMIT, NotificationService


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=schemas.NotificationListResponse)
def get_notifications(
    unread_only: bool = False,
    limit: int = DEFAULT_LIMIT,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """
    Notifications for the current user, most recent first.

    - **unread_only**: If true, only return unread notifications
    - **limit**: Maximum number of notifications to return (default 50)
    """
    service = NotificationService(db)
    notifications = service.get_user_notifications(user.id, unread_only=unread_only, limit=limit)
    return schemas.NotificationListResponse(
        notifications=[schemas.notification_to_schema(n) for n in notifications],
        unread_count=service.get_unread_count(user.id),
        total_count=len(notifications),
    )


@router.post("/read-all", response_model=schemas.MarkAllReadResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return schemas.MarkAllReadResponse(updated=NotificationService(db).mark_all_read(user.id))


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    if not NotificationService(db).mark_notification_read(notification_id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/preferences", response_model=schemas.NotificationPreferencesResponse)
def get_notification_preferences(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return schemas.NotificationPreferencesResponse(preferences=NotificationService(db).get_user_preferences(user.id))


@router.put("/preferences/{event_type}", response_model=schemas.NotificationPreference)
def update_notification_preference(
    event_type: str,
    payload: schemas.NotificationPreferenceUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Turn in-app notifications of one event type on or off."""
    return NotificationService(db).set_user_preference(user.id, event_type, payload.in_app_enabled)
