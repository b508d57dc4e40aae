"""
Activity log repository functions.

Append and query only; there is deliberately no update or delete here.
Queries are indexed on project_id + timestamp (and + user_id / + action).
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from projecthub.db import models


def create_activity_log(
    db: Session,
    *,
    project_id: str,
    user_id: str,
    action: str,
    resource_type: str,
    resource_id: Optional[str],
    group_context: Optional[str],
    metadata: Optional[dict],
    timestamp: Optional[datetime] = None,
) -> models.ActivityLog:
    db_entry = models.ActivityLog(
        project_id=project_id,
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        group_context=group_context,
        metadata_json=metadata or {},
        timestamp=timestamp or models.now_utc(),
    )
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    return db_entry


def _newest_first(query):
    return query.order_by(models.ActivityLog.timestamp.desc(), models.ActivityLog.id.desc())


def get_project_activity(
    db: Session,
    project_id: str,
    *,
    limit: int,
    after: Optional[Tuple[datetime, str]] = None,
) -> List[models.ActivityLog]:
    """One page of a project's log; ``after`` is the (timestamp, id) of the previous page's last entry."""
    q = db.query(models.ActivityLog).filter(models.ActivityLog.project_id == project_id)
    if after is not None:
        ts, entry_id = after
        q = q.filter(
            or_(
                models.ActivityLog.timestamp < ts,
                and_(models.ActivityLog.timestamp == ts, models.ActivityLog.id < entry_id),
            )
        )
    return _newest_first(q).limit(limit).all()


def get_activity_by_user(db: Session, project_id: str, user_id: str, *, limit: int) -> List[models.ActivityLog]:
    q = db.query(models.ActivityLog).filter(
        models.ActivityLog.project_id == project_id,
        models.ActivityLog.user_id == user_id,
    )
    return _newest_first(q).limit(limit).all()


def get_activity_by_action(db: Session, project_id: str, action: str, *, limit: int) -> List[models.ActivityLog]:
    q = db.query(models.ActivityLog).filter(
        models.ActivityLog.project_id == project_id,
        models.ActivityLog.action == action,
    )
    return _newest_first(q).limit(limit).all()


def get_activity_in_range(
    db: Session,
    project_id: str,
    start: datetime,
    end: datetime,
    *,
    limit: int,
) -> List[models.ActivityLog]:
    q = db.query(models.ActivityLog).filter(
        models.ActivityLog.project_id == project_id,
        models.ActivityLog.timestamp >= start,
        models.ActivityLog.timestamp <= end,
    )
    return _newest_first(q).limit(limit).all()
