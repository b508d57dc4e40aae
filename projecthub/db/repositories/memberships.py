"""
Membership repository functions.

Persisted (role, group) per (project, user). Rows are keyed by the composite
primary key so a user holds at most one membership per project.
"""
from __future__ import annotations

from typing import Optional, List
from sqlalchemy.orm import Session

from projecthub.db import models


def get_membership(db: Session, project_id: str, user_id: str) -> Optional[models.ProjectMembership]:
    return (
        db.query(models.ProjectMembership)
        .filter(
            models.ProjectMembership.project_id == project_id,
            models.ProjectMembership.user_id == user_id,
        )
        .first()
    )


def get_project_memberships(db: Session, project_id: str) -> List[models.ProjectMembership]:
    return (
        db.query(models.ProjectMembership)
        .filter(models.ProjectMembership.project_id == project_id)
        .order_by(models.ProjectMembership.joined_at.asc())
        .all()
    )


def create_membership(
    db: Session,
    *,
    project_id: str,
    user_id: str,
    role: str,
    group: Optional[str],
    invited_by: Optional[str],
    joined_at=None,
    commit: bool = True,
) -> models.ProjectMembership:
    db_member = models.ProjectMembership(
        project_id=project_id,
        user_id=user_id,
        role=role,
        group=group,
        invited_by=invited_by,
    )
    if joined_at is not None:
        db_member.joined_at = joined_at
        db_member.last_active_at = joined_at
    db.add(db_member)
    if commit:
        db.commit()
        db.refresh(db_member)
    else:
        db.flush()
    return db_member


def update_membership(db: Session, project_id: str, user_id: str, **fields) -> Optional[models.ProjectMembership]:
    db_member = get_membership(db, project_id, user_id)
    if db_member:
        fields.setdefault("last_active_at", models.now_utc())
        for key, value in fields.items():
            setattr(db_member, key, value)
        db.commit()
        db.refresh(db_member)
    return db_member


def delete_membership(db: Session, project_id: str, user_id: str) -> bool:
    deleted = (
        db.query(models.ProjectMembership)
        .filter(
            models.ProjectMembership.project_id == project_id,
            models.ProjectMembership.user_id == user_id,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def get_memberships_without_group(db: Session) -> List[models.ProjectMembership]:
    return db.query(models.ProjectMembership).filter(models.ProjectMembership.group.is_(None)).all()


def count_memberships(db: Session) -> int:
    return db.query(models.ProjectMembership).count()
