"""
Invitation repository functions.

Email invitations are looked up by primary id or by token. Status changes
out of ``pending`` go through ``transition_invitation``, a conditional write
that only succeeds while the stored status is still the expected one.
"""
from __future__ import annotations

from typing import Optional, List
from sqlalchemy import update
from sqlalchemy.orm import Session

from projecthub.db import models


def create_invitation(
    db: Session,
    *,
    project_id: str,
    email: str,
    role: str,
    group: str,
    invited_by: str,
    token: str,
    created_at,
    expires_at,
) -> models.Invitation:
    db_invitation = models.Invitation(
        project_id=project_id,
        email=email,
        role=role,
        group=group,
        invited_by=invited_by,
        token=token,
        status='pending',
        created_at=created_at,
        expires_at=expires_at,
    )
    db.add(db_invitation)
    db.commit()
    db.refresh(db_invitation)
    return db_invitation


def get_invitation(db: Session, invitation_id: str) -> Optional[models.Invitation]:
    return db.query(models.Invitation).filter(models.Invitation.id == invitation_id).first()


def get_invitation_by_token(db: Session, token: str) -> Optional[models.Invitation]:
    return db.query(models.Invitation).filter(models.Invitation.token == token).first()


def get_invitations_by_email(db: Session, email: str) -> List[models.Invitation]:
    return (
        db.query(models.Invitation)
        .filter(models.Invitation.email == email)
        .order_by(models.Invitation.created_at.desc())
        .all()
    )


def get_project_invitations(db: Session, project_id: str, *, status: str | None = None) -> List[models.Invitation]:
    q = db.query(models.Invitation).filter(models.Invitation.project_id == project_id)
    if status:
        q = q.filter(models.Invitation.status == status)
    return q.order_by(models.Invitation.created_at.desc()).all()


def find_pending_invitation(db: Session, project_id: str, email: str) -> Optional[models.Invitation]:
    return (
        db.query(models.Invitation)
        .filter(
            models.Invitation.project_id == project_id,
            models.Invitation.email == email,
            models.Invitation.status == 'pending',
        )
        .first()
    )


def transition_invitation(
    db: Session,
    invitation_id: str,
    *,
    from_status: str,
    to_status: str,
    commit: bool = True,
    **fields,
) -> bool:
    """Move an invitation from ``from_status`` to ``to_status``; False if it was no longer there."""
    result = db.execute(
        update(models.Invitation)
        .where(models.Invitation.id == invitation_id, models.Invitation.status == from_status)
        .values(status=to_status, **fields)
        .execution_options(synchronize_session=False)
    )
    if commit:
        db.commit()
    return result.rowcount == 1


def delete_project_invitations(db: Session, project_id: str, *, commit: bool = True) -> int:
    deleted = (
        db.query(models.Invitation)
        .filter(models.Invitation.project_id == project_id)
        .delete(synchronize_session=False)
    )
    if commit:
        db.commit()
    return deleted
