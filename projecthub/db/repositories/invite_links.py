"""
Invite link repository functions.

Shareable single-use links. ``transition_invite_link`` is the conditional
write that makes the ``active -> used`` step single-use under concurrent
acceptors.
"""
from __future__ import annotations

from typing import Optional, List
from sqlalchemy import update
from sqlalchemy.orm import Session

from projecthub.db import models


def create_invite_link(
    db: Session,
    *,
    project_id: str,
    role: str,
    group: str,
    created_by: str,
    token: str,
    created_at,
    expires_at,
) -> models.InviteLink:
    db_link = models.InviteLink(
        project_id=project_id,
        role=role,
        group=group,
        created_by=created_by,
        token=token,
        status='active',
        created_at=created_at,
        expires_at=expires_at,
    )
    db.add(db_link)
    db.commit()
    db.refresh(db_link)
    return db_link


def get_invite_link(db: Session, link_id: str) -> Optional[models.InviteLink]:
    return db.query(models.InviteLink).filter(models.InviteLink.id == link_id).first()


def get_invite_link_by_token(db: Session, token: str) -> Optional[models.InviteLink]:
    return db.query(models.InviteLink).filter(models.InviteLink.token == token).first()


def get_project_invite_links(db: Session, project_id: str, *, created_by: str | None = None) -> List[models.InviteLink]:
    """Links for a project, newest first; restricted to one creator when ``created_by`` is given."""
    q = db.query(models.InviteLink).filter(models.InviteLink.project_id == project_id)
    if created_by is not None:
        q = q.filter(models.InviteLink.created_by == created_by)
    return q.order_by(models.InviteLink.created_at.desc()).all()


def transition_invite_link(
    db: Session,
    link_id: str,
    *,
    from_status: str,
    to_status: str,
    commit: bool = True,
    **fields,
) -> bool:
    """Move a link from ``from_status`` to ``to_status``; False if another writer got there first."""
    result = db.execute(
        update(models.InviteLink)
        .where(models.InviteLink.id == link_id, models.InviteLink.status == from_status)
        .values(status=to_status, **fields)
        .execution_options(synchronize_session=False)
    )
    if commit:
        db.commit()
    return result.rowcount == 1


def delete_project_invite_links(db: Session, project_id: str, *, commit: bool = True) -> int:
    deleted = (
        db.query(models.InviteLink)
        .filter(models.InviteLink.project_id == project_id)
        .delete(synchronize_session=False)
    )
    if commit:
        db.commit()
    return deleted
