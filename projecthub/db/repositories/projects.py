"""
Project and document repository functions.
"""
from __future__ import annotations

from typing import Optional, List
from sqlalchemy.orm import Session

from projecthub.db import models


def create_project(db: Session, *, name: str, owner_user_id: str, commit: bool = True) -> models.Project:
    db_project = models.Project(name=name, owner_user_id=owner_user_id)
    db.add(db_project)
    if commit:
        db.commit()
        db.refresh(db_project)
    else:
        db.flush()
    return db_project


def get_project(db: Session, project_id: str) -> Optional[models.Project]:
    return db.query(models.Project).filter(models.Project.id == project_id).first()


def get_projects_for_user(db: Session, user_id: str) -> List[models.Project]:
    return (
        db.query(models.Project)
        .join(models.ProjectMembership, models.ProjectMembership.project_id == models.Project.id)
        .filter(models.ProjectMembership.user_id == user_id)
        .order_by(models.Project.created_at.desc())
        .all()
    )


def update_project(db: Session, project_id: str, **fields) -> Optional[models.Project]:
    db_project = get_project(db, project_id)
    if db_project is None:
        return None
    for key, value in fields.items():
        setattr(db_project, key, value)
    db.commit()
    db.refresh(db_project)
    return db_project


def delete_project(db: Session, project_id: str) -> bool:
    """Remove a project together with its memberships and documents. Activity entries are kept."""
    db.query(models.ProjectMembership).filter(
        models.ProjectMembership.project_id == project_id
    ).delete(synchronize_session=False)
    db.query(models.Document).filter(models.Document.project_id == project_id).delete(synchronize_session=False)
    deleted = db.query(models.Project).filter(models.Project.id == project_id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def create_document(
    db: Session,
    *,
    project_id: str,
    name: str,
    category: Optional[str],
    uploaded_by: str,
    visibility: str,
) -> models.Document:
    db_document = models.Document(
        project_id=project_id,
        name=name,
        category=category,
        uploaded_by=uploaded_by,
        visibility=visibility,
    )
    db.add(db_document)
    db.commit()
    db.refresh(db_document)
    return db_document


def get_document(db: Session, document_id: str) -> Optional[models.Document]:
    return db.query(models.Document).filter(models.Document.id == document_id).first()


def get_project_documents(db: Session, project_id: str) -> List[models.Document]:
    return (
        db.query(models.Document)
        .filter(models.Document.project_id == project_id)
        .order_by(models.Document.uploaded_at.desc())
        .all()
    )


def update_document_visibility(db: Session, document_id: str, visibility: str) -> Optional[models.Document]:
    db_document = get_document(db, document_id)
    if db_document:
        db_document.visibility = visibility
        db.commit()
        db.refresh(db_document)
    return db_document
