"""
Projects API endpoints.

Project lifecycle, membership management, the caller's permission summary
and group-visible documents.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from projecthub.api.deps import (
    get_current_user,
    get_project_or_404,
    get_project_permissions,
    require_member,
)
from projecthub.db import models, schemas
from projecthub.db.database import get_db
from projecthub.db.repositories import projects as project_repo
from projecthub.services.document_service import DocumentService
from projecthub.services.project_service import ProjectService
from projecthub.utils.group_permissions import normalize_member_group
from projecthub.utils.project_permissions import ProjectPermissions


router = APIRouter(prefix="/projects", tags=["projects"])


def _member_out(m: models.ProjectMembership) -> schemas.ProjectMember:
    return schemas.ProjectMember(
        project_id=m.project_id,
        user_id=m.user_id,
        role=m.role,
        group=normalize_member_group(m.group),
        invited_by=m.invited_by,
        joined_at=m.joined_at,
        last_active_at=m.last_active_at,
    )


@router.post("/", response_model=schemas.Project, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: schemas.ProjectCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ProjectService(db).create_project(payload.name, user.id)


@router.get("/", response_model=List[schemas.Project])
def list_projects(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Projects the caller is a member of."""
    return ProjectService(db).get_user_projects(user.id)


@router.get("/{project_id}", response_model=schemas.Project)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    project = get_project_or_404(db, project_id)
    require_member(perms)
    return project


@router.put("/{project_id}", response_model=schemas.Project)
def update_project(
    project_id: str,
    payload: schemas.ProjectUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ProjectService(db).update_project(project_id, user.id, payload.name)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    ProjectService(db).delete_project(project_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/permissions")
def get_my_permissions(
    project_id: str,
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    """The caller's role, group and permission flags; all false for a non-member."""
    get_project_or_404(db, project_id)
    return perms.to_dict()


# Members

@router.get("/{project_id}/members", response_model=List[schemas.ProjectMember])
def list_members(
    project_id: str,
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    require_member(perms)
    return [_member_out(m) for m in ProjectService(db).get_members(project_id)]


@router.put("/{project_id}/members/{user_id}/role", response_model=schemas.ProjectMember)
def update_member_role(
    project_id: str,
    user_id: str,
    payload: schemas.MemberRoleUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    get_project_or_404(db, project_id)
    updated = ProjectService(db).change_member_role(project_id, user.id, user_id, payload.role.value)
    return _member_out(updated)


@router.put("/{project_id}/members/{user_id}/group", response_model=schemas.ProjectMember)
def update_member_group(
    project_id: str,
    user_id: str,
    payload: schemas.MemberGroupUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    get_project_or_404(db, project_id)
    updated = ProjectService(db).change_member_group(project_id, user.id, user_id, payload.group.value)
    return _member_out(updated)


@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    project_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    get_project_or_404(db, project_id)
    ProjectService(db).remove_member(project_id, user.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Documents

@router.post("/{project_id}/documents", response_model=schemas.Document, status_code=status.HTTP_201_CREATED)
def add_document(
    project_id: str,
    payload: schemas.DocumentCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    get_project_or_404(db, project_id)
    visibility = payload.visibility.value if payload.visibility else None
    return DocumentService(db).add_document(project_id, user.id, payload.name, payload.category, visibility)


@router.get("/{project_id}/documents", response_model=List[schemas.Document])
def list_documents(
    project_id: str,
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    require_member(perms)
    return DocumentService(db).list_documents(project_id, perms.user_id)


@router.put("/{project_id}/documents/{document_id}/visibility", response_model=schemas.Document)
def set_document_visibility(
    project_id: str,
    document_id: str,
    payload: schemas.DocumentVisibilityUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    get_project_or_404(db, project_id)
    document = project_repo.get_document(db, document_id)
    if document is None or document.project_id != project_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentService(db).set_document_visibility(document_id, user.id, payload.visibility.value)
