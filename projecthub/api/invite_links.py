"""
Invite link endpoints.

Creating a link is capped at the creator's assignable roles here, at the
boundary; the link service itself grants whatever role it is given.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from projecthub.api.deps import (
    get_current_user,
    get_project_or_404,
    get_project_permissions,
    require_member,
)
from projecthub.db import models, schemas
from projecthub.db.database import get_db
from projecthub.db.repositories import invite_links as link_repo
from projecthub.services.invite_link_service import InviteLinkService
from projecthub.utils.project_permissions import ProjectPermissions


router = APIRouter(tags=["invite-links"])


@router.post(
    "/projects/{project_id}/invite-links",
    response_model=schemas.InviteLink,
    status_code=status.HTTP_201_CREATED,
)
def create_invite_link(
    project_id: str,
    payload: schemas.InviteLinkCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    role, group = payload.role.value, payload.group.value
    if not perms.can_invite:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to create invite links")
    if role not in perms.assignable_roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You cannot create an invite link for the {role} role",
        )
    return InviteLinkService(db).generate_invite_link(project_id, role, group, user.id)


@router.get("/projects/{project_id}/invite-links", response_model=List[schemas.InviteLink])
def list_invite_links(
    project_id: str,
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    """All links for owner/admin; only the caller's own links for other members."""
    get_project_or_404(db, project_id)
    require_member(perms)
    service = InviteLinkService(db)
    return [service.to_schema(link) for link in service.get_project_invite_links(project_id, perms.user_id, perms.role)]


@router.delete("/projects/{project_id}/invite-links/{link_id}", response_model=schemas.InviteLink)
def revoke_invite_link(
    project_id: str,
    link_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    link = link_repo.get_invite_link(db, link_id)
    if link is None or link.project_id != project_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite link not found")
    if not perms.can_revoke_link(link):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to revoke this link")
    service = InviteLinkService(db)
    return service.to_schema(service.revoke_invite_link(link_id, user.id))


@router.get("/invite-links/{token}", response_model=schemas.InviteLink)
def get_invite_link(
    token: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    service = InviteLinkService(db)
    link = service.get_invite_link(token)
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite link not found")
    return service.to_schema(link)


@router.post("/invite-links/{token}/accept", response_model=schemas.InviteLinkAcceptResult)
def accept_invite_link(
    token: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return InviteLinkService(db).accept_invite_link(token, user.id)
