"""
Email invitation endpoints.

Project-scoped routes (create, list pending, cancel) require invite
permission; token routes let the invitee accept or decline.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from projecthub.api.deps import get_current_user, get_project_or_404, get_project_permissions
from projecthub.audit import ActivityAction, ResourceType
from projecthub.db import models, schemas
from projecthub.db.database import get_db
from projecthub.db.repositories import invitations as invitation_repo
from projecthub.services.activity_log_service import ActivityLogService
from projecthub.services.invitation_service import InvitationService
from projecthub.utils.group_permissions import GROUP_CONSULTING
from projecthub.utils.project_permissions import ProjectPermissions


router = APIRouter(tags=["invitations"])


def _invitation_out(service: InvitationService, invitation: models.Invitation) -> schemas.Invitation:
    out = schemas.Invitation.model_validate(invitation)
    out.effective_status = service.effective_status(invitation)
    return out


@router.post(
    "/projects/{project_id}/invitations",
    response_model=schemas.Invitation,
    status_code=status.HTTP_201_CREATED,
)
def create_invitation(
    project_id: str,
    payload: schemas.InvitationCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    role, group = payload.role.value, payload.group.value
    if not perms.can_invite:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to invite members")
    if group == GROUP_CONSULTING and not perms.can_move_user_between_groups():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to invite members to the consulting group",
        )
    if role not in perms.assignable_roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"You cannot assign the {role} role")

    service = InvitationService(db)
    invitation = service.create_invitation(project_id, payload.email, role, user.id, group)
    ActivityLogService(db).emit_activity(
        project_id,
        user.id,
        ActivityAction.INVITATION_CREATED,
        ResourceType.INVITATION,
        invitation.id,
        metadata={"email": invitation.email, "role": role, "group": group},
        group_context=group,
    )
    return _invitation_out(service, invitation)


@router.get("/projects/{project_id}/invitations", response_model=List[schemas.Invitation])
def list_pending_invitations(
    project_id: str,
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    if not perms.can_invite:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to view invitations")
    service = InvitationService(db)
    return [_invitation_out(service, i) for i in service.get_project_pending_invitations(project_id)]


@router.delete("/projects/{project_id}/invitations/{invitation_id}", response_model=schemas.Invitation)
def cancel_invitation(
    project_id: str,
    invitation_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    get_project_or_404(db, project_id)
    if not perms.can_invite:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to cancel invitations")
    existing = invitation_repo.get_invitation(db, invitation_id)
    if existing is None or existing.project_id != project_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")

    service = InvitationService(db)
    invitation = service.cancel_invitation(invitation_id)
    ActivityLogService(db).emit_activity(
        project_id,
        user.id,
        ActivityAction.INVITATION_CANCELLED,
        ResourceType.INVITATION,
        invitation_id,
        metadata={"email": invitation.email},
        group_context=invitation.group,
    )
    return _invitation_out(service, invitation)


@router.get("/invitations/mine", response_model=List[schemas.Invitation])
def list_my_invitations(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    service = InvitationService(db)
    return [_invitation_out(service, i) for i in service.get_user_invitations(user.email)]


@router.get("/invitations/{token}", response_model=schemas.Invitation)
def get_invitation(
    token: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    service = InvitationService(db)
    invitation = service.get_invitation(token)
    if invitation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    return _invitation_out(service, invitation)


@router.post("/invitations/{token}/accept", response_model=schemas.ProjectMember)
def accept_invitation(
    token: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    membership = InvitationService(db).accept_invitation(token, user.id)
    out = schemas.ProjectMember.model_validate(membership)
    ActivityLogService(db).emit_activity(
        out.project_id,
        user.id,
        ActivityAction.INVITATION_ACCEPTED,
        ResourceType.MEMBER,
        user.id,
        metadata={"role": out.role, "group": out.group, "invited_by": out.invited_by},
        group_context=out.group,
    )
    return out


@router.post("/invitations/{token}/decline", response_model=schemas.Invitation)
def decline_invitation(
    token: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    service = InvitationService(db)
    invitation = service.decline_invitation(token)
    ActivityLogService(db).emit_activity(
        invitation.project_id,
        user.id,
        ActivityAction.INVITATION_DECLINED,
        ResourceType.INVITATION,
        invitation.id,
        metadata={"email": invitation.email},
        group_context=invitation.group,
    )
    return _invitation_out(service, invitation)
