from datetime import datetime
from pydantic import BaseModel, ConfigDict

from projecthub.utils.role_permissions import RoleEnum
from projecthub.utils.group_permissions import GroupEnum, GROUP_DEFAULTS


class InvitationCreate(BaseModel):
    email: str
    role: RoleEnum
    group: GroupEnum = GroupEnum(GROUP_DEFAULTS.invitation_group)


class Invitation(BaseModel):
    id: str
    project_id: str
    email: str
    role: str
    group: str
    invited_by: str
    token: str
    status: str
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None
    declined_at: datetime | None = None
    # Derived at read time: 'expired' for a pending invitation past expires_at
    effective_status: str | None = None
    model_config = ConfigDict(from_attributes=True)


class InviteLinkCreate(BaseModel):
    role: RoleEnum
    group: GroupEnum


class InviteLink(BaseModel):
    id: str
    token: str
    project_id: str
    role: str
    group: str
    created_by: str
    status: str
    created_at: datetime
    expires_at: datetime
    accepted_by: str | None = None
    accepted_at: datetime | None = None
    is_expired: bool = False
    url: str | None = None
    model_config = ConfigDict(from_attributes=True)


class InviteLinkAcceptResult(BaseModel):
    project_id: str
    role: str
    group: str
