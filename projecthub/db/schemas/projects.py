from datetime import datetime
from pydantic import BaseModel, ConfigDict

from projecthub.utils.role_permissions import RoleEnum
from projecthub.utils.group_permissions import GroupEnum, VisibilityEnum


class ProjectCreate(BaseModel):
    name: str


class ProjectUpdate(BaseModel):
    name: str


class Project(BaseModel):
    id: str
    name: str
    owner_user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class ProjectMember(BaseModel):
    project_id: str
    user_id: str
    role: str
    group: str
    invited_by: str | None = None
    joined_at: datetime | None = None
    last_active_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class MemberRoleUpdate(BaseModel):
    role: RoleEnum


class MemberGroupUpdate(BaseModel):
    group: GroupEnum


class DocumentCreate(BaseModel):
    name: str
    category: str | None = None
    # Defaults to the uploader's group visibility when omitted
    visibility: VisibilityEnum | None = None


class DocumentVisibilityUpdate(BaseModel):
    visibility: VisibilityEnum


class Document(BaseModel):
    id: str
    project_id: str
    name: str
    category: str | None = None
    uploaded_by: str
    visibility: str
    uploaded_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)
