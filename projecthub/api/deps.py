"""
API dependency helpers.

Resolves the calling user from the auth proxy headers and the caller's
permissions in the project named by the ``project_id`` path parameter.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker

from projecthub.api.auth import (
    DEV_USER_EMAIL,
    DEV_USER_NAME,
    get_or_create_user,
    resolve_identity_from_headers,
)
from projecthub.db import models
from projecthub.db.database import get_db, get_session_factory
from projecthub.db.repositories import projects as project_repo
from projecthub.utils.project_permissions import (
    ProjectPermissions,
    SessionMembershipLookup,
    resolve_project_permissions,
)
from projecthub.utils.runtime import dev_mode_active

logger = logging.getLogger(__name__)


def get_current_user(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> models.User:
    # Contract: returns the ORM user; 401 when no identity can be resolved
    if dev_mode_active():
        name, email = DEV_USER_NAME, DEV_USER_EMAIL
    else:
        name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return get_or_create_user(db, email=email, display_name=name)


def get_project_or_404(db: Session, project_id: str) -> models.Project:
    project = project_repo.get_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


async def get_project_permissions(
    project_id: str,
    user: models.User = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> ProjectPermissions:
    """Caller's permissions in ``project_id``; 503 when the lookups failed."""
    perms = await resolve_project_permissions(SessionMembershipLookup(session_factory), project_id, user.id)
    if perms.error:
        logger.error("Permission lookup failed for project %s: %s", project_id, perms.error)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Permissions are temporarily unavailable")
    return perms


def require_member(perms: ProjectPermissions) -> ProjectPermissions:
    if not perms.is_member:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not a member of this project")
    return perms
