"""
Document records and their group visibility.

Only metadata is kept here; file storage lives elsewhere. A document's
visibility decides which group sees it (the owner always does).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from projecthub.audit import ActivityAction, ResourceType
from projecthub.db import models
from projecthub.db.repositories import memberships as membership_repo
from projecthub.db.repositories import projects as project_repo
from projecthub.services.activity_log_service import ActivityLogService
from projecthub.services.errors import InvalidValueError, NotFoundError, PermissionDenied
from projecthub.utils.group_permissions import (
    can_set_document_visibility,
    can_view_document,
    get_default_document_visibility,
    normalize_member_group,
    validate_visibility,
)
from projecthub.utils.role_permissions import can_edit_project

logger = logging.getLogger(__name__)


def _check_visibility(visibility: str) -> None:
    try:
        validate_visibility(visibility)
    except ValueError as e:
        raise InvalidValueError(str(e)) from e


class DocumentService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = models.now_utc):
        self.db = db
        self.clock = clock
        self.activity = ActivityLogService(db, clock=clock)

    def add_document(
        self,
        project_id: str,
        uploader_id: str,
        name: str,
        category: Optional[str] = None,
        visibility: Optional[str] = None,
    ) -> models.Document:
        """Record an uploaded document; visibility defaults from the uploader's group."""
        membership = membership_repo.get_membership(self.db, project_id, uploader_id)
        role = membership.role if membership else None
        if not can_edit_project(role):
            raise PermissionDenied("You do not have permission to upload documents")
        name = (name or "").strip()
        if not name:
            raise InvalidValueError("Document name is required")

        group = normalize_member_group(membership.group)
        default_visibility = get_default_document_visibility(group)
        if visibility is None:
            visibility = default_visibility
        else:
            _check_visibility(visibility)
            if visibility != default_visibility and not can_set_document_visibility(role, group):
                raise PermissionDenied("You do not have permission to set document visibility")

        document = project_repo.create_document(
            self.db,
            project_id=project_id,
            name=name,
            category=category,
            uploaded_by=uploader_id,
            visibility=visibility,
        )
        self.activity.emit_activity(
            project_id,
            uploader_id,
            ActivityAction.DOCUMENT_UPLOADED,
            ResourceType.DOCUMENT,
            document.id,
            metadata={"name": name, "category": category, "visibility": visibility},
            group_context=group,
        )
        return document

    def list_documents(self, project_id: str, user_id: str) -> List[models.Document]:
        """Documents of the project the user may see; nothing for a non-member."""
        membership = membership_repo.get_membership(self.db, project_id, user_id)
        if membership is None:
            return []
        group = normalize_member_group(membership.group)
        return [
            d for d in project_repo.get_project_documents(self.db, project_id)
            if can_view_document(group, d.visibility, membership.role)
        ]

    def set_document_visibility(self, document_id: str, actor_id: str, visibility: str) -> models.Document:
        _check_visibility(visibility)
        document = project_repo.get_document(self.db, document_id)
        if document is None:
            raise NotFoundError("Document not found")
        project_id = document.project_id
        membership = membership_repo.get_membership(self.db, project_id, actor_id)
        role = membership.role if membership else None
        group = normalize_member_group(membership.group) if membership else None
        if not can_set_document_visibility(role, group):
            raise PermissionDenied("You do not have permission to change document visibility")

        old_visibility = document.visibility
        updated = project_repo.update_document_visibility(self.db, document_id, visibility)
        self.activity.emit_activity(
            project_id,
            actor_id,
            ActivityAction.DOCUMENT_VISIBILITY_CHANGED,
            ResourceType.DOCUMENT,
            document_id,
            metadata={"old_visibility": old_visibility, "new_visibility": visibility},
            group_context=group,
        )
        return updated
