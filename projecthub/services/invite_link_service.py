"""
Shareable invite links: generate, look up, accept once, revoke.

States move ``active -> used | revoked`` and never back; expiry is derived
from ``expires_at`` when read. Acceptance marks the link used with a
conditional write in the same transaction as the membership insert, so two
concurrent acceptors cannot both join through one link.

The ceiling on which role a link may grant is enforced by the caller (the
API checks the role against the creator's assignable roles).
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from projecthub.audit import ActivityAction, ResourceType
from projecthub.db import models, schemas
from projecthub.db.repositories import invite_links as link_repo
from projecthub.db.repositories import memberships as membership_repo
from projecthub.services import lifecycle
from projecthub.services.activity_log_service import ActivityLogService
from projecthub.services.errors import AlreadyMemberError, InvalidValueError
from projecthub.utils.group_permissions import validate_group
from projecthub.utils.invite_settings import get_invite_settings
from projecthub.utils.role_permissions import MANAGE_ROLES, validate_role
from projecthub.utils.urls import build_invite_link_url

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "link_"
TOKEN_PREVIEW_LENGTH = 8

STATUS_ACTIVE = "active"
STATUS_USED = "used"
STATUS_REVOKED = "revoked"

ALREADY_MEMBER_MESSAGE = "You are already a member of this project"

ACCEPT_RULES = lifecycle.OfferRules(
    not_found_message="Invite link not found",
    open_status=STATUS_ACTIVE,
    expired_message="This invite link has expired",
    status_message="Invite link is {status}",
    status_messages={
        STATUS_USED: "This invite link has already been used",
        STATUS_REVOKED: "This invite link has been revoked",
    },
)

REVOKE_RULES = lifecycle.OfferRules(
    not_found_message="Invite link not found",
    open_status=STATUS_ACTIVE,
    expired_message="This invite link has expired",
    status_message="Cannot revoke link that is {status}",
)


def _default_token() -> str:
    # 32 random bytes -> 64 hex chars
    return secrets.token_hex(32)


class InviteLinkService:
    """Single-use invite links for a project. Takes its ``Session`` from the caller."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = models.now_utc,
        token_factory: Callable[[], str] = _default_token,
    ):
        self.db = db
        self.clock = clock
        self.token_factory = token_factory
        self.activity = ActivityLogService(db, clock=clock)

    def to_schema(self, link: models.InviteLink) -> schemas.InviteLink:
        """Response model with the derived expiry flag and absolute URL."""
        out = schemas.InviteLink.model_validate(link)
        out.is_expired = lifecycle.is_expired(link, self.clock())
        out.url = build_invite_link_url(link.token)
        return out

    def generate_invite_link(self, project_id: str, role: str, group: str, created_by: str) -> schemas.InviteLink:
        try:
            validate_role(role)
            validate_group(group)
        except ValueError as e:
            raise InvalidValueError(str(e)) from e

        now = self.clock()
        token = f"{TOKEN_PREFIX}{self.token_factory()}"
        link = link_repo.create_invite_link(
            self.db,
            project_id=project_id,
            role=role,
            group=group,
            created_by=created_by,
            token=token,
            created_at=now,
            expires_at=now + get_invite_settings().invite_link_ttl,
        )
        logger.info("Invite link %s created for project %s by %s", link.id, project_id, created_by)
        self.activity.emit_activity(
            project_id,
            created_by,
            ActivityAction.INVITE_LINK_CREATED,
            ResourceType.INVITE_LINK,
            link.id,
            metadata={"role": role, "group": group, "token_preview": token[-TOKEN_PREVIEW_LENGTH:]},
            group_context=group,
        )
        return self.to_schema(link)

    def get_invite_link(self, token: str) -> Optional[models.InviteLink]:
        return link_repo.get_invite_link_by_token(self.db, token)

    def get_project_invite_links(self, project_id: str, user_id: str, user_role: Optional[str]) -> List[models.InviteLink]:
        """Owner and admin see every link; everyone else only the links they created."""
        created_by = None if user_role in MANAGE_ROLES else user_id
        return link_repo.get_project_invite_links(self.db, project_id, created_by=created_by)

    def accept_invite_link(self, token: str, user_id: str) -> Dict[str, str]:
        now = self.clock()

        def not_a_member(link):
            if membership_repo.get_membership(self.db, link.project_id, user_id):
                raise AlreadyMemberError(ALREADY_MEMBER_MESSAGE)

        link = lifecycle.check_offer(
            self.get_invite_link(token),
            ACCEPT_RULES,
            now=now,
            action="accept",
            business_rules=[not_a_member],
        )
        link_id = link.id
        result = {"project_id": link.project_id, "role": link.role, "group": link.group}
        created_by = link.created_by

        # Claim the link first; zero rows means another acceptor or a revoke won
        claimed = link_repo.transition_invite_link(
            self.db,
            link_id,
            from_status=STATUS_ACTIVE,
            to_status=STATUS_USED,
            accepted_by=user_id,
            accepted_at=now,
            commit=False,
        )
        if not claimed:
            self.db.rollback()
            lifecycle.raise_for_lost_transition(link_repo.get_invite_link(self.db, link_id), ACCEPT_RULES, action="accept")
        try:
            membership_repo.create_membership(
                self.db,
                project_id=result["project_id"],
                user_id=user_id,
                role=result["role"],
                group=result["group"],
                invited_by=created_by,
                joined_at=now,
                commit=False,
            )
            self.db.commit()
        except IntegrityError:
            # Joined by another path in the meantime; the link stays active
            self.db.rollback()
            raise AlreadyMemberError(ALREADY_MEMBER_MESSAGE) from None

        logger.info("User %s joined project %s through invite link %s", user_id, result["project_id"], link_id)
        self.activity.emit_activity(
            result["project_id"],
            user_id,
            ActivityAction.INVITE_LINK_ACCEPTED,
            ResourceType.INVITE_LINK,
            link_id,
            metadata={"role": result["role"], "group": result["group"], "link_creator": created_by},
            group_context=result["group"],
        )
        return result

    def revoke_invite_link(self, link_id: str, revoked_by: str) -> models.InviteLink:
        link = lifecycle.check_offer(
            link_repo.get_invite_link(self.db, link_id),
            REVOKE_RULES,
            now=self.clock(),
            action="revoke",
            check_expiry=False,
        )
        project_id, role, group, created_by = link.project_id, link.role, link.group, link.created_by

        revoked = link_repo.transition_invite_link(
            self.db,
            link_id,
            from_status=STATUS_ACTIVE,
            to_status=STATUS_REVOKED,
        )
        fresh = link_repo.get_invite_link(self.db, link_id)
        if not revoked:
            lifecycle.raise_for_lost_transition(fresh, REVOKE_RULES, action="revoke")

        self.activity.emit_activity(
            project_id,
            revoked_by,
            ActivityAction.INVITE_LINK_REVOKED,
            ResourceType.INVITE_LINK,
            link_id,
            metadata={"role": role, "group": group, "original_creator": created_by},
            group_context=group,
        )
        return fresh
