"""
Email invitation lifecycle: create, accept, decline, cancel.

States move ``pending -> accepted | declined | cancelled`` and never back.
Expiry is not a stored state: a pending invitation past ``expires_at`` reads
as expired (see ``effective_status``) but keeps ``status='pending'``.

Authorization (who may invite, which group they may invite into) and the
activity entries for these actions belong to the caller. Accepting does notify
the inviter in-app, best effort.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from projecthub.db import models
from projecthub.db.repositories import invitations as invitation_repo
from projecthub.db.repositories import memberships as membership_repo
from projecthub.services import lifecycle
from projecthub.services.errors import (
    AlreadyMemberError,
    DuplicateInvitationError,
    InvalidValueError,
)
from projecthub.services.notification_service import NotificationService
from projecthub.utils.group_permissions import GROUP_DEFAULTS, validate_group
from projecthub.utils.invite_settings import get_invite_settings
from projecthub.utils.role_permissions import validate_role

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "inv_"

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_DECLINED = "declined"
STATUS_CANCELLED = "cancelled"

ALREADY_MEMBER_MESSAGE = "You are already a member of this project"

INVITATION_RULES = lifecycle.OfferRules(
    not_found_message="Invitation not found",
    open_status=STATUS_PENDING,
    expired_message="Invitation has expired",
    status_message="Invitation is {status}, cannot {action}",
)


def _default_token() -> str:
    return secrets.token_hex(16)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class InvitationService:
    """Email invitations to a project. Takes its ``Session`` from the caller."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = models.now_utc,
        token_factory: Callable[[], str] = _default_token,
    ):
        self.db = db
        self.clock = clock
        self.token_factory = token_factory

    def create_invitation(
        self,
        project_id: str,
        email: str,
        role: str,
        invited_by: str,
        group: Optional[str] = None,
    ) -> models.Invitation:
        group = group or GROUP_DEFAULTS.invitation_group
        try:
            validate_role(role)
            validate_group(group)
        except ValueError as e:
            raise InvalidValueError(str(e)) from e
        email = normalize_email(email)
        if not email:
            raise InvalidValueError("Email is required")

        if invitation_repo.find_pending_invitation(self.db, project_id, email):
            raise DuplicateInvitationError("User already has a pending invitation for this project")

        now = self.clock()
        invitation = invitation_repo.create_invitation(
            self.db,
            project_id=project_id,
            email=email,
            role=role,
            group=group,
            invited_by=invited_by,
            token=f"{TOKEN_PREFIX}{self.token_factory()}",
            created_at=now,
            expires_at=now + get_invite_settings().invitation_ttl,
        )
        logger.info("Created invitation %s for project %s (role=%s, group=%s)", invitation.id, project_id, role, group)
        return invitation

    def get_invitation(self, token: str) -> Optional[models.Invitation]:
        return invitation_repo.get_invitation_by_token(self.db, token)

    def get_user_invitations(self, email: str) -> List[models.Invitation]:
        return invitation_repo.get_invitations_by_email(self.db, normalize_email(email))

    def get_project_pending_invitations(self, project_id: str) -> List[models.Invitation]:
        """Invitations still pending; expired ones are included and read as expired."""
        return invitation_repo.get_project_invitations(self.db, project_id, status=STATUS_PENDING)

    def effective_status(self, invitation: models.Invitation) -> str:
        return lifecycle.effective_status(invitation, INVITATION_RULES, self.clock())

    def accept_invitation(self, token: str, user_id: str) -> models.ProjectMembership:
        """Join the project with the invitation's role and group."""
        now = self.clock()

        def not_a_member(inv):
            if membership_repo.get_membership(self.db, inv.project_id, user_id):
                raise AlreadyMemberError(ALREADY_MEMBER_MESSAGE)

        invitation = lifecycle.check_offer(
            self.get_invitation(token),
            INVITATION_RULES,
            now=now,
            action="accept",
            business_rules=[not_a_member],
        )
        invitation_id = invitation.id
        project_id = invitation.project_id
        inviter_id, invitee_email = invitation.invited_by, invitation.email
        role = invitation.role
        group = invitation.group or GROUP_DEFAULTS.invitation_group

        won = invitation_repo.transition_invitation(
            self.db,
            invitation_id,
            from_status=STATUS_PENDING,
            to_status=STATUS_ACCEPTED,
            accepted_at=now,
            commit=False,
        )
        if not won:
            self.db.rollback()
            lifecycle.raise_for_lost_transition(
                invitation_repo.get_invitation(self.db, invitation_id), INVITATION_RULES, action="accept"
            )
        try:
            membership = membership_repo.create_membership(
                self.db,
                project_id=project_id,
                user_id=user_id,
                role=role,
                group=group,
                invited_by=inviter_id,
                joined_at=now,
                commit=False,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyMemberError(ALREADY_MEMBER_MESSAGE) from None
        self.db.refresh(membership)
        logger.info("User %s accepted invitation %s to project %s", user_id, invitation_id, project_id)
        NotificationService(self.db, clock=self.clock).notify_invitation_accepted(
            inviter_id, project_id, invitee_email, role, group, accepted_by=user_id
        )
        return membership

    def decline_invitation(self, token: str) -> models.Invitation:
        invitation = lifecycle.check_offer(
            self.get_invitation(token),
            INVITATION_RULES,
            now=self.clock(),
            action="decline",
            check_expiry=False,
        )
        return self._close(invitation, STATUS_DECLINED, "decline", declined_at=self.clock())

    def cancel_invitation(self, invitation_id: str) -> models.Invitation:
        invitation = lifecycle.check_offer(
            invitation_repo.get_invitation(self.db, invitation_id),
            INVITATION_RULES,
            now=self.clock(),
            action="cancel",
            check_expiry=False,
        )
        return self._close(invitation, STATUS_CANCELLED, "cancel")

    def _close(self, invitation: models.Invitation, to_status: str, action: str, **fields) -> models.Invitation:
        invitation_id = invitation.id
        won = invitation_repo.transition_invitation(
            self.db,
            invitation_id,
            from_status=STATUS_PENDING,
            to_status=to_status,
            **fields,
        )
        fresh = invitation_repo.get_invitation(self.db, invitation_id)
        if not won:
            lifecycle.raise_for_lost_transition(fresh, INVITATION_RULES, action=action)
        return fresh
