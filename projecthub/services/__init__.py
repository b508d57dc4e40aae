"""Business logic services package with public service helpers."""

from .errors import (
    ServiceError,
    NotFoundError,
    InvalidStateError,
    ExpiredError,
    AlreadyMemberError,
    DuplicateInvitationError,
    PermissionDenied,
    InvalidValueError,
)

__all__ = [
    "ServiceError",
    "NotFoundError",
    "InvalidStateError",
    "ExpiredError",
    "AlreadyMemberError",
    "DuplicateInvitationError",
    "PermissionDenied",
    "InvalidValueError",
]
