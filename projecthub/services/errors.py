"""
Service-level exceptions.

Each exception carries the user-facing message verbatim; the API layer maps
the exception type to a status code and renders ``str(exc)`` as the detail.
"""


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""


class NotFoundError(ServiceError):
    pass


class InvalidStateError(ServiceError):
    """Action attempted from a terminal or otherwise wrong state."""


class ExpiredError(ServiceError):
    pass


class AlreadyMemberError(ServiceError):
    pass


class DuplicateInvitationError(ServiceError):
    pass


class PermissionDenied(ServiceError):
    pass


class InvalidValueError(ServiceError):
    """Unknown role, group or visibility value."""
