"""
Shared validation chain for join offers (email invitations and invite links).

Both offer kinds are stored with an open status (``pending`` / ``active``)
and an ``expires_at``. Expiry is derived when the record is read and is never
written back, so every mutation re-runs the chain against a fresh read.

Guards always run in this order, since each failure has its own message:

1. not found
2. status is not the open status (terminal state)
3. expired
4. business rules supplied by the caller (e.g. already a member)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional, TypeVar

from projecthub.db.models import ensure_aware
from projecthub.services.errors import NotFoundError, InvalidStateError, ExpiredError

EXPIRED_STATUS = "expired"

T = TypeVar("T")


@dataclass(frozen=True)
class OfferRules:
    """Statuses and user-facing messages for one kind of offer."""
    not_found_message: str
    open_status: str
    expired_message: str
    # "{status}" and "{action}" are substituted
    status_message: str
    # Per-status overrides of status_message
    status_messages: Mapping[str, str] = field(default_factory=dict)

    def message_for_status(self, status: str, action: str) -> str:
        template = self.status_messages.get(status, self.status_message)
        return template.format(status=status, action=action)


def is_expired(record, now: datetime) -> bool:
    """True once ``now`` is past the record's ``expires_at``, whatever its stored status."""
    expires_at = ensure_aware(getattr(record, "expires_at", None))
    return expires_at is not None and ensure_aware(now) > expires_at


def effective_status(record, rules: OfferRules, now: datetime) -> str:
    """Stored status, or ``expired`` for an open offer past its expiry. Display only."""
    if record.status == rules.open_status and is_expired(record, now):
        return EXPIRED_STATUS
    return record.status


def check_offer(
    record: Optional[T],
    rules: OfferRules,
    *,
    now: datetime,
    action: str,
    check_expiry: bool = True,
    business_rules: Iterable[Callable[[T], None]] = (),
) -> T:
    """Run the guard chain and return the record, or raise the first failure."""
    if record is None:
        raise NotFoundError(rules.not_found_message)
    if record.status != rules.open_status:
        raise InvalidStateError(rules.message_for_status(record.status, action))
    if check_expiry and is_expired(record, now):
        raise ExpiredError(rules.expired_message)
    for rule in business_rules:
        rule(record)
    return record


def raise_for_lost_transition(record, rules: OfferRules, *, action: str) -> None:
    """Report why a conditional status write matched no row (another writer won)."""
    if record is None:
        raise NotFoundError(rules.not_found_message)
    raise InvalidStateError(rules.message_for_status(record.status, action))
