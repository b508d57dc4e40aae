"""Expiry settings for invitations and invite links."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 7


@dataclass(frozen=True)
class InviteSettings:
    invitation_ttl: timedelta
    invite_link_ttl: timedelta


def _days_from_env(var_name: str, default: int) -> int:
    raw = os.getenv(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s days", var_name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r; using %s days", var_name, raw, default)
        return default
    return value


@lru_cache(maxsize=None)
def get_invite_settings() -> InviteSettings:
    """Return the cached expiry settings sourced from the environment."""
    return InviteSettings(
        invitation_ttl=timedelta(days=_days_from_env("INVITE_TTL_DAYS", DEFAULT_TTL_DAYS)),
        invite_link_ttl=timedelta(days=_days_from_env("INVITE_LINK_TTL_DAYS", DEFAULT_TTL_DAYS)),
    )


def reset_invite_settings_cache() -> None:
    """Clear the cached settings (used by tests after changing the environment)."""
    get_invite_settings.cache_clear()
