"""DEV_MODE gate for the fixed development identity."""

import logging
import os
from urllib.parse import urlparse

from projecthub.utils.urls import get_app_base_url

logger = logging.getLogger(__name__)

LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def dev_mode_active() -> bool:
    """
    True when DEV_MODE=true and the frontend base URL is on a local host.

    DEV_MODE impersonates a fixed user and skips the read-only guest guard,
    so a deployment whose APP_BASE_URL (or APP_HOST) is remote ignores it.
    """
    if os.getenv("DEV_MODE", "false").strip().lower() != "true":
        return False
    hostname = (urlparse(get_app_base_url()).hostname or "").lower()
    if hostname not in LOCAL_HOSTS:
        logger.warning("Ignoring DEV_MODE=true: app base URL host '%s' is not local", hostname)
        return False
    return True
