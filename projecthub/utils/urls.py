"""
URL utilities for building absolute links to the frontend.

Primary source: APP_BASE_URL (e.g., https://projects.example.com)
Fallback: APP_HOST (adds scheme heuristically if missing).
"""
from __future__ import annotations

import os
from urllib.parse import quote

DEFAULT_BASE_URL = "http://localhost:3000"


def _add_scheme_if_missing(host: str) -> str:
    h = host.strip()
    if not h:
        return DEFAULT_BASE_URL
    if h.startswith("http://") or h.startswith("https://"):
        return h
    # Plain http for local hosts only
    lower = h.lower()
    if lower.startswith("localhost") or lower.startswith("127.0.0.1"):
        return f"http://{h}"
    return f"https://{h}"


def get_app_base_url() -> str:
    """Return the normalized base URL of the frontend, without a trailing slash."""
    base = os.getenv("APP_BASE_URL")
    if base and base.strip():
        return base.strip().rstrip("/")
    host = os.getenv("APP_HOST")
    if host and host.strip():
        return _add_scheme_if_missing(host).rstrip("/")
    return DEFAULT_BASE_URL


def build_invite_link_url(token: str) -> str:
    return f"{get_app_base_url()}/invite/{quote(token, safe='')}"


def build_invitation_url(token: str) -> str:
    """Landing page for an emailed invitation; delivery itself happens elsewhere."""
    return f"{get_app_base_url()}/invitations/{quote(token, safe='')}"
