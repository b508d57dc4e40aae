"""
Activity log service: append entries and read a project's trail.

Pages are newest first. The page cursor is opaque to callers; it encodes the
(timestamp, id) of the last entry returned so the next page starts strictly
after it. ``has_more`` is a heuristic: a full page may be the last one.
"""
from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from projecthub import audit
from projecthub.db import models, schemas
from projecthub.db.repositories import activity_logs as activity_repo
from projecthub.services.errors import InvalidValueError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
_CURSOR_SEPARATOR = "|"


def encode_cursor(entry) -> str:
    ts = models.ensure_aware(entry.timestamp)
    raw = f"{ts.isoformat()}{_CURSOR_SEPARATOR}{entry.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        ts_part, entry_id = raw.split(_CURSOR_SEPARATOR, 1)
        ts = models.ensure_aware(datetime.fromisoformat(ts_part))
    except (ValueError, UnicodeError, binascii.Error):
        raise InvalidValueError("Invalid cursor") from None
    if not entry_id:
        raise InvalidValueError("Invalid cursor")
    return ts, entry_id


def _check_limit(limit: int) -> int:
    if limit is None or limit < 1:
        raise InvalidValueError("limit must be a positive integer")
    return limit


class ActivityLogService:
    """Reads and writes a project's activity trail."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = models.now_utc):
        self.db = db
        self.clock = clock

    def log_activity(
        self,
        project_id: str,
        user_id: str,
        action,
        resource_type,
        resource_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        group_context: Optional[str] = None,
    ) -> models.ActivityLog:
        """Append one entry; raises when the write fails."""
        return audit.log(
            self.db,
            project_id=project_id,
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            metadata=metadata,
            group_context=group_context,
            timestamp=self.clock(),
        )

    def emit_activity(
        self,
        project_id: str,
        user_id: str,
        action,
        resource_type,
        resource_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        group_context: Optional[str] = None,
    ) -> None:
        """Best-effort form of ``log_activity`` for side-effect logging. Never raises."""
        audit.emit(
            self.db,
            project_id=project_id,
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            metadata=metadata,
            group_context=group_context,
            timestamp=self.clock(),
        )

    def get_project_activity_log(
        self,
        project_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        cursor: Optional[str] = None,
    ) -> schemas.ActivityPage:
        limit = _check_limit(limit)
        after = decode_cursor(cursor) if cursor else None
        rows = activity_repo.get_project_activity(self.db, project_id, limit=limit, after=after)
        return schemas.ActivityPage(
            activities=[schemas.entry_to_schema(r) for r in rows],
            cursor=encode_cursor(rows[-1]) if rows else None,
            has_more=len(rows) == limit,
        )

    def filter_by_user(self, project_id: str, user_id: str, limit: int = DEFAULT_PAGE_SIZE) -> List[schemas.ActivityLogEntry]:
        rows = activity_repo.get_activity_by_user(self.db, project_id, user_id, limit=_check_limit(limit))
        return [schemas.entry_to_schema(r) for r in rows]

    def filter_by_action(self, project_id: str, action, limit: int = DEFAULT_PAGE_SIZE) -> List[schemas.ActivityLogEntry]:
        action_value = getattr(action, "value", action)
        rows = activity_repo.get_activity_by_action(self.db, project_id, action_value, limit=_check_limit(limit))
        return [schemas.entry_to_schema(r) for r in rows]

    def filter_by_date_range(
        self,
        project_id: str,
        start: datetime,
        end: datetime,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> List[schemas.ActivityLogEntry]:
        start = models.ensure_aware(start)
        end = models.ensure_aware(end)
        if start > end:
            raise InvalidValueError("start must not be after end")
        rows = activity_repo.get_activity_in_range(self.db, project_id, start, end, limit=_check_limit(limit))
        return [schemas.entry_to_schema(r) for r in rows]

    @staticmethod
    def filter_by_group(entries: Iterable, group: str) -> list:
        """
        Keep entries whose ``group_context`` equals ``group``.

        Runs over entries already fetched, so applied to one page it can
        return fewer matches than exist in the whole log.
        """
        return [e for e in entries if e.group_context == group]
