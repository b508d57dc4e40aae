"""
Activity log endpoints (read only).

Any member can read the trail. ``group`` narrows the returned page only;
cursor and ``has_more`` describe the unfiltered page.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from projecthub.api.deps import get_project_or_404, get_project_permissions
from projecthub.db import schemas
from projecthub.db.database import get_db
from projecthub.services.activity_log_service import DEFAULT_PAGE_SIZE, ActivityLogService
from projecthub.utils.group_permissions import GroupEnum
from projecthub.utils.project_permissions import ProjectPermissions


router = APIRouter(prefix="/projects/{project_id}/activity", tags=["activity"])

MAX_PAGE_SIZE = 200


def _require_activity_access(db: Session, project_id: str, perms: ProjectPermissions) -> None:
    get_project_or_404(db, project_id)
    if not perms.can_view_activity:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to view the activity log")


@router.get("", response_model=schemas.ActivityPage)
def get_activity(
    project_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    group: Optional[GroupEnum] = Query(None),
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    _require_activity_access(db, project_id, perms)
    page = ActivityLogService(db).get_project_activity_log(project_id, limit=limit, cursor=cursor)
    if group is not None:
        page.activities = ActivityLogService.filter_by_group(page.activities, group.value)
    return page


@router.get("/filter", response_model=List[schemas.ActivityLogEntry])
def filter_activity(
    project_id: str,
    user_id: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    perms: ProjectPermissions = Depends(get_project_permissions),
):
    """Exactly one filter: ``user_id``, ``action``, or the ``start``/``end`` pair."""
    _require_activity_access(db, project_id, perms)
    chosen = [name for name, value in (("user_id", user_id), ("action", action)) if value]
    if start is not None or end is not None:
        if start is None or end is None:
            raise HTTPException(status_code=422, detail="start and end must be given together")
        chosen.append("date_range")
    if len(chosen) != 1:
        raise HTTPException(status_code=422, detail="Provide exactly one of user_id, action, or start/end")

    service = ActivityLogService(db)
    if user_id:
        return service.filter_by_user(project_id, user_id, limit=limit)
    if action:
        return service.filter_by_action(project_id, action, limit=limit)
    return service.filter_by_date_range(project_id, start, end, limit=limit)
