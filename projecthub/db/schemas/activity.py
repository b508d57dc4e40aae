from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict


class ActivityLogEntry(BaseModel):
    id: str
    project_id: str
    user_id: str
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    group_context: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime
    model_config = ConfigDict(from_attributes=True)


class ActivityPage(BaseModel):
    activities: List[ActivityLogEntry]
    cursor: Optional[str] = None
    has_more: bool


def entry_to_schema(entry) -> ActivityLogEntry:
    """Build the response model from an ORM row (whose ``metadata`` attribute is the table MetaData)."""
    return ActivityLogEntry(
        id=entry.id,
        project_id=entry.project_id,
        user_id=entry.user_id,
        action=entry.action,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        group_context=entry.group_context,
        metadata=entry.get_metadata(),
        timestamp=entry.timestamp,
    )
