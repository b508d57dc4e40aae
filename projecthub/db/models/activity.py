from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from .base import Base, now_utc, new_id


class ActivityLog(Base):
    """Append-only audit entry. Rows are never updated or deleted."""
    __tablename__ = 'activity_logs'
    id = Column(String, primary_key=True, default=new_id)
    # No foreign key: entries outlive the project they describe
    project_id = Column(String, nullable=False)
    user_id = Column(String, nullable=False)
    action = Column(Text, nullable=False)
    resource_type = Column(Text, nullable=False)
    resource_id = Column(Text, nullable=True)
    group_context = Column(Text, nullable=True)
    # Use a non-reserved Python attribute name while keeping DB column name 'metadata'
    metadata_json = Column('metadata', JSONB, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('ix_activity_logs_project_id_timestamp', 'project_id', 'timestamp'),
        Index('ix_activity_logs_project_id_user_id_timestamp', 'project_id', 'user_id', 'timestamp'),
        Index('ix_activity_logs_project_id_action_timestamp', 'project_id', 'action', 'timestamp'),
    )

    def get_metadata(self):
        return self.metadata_json or {}
