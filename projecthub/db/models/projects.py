from sqlalchemy import Column, String, DateTime, ForeignKey, Index, CheckConstraint, Text
from .base import Base, now_utc, new_id


class Project(Base):
    __tablename__ = 'projects'
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    owner_user_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class ProjectMembership(Base):
    __tablename__ = 'project_memberships'
    # At most one membership per user per project
    project_id = Column(String, ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(String, primary_key=True)
    role = Column(String, nullable=False)  # 'owner'|'admin'|'editor'|'viewer'
    # Nullable for legacy rows; read through normalize_member_group
    group = Column('member_group', String, nullable=True)  # 'consulting'|'client'
    invited_by = Column(String, nullable=True)
    joined_at = Column(DateTime(timezone=True), default=now_utc)
    last_active_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_project_memberships_user_id', 'user_id'),
        CheckConstraint("role in ('owner','admin','editor','viewer')", name='ck_project_memberships_role'),
    )


class Document(Base):
    __tablename__ = 'documents'
    id = Column(String, primary_key=True, default=new_id)
    project_id = Column(String, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=True)
    uploaded_by = Column(String, nullable=False)
    visibility = Column(Text, nullable=False)  # consulting_only|client_only|both
    uploaded_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('ix_documents_project_id', 'project_id'),
        CheckConstraint(
            "visibility in ('consulting_only','client_only','both')",
            name='ck_documents_visibility',
        ),
    )
