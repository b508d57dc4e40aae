from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Text
from .base import Base, now_utc, new_id


class Invitation(Base):
    __tablename__ = 'invitations'
    id = Column(String, primary_key=True, default=new_id)
    project_id = Column(String, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    email = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    group = Column('member_group', Text, nullable=False)
    invited_by = Column(String, nullable=False)
    token = Column(Text, nullable=False, unique=True)
    status = Column(Text, nullable=False, default='pending')  # pending|accepted|cancelled|declined
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    # Expiry is derived from this at read time; status is never set to 'expired'
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    declined_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_invitations_email', 'email'),
        Index('ix_invitations_project_id_status', 'project_id', 'status'),
    )


class InviteLink(Base):
    __tablename__ = 'invite_links'
    id = Column(String, primary_key=True, default=new_id)
    token = Column(Text, nullable=False, unique=True)
    project_id = Column(String, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    role = Column(Text, nullable=False)
    group = Column('member_group', Text, nullable=False)
    created_by = Column(String, nullable=False)
    status = Column(Text, nullable=False, default='active')  # active|used|revoked
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_by = Column(String, nullable=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_invite_links_project_id_created_at', 'project_id', 'created_at'),
        Index('ix_invite_links_project_id_created_by', 'project_id', 'created_by'),
    )
