"""
Initial schema: users, projects, memberships, documents, invitations,
invite links and the activity log.

Memberships are keyed by (project_id, user_id). ``member_group`` is nullable
so rows written before groups existed survive; they read as consulting and
can be backfilled with scripts/migrate_member_groups.py.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial_20250101'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('owner_user_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'project_memberships',
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(), primary_key=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('member_group', sa.String(), nullable=True),
        sa.Column('invited_by', sa.String(), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_active_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role in ('owner','admin','editor','viewer')", name='ck_project_memberships_role'),
    )
    op.create_index('idx_project_memberships_user_id', 'project_memberships', ['user_id'])

    op.create_table(
        'documents',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=True),
        sa.Column('uploaded_by', sa.String(), nullable=False),
        sa.Column('visibility', sa.Text(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "visibility in ('consulting_only','client_only','both')",
            name='ck_documents_visibility',
        ),
    )
    op.create_index('ix_documents_project_id', 'documents', ['project_id'])

    op.create_table(
        'invitations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.Column('member_group', sa.Text(), nullable=False),
        sa.Column('invited_by', sa.String(), nullable=False),
        sa.Column('token', sa.Text(), nullable=False, unique=True),
        sa.Column('status', sa.Text(), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('declined_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_invitations_email', 'invitations', ['email'])
    op.create_index('ix_invitations_project_id_status', 'invitations', ['project_id', 'status'])

    op.create_table(
        'invite_links',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('token', sa.Text(), nullable=False, unique=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.Column('member_group', sa.Text(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('accepted_by', sa.String(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_invite_links_project_id_created_at', 'invite_links', ['project_id', 'created_at'])
    op.create_index('ix_invite_links_project_id_created_by', 'invite_links', ['project_id', 'created_by'])

    # No foreign key to projects: entries outlive the project
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('resource_type', sa.Text(), nullable=False),
        sa.Column('resource_id', sa.Text(), nullable=True),
        sa.Column('group_context', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_activity_logs_project_id_timestamp', 'activity_logs', ['project_id', 'timestamp'])
    op.create_index('ix_activity_logs_project_id_user_id_timestamp', 'activity_logs', ['project_id', 'user_id', 'timestamp'])
    op.create_index('ix_activity_logs_project_id_action_timestamp', 'activity_logs', ['project_id', 'action', 'timestamp'])


def downgrade() -> None:
    op.drop_table('activity_logs')
    op.drop_table('invite_links')
    op.drop_table('invitations')
    op.drop_table('documents')
    op.drop_table('project_memberships')
    op.drop_table('projects')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
