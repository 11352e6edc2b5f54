"""create_initial_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create tenant, user, project, task and audit_log tables."""
    op.create_table(
        'tenant',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('subdomain', sa.String(), nullable=False),
        sa.Column('status', sa.Enum('active', 'suspended', 'trial', name='tenant_status'), nullable=False),
        sa.Column('subscription_plan', sa.Enum('free', 'pro', 'enterprise', name='subscription_plan'), nullable=False),
        sa.Column('max_users', sa.Integer(), nullable=False),
        sa.Column('max_projects', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_tenant_subdomain', 'tenant', ['subdomain'], unique=True)

    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenant.id', ondelete='CASCADE'), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('super_admin', 'tenant_admin', 'user', name='user_role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_user_tenant_email'),
        sa.CheckConstraint(
            "(role = 'super_admin' AND tenant_id IS NULL) OR "
            "(role <> 'super_admin' AND tenant_id IS NOT NULL)",
            name='ck_user_role_tenant',
        ),
    )
    op.create_index('ix_user_tenant_id', 'user', ['tenant_id'])
    op.create_index('ix_user_email', 'user', ['email'])
    op.create_index(
        'uq_user_platform_email', 'user', ['email'], unique=True,
        postgresql_where=sa.text('tenant_id IS NULL'),
        sqlite_where=sa.text('tenant_id IS NULL'),
    )

    op.create_table(
        'project',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenant.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('active', 'archived', 'completed', name='project_status'), nullable=False),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('user.id'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_project_tenant_id', 'project', ['tenant_id'])

    op.create_table(
        'task',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('project_id', sa.Uuid(), sa.ForeignKey('project.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), sa.ForeignKey('tenant.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('todo', 'in_progress', 'completed', name='task_status'), nullable=False),
        sa.Column('priority', sa.Enum('low', 'medium', 'high', name='task_priority'), nullable=False),
        sa.Column('assigned_to', sa.Uuid(), sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_task_project_id', 'task', ['project_id'])
    op.create_index('ix_task_tenant_id', 'task', ['tenant_id'])
    op.create_index('ix_task_assigned_to', 'task', ['assigned_to'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tenant_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=True),
        sa.Column('entity_id', sa.String(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_audit_log_tenant_id', 'audit_log', ['tenant_id'])


def downgrade() -> None:
    """Drop all tables and their enum types."""
    op.drop_table('audit_log')
    op.drop_table('task')
    op.drop_table('project')
    op.drop_table('user')
    op.drop_table('tenant')
    for enum_name in ('task_priority', 'task_status', 'project_status', 'user_role', 'subscription_plan', 'tenant_status'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
