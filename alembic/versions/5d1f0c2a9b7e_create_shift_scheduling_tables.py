"""create_shift_scheduling_tables

Revision ID: 5d1f0c2a9b7e
Revises:
Create Date: 2026-10-18 09:00:00.000000

Create users, shift_templates, shift_assignments and hour_requests.
Partial unique indexes keep at most one active assignment and one pending
request per (worker, template, date).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '5d1f0c2a9b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users: local mirror of the identity provider's users with capability tags
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('external_id', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('is_staff', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('worker_tag', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('manager_tag', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('emulating_is_staff', sa.Boolean(), nullable=True),
        sa.Column('emulating_worker_tag', sa.Boolean(), nullable=True),
        sa.Column('emulating_manager_tag', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'shift_templates',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(20), server_default='operational', nullable=False),
        sa.Column('open_time', sa.Time(), nullable=False),
        sa.Column('close_time', sa.Time(), nullable=False),
        sa.Column('hourly_requirements', sa.JSON(), nullable=False),
        sa.Column('recurring_days', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shift_templates_is_active', 'shift_templates', ['is_active'])

    op.create_table(
        'shift_assignments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_template_id', UUID(as_uuid=True), sa.ForeignKey('shift_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('assigned_hours', sa.JSON(), nullable=False),
        sa.Column('break_periods', sa.JSON(), nullable=True),
        sa.Column('assigned_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('worker_approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('manager_approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assignment_notes', sa.Text(), nullable=True),
        sa.Column('superseded_by_id', UUID(as_uuid=True), sa.ForeignKey('shift_assignments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    # At most one non-rejected assignment per worker, template and date
    op.create_index(
        'uq_shift_assignments_active',
        'shift_assignments',
        ['worker_id', 'shift_template_id', 'date'],
        unique=True,
        postgresql_where=sa.text("status <> 'rejected'"),
    )
    op.create_index('ix_shift_assignments_date', 'shift_assignments', ['date'])
    op.create_index('ix_shift_assignments_worker_date', 'shift_assignments', ['worker_id', 'date'])
    op.create_index('ix_shift_assignments_template_date', 'shift_assignments', ['shift_template_id', 'date'])

    op.create_table(
        'hour_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_template_id', UUID(as_uuid=True), sa.ForeignKey('shift_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('request_type', sa.String(30), nullable=False),
        sa.Column('requested_hours', sa.JSON(), nullable=True),
        sa.Column('switch_details', sa.JSON(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(10), server_default='normal', nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('reviewed_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_assignment_id', UUID(as_uuid=True), sa.ForeignKey('shift_assignments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    # At most one pending request per worker, template and date
    op.create_index(
        'uq_hour_requests_pending',
        'hour_requests',
        ['worker_id', 'shift_template_id', 'date'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )
    op.create_index('ix_hour_requests_status', 'hour_requests', ['status'])
    op.create_index('ix_hour_requests_worker', 'hour_requests', ['worker_id'])


def downgrade() -> None:
    op.drop_index('ix_hour_requests_worker', table_name='hour_requests')
    op.drop_index('ix_hour_requests_status', table_name='hour_requests')
    op.drop_index('uq_hour_requests_pending', table_name='hour_requests')
    op.drop_table('hour_requests')

    op.drop_index('ix_shift_assignments_template_date', table_name='shift_assignments')
    op.drop_index('ix_shift_assignments_worker_date', table_name='shift_assignments')
    op.drop_index('ix_shift_assignments_date', table_name='shift_assignments')
    op.drop_index('uq_shift_assignments_active', table_name='shift_assignments')
    op.drop_table('shift_assignments')

    op.drop_index('ix_shift_templates_is_active', table_name='shift_templates')
    op.drop_table('shift_templates')

    op.drop_table('users')
