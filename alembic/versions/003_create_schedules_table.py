"""create schedules table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '003'
down_revision: Union[str, None] = '002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'schedules',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', postgresql.UUID(as_uuid=False), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(), nullable=False, server_default='shooting'),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('location', postgresql.JSONB(), nullable=True),
        sa.Column('scenes', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('crew', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('cast', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('equipment', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('weather', postgresql.JSONB(), nullable=True),
        sa.Column('estimated_budget', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.Column('actual_budget', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('priority', sa.String(), nullable=False, server_default='medium'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('contingency_plan', sa.Text(), nullable=True),
        sa.Column('emergency_contacts', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('created_by', postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column('last_modified_by', postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_schedules_id', 'schedules', ['id'], unique=False)
    op.create_index('ix_schedules_project_id', 'schedules', ['project_id'], unique=False)
    op.create_index('ix_schedules_project_date', 'schedules', ['project_id', 'date'], unique=False)
    op.create_index('ix_schedules_project_status', 'schedules', ['project_id', 'status'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_schedules_project_status', table_name='schedules')
    op.drop_index('ix_schedules_project_date', table_name='schedules')
    op.drop_index('ix_schedules_project_id', table_name='schedules')
    op.drop_index('ix_schedules_id', table_name='schedules')
    op.drop_table('schedules')
