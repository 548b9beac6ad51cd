"""create projects and project_collaborators tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'projects',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(), nullable=False, server_default='short-film'),
        sa.Column('status', sa.String(), nullable=False, server_default='planning'),
        sa.Column('owner_id', postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('archived_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_projects_id', 'projects', ['id'], unique=False)
    op.create_index('ix_projects_owner_id', 'projects', ['owner_id'], unique=False)

    op.create_table(
        'project_collaborators',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', postgresql.UUID(as_uuid=False), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='crew'),
        sa.Column('permissions', postgresql.JSONB(), nullable=False, server_default=sa.text("'[\"read\"]'::jsonb")),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_collaborators_project_user'),
    )
    op.create_index('ix_project_collaborators_id', 'project_collaborators', ['id'], unique=False)
    op.create_index('ix_project_collaborators_project_id', 'project_collaborators', ['project_id'], unique=False)
    op.create_index('ix_project_collaborators_user_id', 'project_collaborators', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_project_collaborators_user_id', table_name='project_collaborators')
    op.drop_index('ix_project_collaborators_project_id', table_name='project_collaborators')
    op.drop_index('ix_project_collaborators_id', table_name='project_collaborators')
    op.drop_table('project_collaborators')
    op.drop_index('ix_projects_owner_id', table_name='projects')
    op.drop_index('ix_projects_id', table_name='projects')
    op.drop_table('projects')
