"""create budgets, budget_categories, budget_expenses and budget_versions tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, nullable: bool = False, default: str = '0') -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=14, scale=2), nullable=nullable, server_default=default)


def upgrade() -> None:
    op.create_table(
        'budgets',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', postgresql.UUID(as_uuid=False), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        _money('total_budget'),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        _money('total_budgeted'),
        _money('total_spent'),
        _money('total_remaining'),
        sa.Column('percentage_used', sa.Float(), nullable=False, server_default='0'),
        sa.Column('over_budget', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        _money('over_budget_amount'),
        _money('unallocated_spent'),
        sa.Column('auto_calculate', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('require_approval', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        _money('approval_limit', default='1000'),
        sa.Column('warning_threshold', sa.Float(), nullable=False, server_default='80'),
        sa.Column('created_by', postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column('last_modified_by', postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_budgets_id', 'budgets', ['id'], unique=False)
    op.create_index('ix_budgets_project_id', 'budgets', ['project_id'], unique=False)
    op.create_index('ix_budgets_status', 'budgets', ['status'], unique=False)

    op.create_table(
        'budget_categories',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('budget_id', postgresql.UUID(as_uuid=False), sa.ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('name', sa.String(), nullable=False),
        _money('budgeted'),
        _money('spent'),
        _money('remaining'),
        sa.Column('percentage', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index('ix_budget_categories_id', 'budget_categories', ['id'], unique=False)
    op.create_index('ix_budget_categories_budget_id', 'budget_categories', ['budget_id'], unique=False)

    op.create_table(
        'budget_expenses',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('budget_id', postgresql.UUID(as_uuid=False), sa.ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('date', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('vendor', postgresql.JSONB(), nullable=True),
        sa.Column('payment_method', sa.String(), nullable=False, server_default='cash'),
        sa.Column('status', sa.String(), nullable=False, server_default='planned'),
        sa.Column('receipt_url', sa.String(), nullable=True),
        sa.Column('invoice_number', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column('approved_by', postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_budget_expenses_id', 'budget_expenses', ['id'], unique=False)
    op.create_index('ix_budget_expenses_budget_id', 'budget_expenses', ['budget_id'], unique=False)
    op.create_index('ix_budget_expenses_date', 'budget_expenses', ['date'], unique=False)
    op.create_index('ix_budget_expenses_category', 'budget_expenses', ['category'], unique=False)
    op.create_index('ix_budget_expenses_status', 'budget_expenses', ['status'], unique=False)

    op.create_table(
        'budget_versions',
        sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('budget_id', postgresql.UUID(as_uuid=False), sa.ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('data', postgresql.JSONB(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('created_by', postgresql.UUID(as_uuid=False), nullable=True),
    )
    op.create_index('ix_budget_versions_id', 'budget_versions', ['id'], unique=False)
    op.create_index('ix_budget_versions_budget_id', 'budget_versions', ['budget_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_budget_versions_budget_id', table_name='budget_versions')
    op.drop_index('ix_budget_versions_id', table_name='budget_versions')
    op.drop_table('budget_versions')
    op.drop_index('ix_budget_expenses_status', table_name='budget_expenses')
    op.drop_index('ix_budget_expenses_category', table_name='budget_expenses')
    op.drop_index('ix_budget_expenses_date', table_name='budget_expenses')
    op.drop_index('ix_budget_expenses_budget_id', table_name='budget_expenses')
    op.drop_index('ix_budget_expenses_id', table_name='budget_expenses')
    op.drop_table('budget_expenses')
    op.drop_index('ix_budget_categories_budget_id', table_name='budget_categories')
    op.drop_index('ix_budget_categories_id', table_name='budget_categories')
    op.drop_table('budget_categories')
    op.drop_index('ix_budgets_status', table_name='budgets')
    op.drop_index('ix_budgets_project_id', table_name='budgets')
    op.drop_index('ix_budgets_id', table_name='budgets')
    op.drop_table('budgets')
