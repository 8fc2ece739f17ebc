"""create users, transactions, and budgets tables

Revision ID: 3c1f9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


transaction_type = sa.Enum('INCOME', 'EXPENSE', name='transactiontype')
payment_method = sa.Enum('CASH', 'CARD', 'BANK_TRANSFER', 'DIGITAL_WALLET', 'OTHER', name='paymentmethod')
recurring_frequency = sa.Enum('DAILY', 'WEEKLY', 'MONTHLY', 'YEARLY', name='recurringfrequency')
budget_period = sa.Enum('WEEKLY', 'MONTHLY', 'YEARLY', name='budgetperiod')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('monthly_budget', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('email', name='uq_user_email'),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('subcategory', sa.String(100), nullable=False),
        sa.Column('description', sa.String(200), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('tags', sa.JSON, nullable=False),
        sa.Column('comments', sa.Text, nullable=True),
        sa.Column('is_recurring', sa.Boolean, nullable=False),
        sa.Column('recurring_frequency', recurring_frequency, nullable=True),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('exchange_rate', sa.DECIMAL(15, 6), nullable=False),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index(
        'idx_transactions_user_type_category_date',
        'transactions',
        ['user_id', 'transaction_type', 'category', 'transaction_date'],
    )
    op.create_index('idx_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('period', budget_period, nullable=False),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('spent', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('spent_computed_at', sa.DateTime, nullable=True),
        sa.Column('alert_threshold', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('notifications', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('idx_budgets_user_active', 'budgets', ['user_id', 'is_active'])


def downgrade() -> None:
    op.drop_index('idx_budgets_user_active', table_name='budgets')
    op.drop_table('budgets')
    op.drop_index('idx_transactions_user_date', table_name='transactions')
    op.drop_index('idx_transactions_user_type_category_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
