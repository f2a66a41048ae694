"""Initial schema - create all tables

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('avatar', sa.Text(), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='USER'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='ACTIVE'),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('uq_users_email_lower', 'users', [sa.text('lower(email)')], unique=True)

    # Create stock_items table
    op.create_table(
        'stock_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('sloc', sa.String(length=50), nullable=False),
        sa.Column('material_desc', sa.String(length=500), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=14, scale=3), nullable=False, server_default='0'),
        sa.Column('uom', sa.String(length=20), nullable=False, server_default='PCS'),
        sa.Column('minimum_stock', sa.Numeric(precision=14, scale=3), nullable=False, server_default='0'),
        sa.Column('maximum_stock', sa.Numeric(precision=14, scale=3), nullable=True),
        sa.Column('price', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.Column('price_per_unit', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('operational_class', sa.String(length=100), nullable=False, server_default='General'),
        sa.Column('rack_no', sa.String(length=50), nullable=True),
        sa.Column('is_consumable', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('pr_status', sa.String(length=50), nullable=True),
        sa.Column('pr_number', sa.String(length=100), nullable=True),
        sa.Column('wbs', sa.String(length=100), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_stock_items'),
        sa.UniqueConstraint('material_no', 'sloc', name='uq_stock_items_material_no_sloc')
    )
    op.create_index('idx_stock_items_category', 'stock_items', ['operational_class'])
    op.create_index('idx_stock_items_updated_at', 'stock_items', ['updated_at'])

    # Create stock_history table
    op.create_table(
        'stock_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('sloc', sa.String(length=50), nullable=False),
        sa.Column('user_name', sa.String(length=255), nullable=False, server_default='System'),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_stock_history')
    )
    op.create_index('idx_stock_history_item', 'stock_history', ['material_no', 'sloc'])
    op.create_index('idx_stock_history_created_at', 'stock_history', ['created_at'])

    # Create material_in table
    op.create_table(
        'material_in',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('gr_number', sa.String(length=100), nullable=False),
        sa.Column('material_desc', sa.String(length=500), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column('sloc', sa.String(length=50), nullable=False),
        sa.Column('uom', sa.String(length=20), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('wbs', sa.String(length=100), nullable=True),
        sa.Column('good_receipt', sa.String(length=255), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('po', sa.String(length=100), nullable=True),
        sa.Column('reference', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_material_in')
    )
    op.create_index('idx_material_in_item', 'material_in', ['material_no', 'sloc'])
    op.create_index('idx_material_in_gr_number', 'material_in', ['gr_number'])
    op.create_index('idx_material_in_date', 'material_in', ['date'])

    # Create material_out table
    op.create_table(
        'material_out',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('material_desc', sa.String(length=500), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column('uom', sa.String(length=20), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('sloc', sa.String(length=50), nullable=False),
        sa.Column('good_receipt', sa.String(length=255), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('issue_number', sa.String(length=100), nullable=False),
        sa.Column('wbs', sa.String(length=100), nullable=True),
        sa.Column('gl_number', sa.String(length=100), nullable=True),
        sa.Column('gl_account', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_material_out')
    )
    op.create_index('idx_material_out_item', 'material_out', ['material_no', 'sloc'])
    op.create_index('idx_material_out_issue_number', 'material_out', ['issue_number'])
    op.create_index('idx_material_out_created_at', 'material_out', ['created_at'])

    # Create material_transactions table (ledger)
    op.create_table(
        'material_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=3), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reference_id', sa.String(length=100), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_material_transactions')
    )
    op.create_index('idx_material_transactions_material', 'material_transactions', ['material_no'])
    op.create_index('idx_material_transactions_type', 'material_transactions', ['type'])
    op.create_index('idx_material_transactions_created_at', 'material_transactions', ['created_at'])

    # Create purchase_orders table
    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('item_id', sa.String(length=160), nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('sloc', sa.String(length=50), nullable=False),
        sa.Column('item_name', sa.String(length=500), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=14, scale=3), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='ORDERED'),
        sa.Column('supplier', sa.String(length=255), nullable=True),
        sa.Column('total_cost', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_purchase_orders')
    )
    op.create_index('idx_purchase_orders_status', 'purchase_orders', ['status'])
    op.create_index('idx_purchase_orders_item', 'purchase_orders', ['material_no', 'sloc'])

    # Create stock_opname_sessions table
    op.create_table(
        'stock_opname_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='OPEN'),
        sa.Column('creator', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_stock_opname_sessions')
    )
    op.create_index('idx_stock_opname_sessions_status', 'stock_opname_sessions', ['status'])

    # Create stock_opname_items table
    op.create_table(
        'stock_opname_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('material_no', sa.String(length=100), nullable=False),
        sa.Column('sloc', sa.String(length=50), nullable=False),
        sa.Column('material_desc', sa.String(length=500), nullable=False),
        sa.Column('system_qty', sa.Numeric(precision=14, scale=3), nullable=False, server_default='0'),
        sa.Column('physical_qty', sa.Numeric(precision=14, scale=3), nullable=False, server_default='0'),
        sa.Column('variance', sa.Numeric(precision=14, scale=3), nullable=False, server_default='0'),
        sa.Column('is_counted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['session_id'], ['stock_opname_sessions.id'],
            name='fk_stock_opname_items_session_id_stock_opname_sessions', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_stock_opname_items')
    )
    op.create_index('ix_stock_opname_items_session_id', 'stock_opname_items', ['session_id'])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table('stock_opname_items')
    op.drop_table('stock_opname_sessions')
    op.drop_table('purchase_orders')
    op.drop_table('material_transactions')
    op.drop_table('material_out')
    op.drop_table('material_in')
    op.drop_table('stock_history')
    op.drop_table('stock_items')
    op.drop_table('users')
