"""initial billmate schema

Revision ID: 3b1f0c9a7d21
Revises:
Create Date: 2026-10-17 10:12:44.381920
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '3b1f0c9a7d21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'products',
        *_base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('selling_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('cost_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('frequently_used', sa.Boolean(), nullable=True),
        sa.Column('barcode', sa.String(length=100), nullable=True),
    )
    op.create_index('ix_products_id', 'products', ['id'])
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_frequently_used', 'products', ['frequently_used'])
    op.create_index('ix_products_barcode', 'products', ['barcode'])

    op.create_table(
        'customers',
        *_base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('balance', sa.Numeric(12, 2), nullable=False),
    )
    op.create_index('ix_customers_id', 'customers', ['id'])
    op.create_index('ix_customers_name', 'customers', ['name'])
    op.create_index('ix_customers_phone', 'customers', ['phone'])

    op.create_table(
        'sales',
        *_base_columns(),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('profit', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('refunded', sa.Boolean(), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('item_count', sa.Integer(), nullable=True),
    )
    op.create_index('ix_sales_id', 'sales', ['id'])
    op.create_index('ix_sales_date', 'sales', ['date'])
    op.create_index('ix_sales_payment_method', 'sales', ['payment_method'])
    op.create_index('ix_sales_refunded', 'sales', ['refunded'])
    op.create_index('ix_sales_customer_id', 'sales', ['customer_id'])

    op.create_table(
        'sale_items',
        *_base_columns(),
        sa.Column('sale_id', sa.Integer(), sa.ForeignKey('sales.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('selling_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('cost_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
    )
    op.create_index('ix_sale_items_id', 'sale_items', ['id'])
    op.create_index('ix_sale_items_sale_id', 'sale_items', ['sale_id'])
    op.create_index('ix_sale_items_product_id', 'sale_items', ['product_id'])

    op.create_table(
        'expenses',
        *_base_columns(),
        sa.Column('type', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
    )
    op.create_index('ix_expenses_id', 'expenses', ['id'])
    op.create_index('ix_expenses_type', 'expenses', ['type'])
    op.create_index('ix_expenses_date', 'expenses', ['date'])

    op.create_table(
        'settings',
        *_base_columns(),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
    )
    op.create_index('ix_settings_id', 'settings', ['id'])
    op.create_index('ix_settings_key', 'settings', ['key'], unique=True)

    op.create_table(
        'dismissed_alerts',
        *_base_columns(),
        sa.Column('alert_id', sa.String(length=100), nullable=False),
        sa.Column('dismissed_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_dismissed_alerts_id', 'dismissed_alerts', ['id'])
    op.create_index('ix_dismissed_alerts_alert_id', 'dismissed_alerts', ['alert_id'], unique=True)
    print("✓ [3b1f0c9a7d21] Created BillMate tables")


def downgrade() -> None:
    op.drop_table('dismissed_alerts')
    op.drop_table('settings')
    op.drop_table('expenses')
    op.drop_table('sale_items')
    op.drop_table('sales')
    op.drop_table('customers')
    op.drop_table('products')
