"""create_store_tables

Revision ID: 5c1e0a7d2b90
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d2b90'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


product_type_enum = sa.Enum('ticket', 'item', name='product_type_enum')
stock_type_enum = sa.Enum('boolean', 'quantity', name='product_stock_type_enum')
order_status_enum = sa.Enum('created', 'paid', 'cancelled', name='order_status_enum')


def upgrade() -> None:
    """Upgrade schema - Create products, orders and order_items."""

    # Create products table
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('subtitle', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('type', product_type_enum, nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('visible', sa.Boolean(), server_default='1', nullable=False),
        sa.Column('payment_link', sa.String(length=500), nullable=True),
        sa.Column('stock_type', stock_type_enum, nullable=False),
        sa.Column('stock_value', sa.Integer(), server_default='1', nullable=False),
        sa.Column('stock_initial', sa.Integer(), nullable=True),
        sa.Column('max_per_order', sa.Integer(), nullable=True),
        sa.Column('is_yoga_add_on', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('stock', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('stock_value >= 0', name='product_stock_non_negative'),
        sa.CheckConstraint('price >= 0', name='product_price_non_negative'),
        sa.CheckConstraint(
            'max_per_order IS NULL OR max_per_order > 0',
            name='product_max_per_order_positive',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_category', 'products', ['category'])

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('buyer_name', sa.String(length=255), nullable=True),
        sa.Column('buyer_contact', sa.String(length=255), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('status', order_status_enum, server_default='created', nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('redemption_code', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount >= 0', name='order_amount_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_index('ix_orders_redemption_code', 'orders', ['redemption_code'], unique=True)

    # Create order_items table
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('title_snapshot', sa.String(length=255), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('redeemed_qty', sa.Integer(), server_default='0', nullable=False),
        sa.CheckConstraint('quantity > 0', name='order_item_positive_quantity'),
        sa.CheckConstraint(
            'redeemed_qty >= 0 AND redeemed_qty <= quantity',
            name='order_item_valid_redeemed',
        ),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'])


def downgrade() -> None:
    """Downgrade schema - Drop store tables."""
    op.drop_index('ix_order_items_product_id', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')

    op.drop_index('ix_orders_redemption_code', table_name='orders')
    op.drop_index('ix_orders_created_at', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_table('orders')

    op.drop_index('ix_products_category', table_name='products')
    op.drop_table('products')

    order_status_enum.drop(op.get_bind(), checkfirst=True)
    stock_type_enum.drop(op.get_bind(), checkfirst=True)
    product_type_enum.drop(op.get_bind(), checkfirst=True)
