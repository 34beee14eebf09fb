"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

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
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('whatsapp', sa.String(20)),
        sa.Column('hashed_password', sa.String(255)),
        sa.Column(
            'role',
            sa.Enum('CUSTOMER', 'ADMIN', 'KITCHEN', 'MOTOBOY', 'PDV', name='userrole'),
            nullable=False,
        ),
        sa.Column('is_blocked', sa.Boolean(), default=False),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create addresses table
    op.create_table(
        'addresses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('street', sa.String(255), nullable=False),
        sa.Column('number', sa.String(20), nullable=False),
        sa.Column('complement', sa.String(255)),
        sa.Column('neighborhood', sa.String(255), nullable=False),
        sa.Column('city', sa.String(100), nullable=False, server_default='São Paulo'),
        sa.Column('state', sa.String(50), nullable=False, server_default='SP'),
        sa.Column('zip_code', sa.String(20)),
        sa.Column('notes', sa.Text()),
        sa.Column('is_default', sa.Boolean(), default=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create motoboys table
    op.create_table(
        'motoboys',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('whatsapp', sa.String(20), nullable=False),
        sa.Column('photo_url', sa.String(500)),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('address_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('addresses.id')),
        sa.Column('motoboy_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('motoboys.id')),
        sa.Column('order_type', sa.String(20), nullable=False, server_default='delivery'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('original_delivery_fee', sa.Numeric(10, 2)),
        sa.Column('delivery_fee_adjusted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('discount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_distance', sa.Numeric(10, 2)),
        sa.Column('payment_method', sa.String(20), nullable=False),
        sa.Column('change_for', sa.Numeric(10, 2)),
        sa.Column('notes', sa.Text()),
        sa.Column('customer_name', sa.String(255)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('accepted_at', sa.DateTime()),
        sa.Column('preparing_at', sa.DateTime()),
        sa.Column('ready_at', sa.DateTime()),
        sa.Column('dispatched_at', sa.DateTime()),
        sa.Column('delivered_at', sa.DateTime()),
        sa.Column('cancelled_at', sa.DateTime()),
    )

    # Create order_items table
    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.String(64)),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
    )

    # Create store_settings table
    op.create_table(
        'store_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('store_address', sa.Text()),
        sa.Column('store_lat', sa.Numeric(9, 6)),
        sa.Column('store_lng', sa.Numeric(9, 6)),
        sa.Column('delivery_rate_per_km', sa.Numeric(10, 2)),
        sa.Column('min_delivery_fee', sa.Numeric(10, 2)),
        sa.Column('max_delivery_distance', sa.Numeric(10, 2)),
        sa.Column('pix_key', sa.String(255)),
        sa.Column('opening_hours', postgresql.JSON()),
        sa.Column('is_open', sa.Boolean(), default=True),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_users_whatsapp', 'users', ['whatsapp'])
    op.create_index('ix_motoboys_whatsapp', 'motoboys', ['whatsapp'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_motoboy_id', 'orders', ['motoboy_id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])


def downgrade() -> None:
    op.drop_table('store_settings')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('motoboys')
    op.drop_table('addresses')
    op.drop_table('users')
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
