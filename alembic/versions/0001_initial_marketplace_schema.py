"""initial_marketplace_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        'id',
        UUID(as_uuid=True),
        server_default=sa.text('uuid_generate_v4()'),
        nullable=False,
    )


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'))


def _fk(column: str, target: str, ondelete: str = 'CASCADE') -> sa.Column:
    return sa.Column(
        column, UUID(as_uuid=True), sa.ForeignKey(target, ondelete=ondelete)
    )


def upgrade() -> None:
    """Upgrade schema - Marketplace tables and indexes."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # Plain Postgres (outside Supabase) lacks auth.uid() and the
    # authenticated role that the RLS policies rely on.
    op.execute(
        """
        DO $$
        BEGIN
            IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = 'authenticated') THEN
                CREATE ROLE authenticated NOLOGIN;
            END IF;
            IF NOT EXISTS (
                SELECT 1 FROM pg_proc p
                JOIN pg_namespace n ON n.oid = p.pronamespace
                WHERE n.nspname = 'auth' AND p.proname = 'uid'
            ) THEN
                CREATE SCHEMA IF NOT EXISTS auth;
                CREATE FUNCTION auth.uid() RETURNS uuid
                LANGUAGE sql STABLE AS $fn$
                    SELECT nullif(
                        nullif(current_setting('request.jwt.claims', true), '')::jsonb ->> 'sub',
                        ''
                    )::uuid
                $fn$;
                GRANT USAGE ON SCHEMA auth TO authenticated;
            END IF;
        END
        $$;
        """
    )

    op.create_table(
        'users',
        _id(),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), server_default='customer'),
        sa.Column('profile_picture', sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "role IN ('customer', 'merchant', 'admin')", name='users_role_check'
        ),
        sa.PrimaryKeyConstraint('id', name='users_pkey'),
        sa.UniqueConstraint('email', name='users_email_key'),
    )

    op.create_table(
        'merchants',
        _id(),
        _fk('owner_id', 'users.id'),
        sa.Column('business_name', sa.Text(), nullable=False),
        sa.Column('business_email', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('logo', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), server_default='pending'),
        _created_at(),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='merchants_status_check',
        ),
        sa.PrimaryKeyConstraint('id', name='merchants_pkey'),
        sa.UniqueConstraint('business_name', name='merchants_business_name_key'),
        sa.UniqueConstraint('business_email', name='merchants_business_email_key'),
    )

    op.create_table(
        'categories',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='categories_pkey'),
        sa.UniqueConstraint('name', name='categories_name_key'),
    )

    op.create_table(
        'products',
        _id(),
        _fk('merchant_id', 'merchants.id'),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column(
            'category_id', UUID(as_uuid=True), sa.ForeignKey('categories.id')
        ),
        sa.Column(
            'stock_quantity', sa.Integer(), server_default='0', nullable=False
        ),
        sa.Column('images', ARRAY(sa.Text()), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id', name='products_pkey'),
    )

    op.create_table(
        'inventory',
        _id(),
        _fk('product_id', 'products.id'),
        sa.Column('stock_change', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), server_default='sale'),
        _created_at(),
        sa.CheckConstraint(
            "reason IN ('sale', 'restock', 'return')", name='inventory_reason_check'
        ),
        sa.PrimaryKeyConstraint('id', name='inventory_pkey'),
    )

    op.create_table(
        'orders',
        _id(),
        _fk('user_id', 'users.id'),
        _fk('merchant_id', 'merchants.id'),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending'),
        _created_at(),
        sa.CheckConstraint(
            "status IN ('pending', 'shipped', 'delivered', 'cancelled')",
            name='orders_status_check',
        ),
        sa.PrimaryKeyConstraint('id', name='orders_pkey'),
    )

    op.create_table(
        'order_items',
        _id(),
        _fk('order_id', 'orders.id'),
        _fk('product_id', 'products.id'),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.PrimaryKeyConstraint('id', name='order_items_pkey'),
    )

    op.create_table(
        'payments',
        _id(),
        _fk('order_id', 'orders.id'),
        _fk('user_id', 'users.id'),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), server_default='pending'),
        _created_at(),
        sa.CheckConstraint(
            "payment_method IN ('stripe', 'mpesa')",
            name='payments_payment_method_check',
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name='payments_status_check',
        ),
        sa.PrimaryKeyConstraint('id', name='payments_pkey'),
    )

    op.create_table(
        'coupons',
        _id(),
        sa.Column('code', sa.Text(), nullable=False),
        sa.Column('discount_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            'discount_percentage BETWEEN 0 AND 100',
            name='coupons_discount_percentage_check',
        ),
        sa.PrimaryKeyConstraint('id', name='coupons_pkey'),
        sa.UniqueConstraint('code', name='coupons_code_key'),
    )

    op.create_table(
        'reviews',
        _id(),
        _fk('user_id', 'users.id'),
        _fk('product_id', 'products.id'),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('review_text', sa.Text(), nullable=True),
        sa.Column('images', ARRAY(sa.Text()), nullable=True),
        _created_at(),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='reviews_rating_check'),
        sa.PrimaryKeyConstraint('id', name='reviews_pkey'),
    )

    op.create_table(
        'wishlist',
        _id(),
        _fk('user_id', 'users.id'),
        _fk('product_id', 'products.id'),
        _created_at(),
        sa.PrimaryKeyConstraint('id', name='wishlist_pkey'),
    )

    op.create_table(
        'notifications',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.Text(), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false')),
        _created_at(),
        sa.CheckConstraint(
            "type IN ('order', 'promo', 'general')", name='notifications_type_check'
        ),
        sa.PrimaryKeyConstraint('id', name='notifications_pkey'),
    )

    op.create_table(
        'addresses',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('full_name', sa.Text(), nullable=False),
        sa.Column('street_address', sa.Text(), nullable=False),
        sa.Column('city', sa.Text(), nullable=False),
        sa.Column('state', sa.Text(), nullable=False),
        sa.Column('postal_code', sa.Text(), nullable=False),
        sa.Column('country', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('is_default', sa.Boolean(), server_default=sa.text('false')),
        _created_at(),
        sa.PrimaryKeyConstraint('id', name='addresses_pkey'),
    )

    # Indexes for faster queries
    op.create_index('idx_users_email', 'users', ['email'])
    op.create_index('idx_merchants_email', 'merchants', ['business_email'])
    op.create_index('idx_orders_user', 'orders', ['user_id'])
    op.create_index('idx_products_category', 'products', ['category_id'])
    op.create_index('idx_order_items_order', 'order_items', ['order_id'])
    op.create_index('idx_payments_order', 'payments', ['order_id'])

    # The bootstrap admin is created by services.marketplace_service.seed_admin
    # with a hashed credential, not seeded here.


def downgrade() -> None:
    """Downgrade schema - Drop marketplace tables."""
    op.drop_index('idx_payments_order', table_name='payments')
    op.drop_index('idx_order_items_order', table_name='order_items')
    op.drop_index('idx_products_category', table_name='products')
    op.drop_index('idx_orders_user', table_name='orders')
    op.drop_index('idx_merchants_email', table_name='merchants')
    op.drop_index('idx_users_email', table_name='users')

    for table in (
        'addresses',
        'notifications',
        'wishlist',
        'reviews',
        'coupons',
        'payments',
        'order_items',
        'orders',
        'inventory',
        'products',
        'categories',
        'merchants',
        'users',
    ):
        op.drop_table(table)
