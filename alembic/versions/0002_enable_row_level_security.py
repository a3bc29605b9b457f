"""enable_row_level_security

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18 09:05:00.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, Sequence[str], None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RLS_TABLES = [
    'users',
    'merchants',
    'orders',
    'products',
    'payments',
    'wishlist',
    'notifications',
    'addresses',
    'reviews',
]

# (name, table, body) in creation order
POLICIES = [
    # Users can only view & update their own profile
    (
        'Users can update their own profile',
        'users',
        'FOR UPDATE USING (auth.uid() = id) WITH CHECK (auth.uid() = id)',
    ),
    # Merchants can only view and manage their own store
    (
        'Merchants can view their store',
        'merchants',
        'FOR SELECT USING (auth.uid() = owner_id)',
    ),
    (
        'Merchants can update their store',
        'merchants',
        'FOR UPDATE USING (auth.uid() = owner_id) WITH CHECK (auth.uid() = owner_id)',
    ),
    (
        'Merchants can delete their store',
        'merchants',
        'FOR DELETE USING (auth.uid() = owner_id)',
    ),
    # Customers can only view their own orders
    (
        'Customers can view their orders',
        'orders',
        'FOR SELECT USING (auth.uid() = user_id)',
    ),
    # Customers can only see their own wishlist
    (
        'Customers can manage their wishlist',
        'wishlist',
        'FOR SELECT USING (auth.uid() = user_id)',
    ),
    (
        'Customers can add to wishlist',
        'wishlist',
        'FOR INSERT WITH CHECK (auth.uid() = user_id)',
    ),
    (
        'Customers can remove from wishlist',
        'wishlist',
        'FOR DELETE USING (auth.uid() = user_id)',
    ),
    # Customers can manage their addresses
    (
        'Customers can manage their addresses',
        'addresses',
        'FOR SELECT USING (auth.uid() = user_id)',
    ),
    (
        'Customers can add an address',
        'addresses',
        'FOR INSERT WITH CHECK (auth.uid() = user_id)',
    ),
    (
        'Customers can update their address',
        'addresses',
        'FOR UPDATE USING (auth.uid() = user_id) WITH CHECK (auth.uid() = user_id)',
    ),
    (
        'Customers can delete their address',
        'addresses',
        'FOR DELETE USING (auth.uid() = user_id)',
    ),
    # Reviews are public; authors must have ordered the product
    (
        'Users can view all reviews',
        'reviews',
        'FOR SELECT TO authenticated USING (true)',
    ),
    (
        'Users can insert their own reviews',
        'reviews',
        """FOR INSERT TO authenticated
        WITH CHECK (
            user_id = auth.uid() AND
            rating >= 1 AND
            rating <= 5 AND
            EXISTS (
                SELECT 1 FROM order_items
                JOIN orders ON order_items.order_id = orders.id
                WHERE order_items.product_id = reviews.product_id
                AND orders.user_id = auth.uid()
            )
        )""",
    ),
    (
        'Users can update their own reviews',
        'reviews',
        """FOR UPDATE TO authenticated
        USING (user_id = auth.uid())
        WITH CHECK (
            user_id = auth.uid() AND
            rating >= 1 AND
            rating <= 5
        )""",
    ),
    (
        'Users can delete their own reviews',
        'reviews',
        'FOR DELETE TO authenticated USING (user_id = auth.uid())',
    ),
]


def upgrade() -> None:
    """Upgrade schema - Enable RLS and create the core policies."""
    op.execute(
        'GRANT SELECT, INSERT, UPDATE, DELETE ON ALL TABLES IN SCHEMA public '
        'TO authenticated'
    )
    for table in RLS_TABLES:
        op.execute(f'ALTER TABLE {table} ENABLE ROW LEVEL SECURITY')
    for name, table, body in POLICIES:
        op.execute(f'CREATE POLICY "{name}" ON {table} {body}')


def downgrade() -> None:
    """Downgrade schema - Drop the core policies and disable RLS."""
    for name, table, _ in reversed(POLICIES):
        op.execute(f'DROP POLICY IF EXISTS "{name}" ON {table}')
    for table in RLS_TABLES:
        op.execute(f'ALTER TABLE {table} DISABLE ROW LEVEL SECURITY')
    op.execute(
        'REVOKE SELECT, INSERT, UPDATE, DELETE ON ALL TABLES IN SCHEMA public '
        'FROM authenticated'
    )
