"""marketplace_access_policies

Opens the tables the core policies left locked (products, payments,
notifications), brings order_items, inventory, categories and coupons under
RLS, gives admins full access and stops owners from changing their own role
or store status.

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-18 09:10:00.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0003'
down_revision: Union[str, Sequence[str], None] = '0002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NEW_RLS_TABLES = ['order_items', 'inventory', 'categories', 'coupons']

ALL_RLS_TABLES = [
    'users',
    'merchants',
    'orders',
    'products',
    'payments',
    'wishlist',
    'notifications',
    'addresses',
    'reviews',
] + NEW_RLS_TABLES

# SECURITY DEFINER so policy lookups do not recurse through RLS.
HELPERS = {
    'is_admin()': """
        RETURNS boolean LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT EXISTS (
                SELECT 1 FROM users WHERE id = auth.uid() AND role = 'admin'
            )
        $$""",
    'current_user_role()': """
        RETURNS text LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT role FROM users WHERE id = auth.uid()
        $$""",
    'merchant_status(merchant uuid)': """
        RETURNS text LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT status FROM merchants WHERE id = merchant
        $$""",
    'owns_merchant(merchant uuid)': """
        RETURNS boolean LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT EXISTS (
                SELECT 1 FROM merchants WHERE id = merchant AND owner_id = auth.uid()
            )
        $$""",
    'owns_product(product uuid)': """
        RETURNS boolean LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT EXISTS (
                SELECT 1 FROM products
                JOIN merchants ON products.merchant_id = merchants.id
                WHERE products.id = product AND merchants.owner_id = auth.uid()
            )
        $$""",
    'owns_order(target uuid)': """
        RETURNS boolean LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT EXISTS (
                SELECT 1 FROM orders WHERE id = target AND user_id = auth.uid()
            )
        $$""",
    'sells_order(target uuid)': """
        RETURNS boolean LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public AS $$
            SELECT EXISTS (
                SELECT 1 FROM orders
                JOIN merchants ON orders.merchant_id = merchants.id
                WHERE orders.id = target AND merchants.owner_id = auth.uid()
            )
        $$""",
}

POLICIES = [
    # Users
    (
        'Users can view their own profile',
        'users',
        'FOR SELECT USING (auth.uid() = id)',
    ),
    (
        'Users can create their own profile',
        'users',
        "FOR INSERT WITH CHECK (auth.uid() = id AND role IN ('customer', 'merchant'))",
    ),
    (
        'Users cannot change their own role',
        'users',
        'AS RESTRICTIVE FOR UPDATE USING (true) '
        'WITH CHECK (public.is_admin() OR role = public.current_user_role())',
    ),
    # Merchants
    (
        'Approved merchants are public',
        'merchants',
        "FOR SELECT USING (status = 'approved')",
    ),
    (
        'Users can open a store',
        'merchants',
        "FOR INSERT WITH CHECK (auth.uid() = owner_id AND status = 'pending')",
    ),
    (
        'Only admins change merchant status',
        'merchants',
        'AS RESTRICTIVE FOR UPDATE USING (true) '
        'WITH CHECK (public.is_admin() OR status = public.merchant_status(id))',
    ),
    # Products & inventory
    (
        'Products are visible to everyone',
        'products',
        'FOR SELECT USING (true)',
    ),
    (
        'Merchants can manage their products',
        'products',
        'FOR INSERT WITH CHECK (public.owns_merchant(merchant_id))',
    ),
    (
        'Merchants can update their products',
        'products',
        'FOR UPDATE USING (public.owns_merchant(merchant_id)) '
        'WITH CHECK (public.owns_merchant(merchant_id))',
    ),
    (
        'Merchants can delete their products',
        'products',
        'FOR DELETE USING (public.owns_merchant(merchant_id))',
    ),
    (
        'Inventory is visible to everyone',
        'inventory',
        'FOR SELECT USING (true)',
    ),
    (
        'Merchants can record stock changes',
        'inventory',
        'FOR INSERT WITH CHECK (public.owns_product(product_id))',
    ),
    # Orders & order items
    (
        'Customers can place orders',
        'orders',
        "FOR INSERT WITH CHECK (auth.uid() = user_id AND status = 'pending')",
    ),
    (
        'Merchants can view orders for their store',
        'orders',
        'FOR SELECT USING (public.owns_merchant(merchant_id))',
    ),
    (
        'Merchants can update orders for their store',
        'orders',
        'FOR UPDATE USING (public.owns_merchant(merchant_id)) '
        'WITH CHECK (public.owns_merchant(merchant_id))',
    ),
    (
        'Customers can view their order items',
        'order_items',
        'FOR SELECT USING (public.owns_order(order_id))',
    ),
    (
        'Merchants can view order items for their store',
        'order_items',
        'FOR SELECT USING (public.sells_order(order_id))',
    ),
    (
        'Customers can add items to their orders',
        'order_items',
        'FOR INSERT WITH CHECK (public.owns_order(order_id))',
    ),
    # Payments
    (
        'Customers can view their payments',
        'payments',
        'FOR SELECT USING (auth.uid() = user_id)',
    ),
    (
        'Customers can pay for their orders',
        'payments',
        'FOR INSERT WITH CHECK (auth.uid() = user_id AND public.owns_order(order_id))',
    ),
    # Notifications
    (
        'Users can view their notifications',
        'notifications',
        'FOR SELECT USING (auth.uid() = user_id)',
    ),
    (
        'Users can update their notifications',
        'notifications',
        'FOR UPDATE USING (auth.uid() = user_id) WITH CHECK (auth.uid() = user_id)',
    ),
    (
        'Users can delete their notifications',
        'notifications',
        'FOR DELETE USING (auth.uid() = user_id)',
    ),
    # Reference data
    (
        'Categories are visible to everyone',
        'categories',
        'FOR SELECT USING (true)',
    ),
    (
        'Coupons are visible to everyone',
        'coupons',
        'FOR SELECT USING (true)',
    ),
] + [
    (
        f'Admins can manage {table}',
        table,
        'FOR ALL USING (public.is_admin()) WITH CHECK (public.is_admin())',
    )
    for table in ALL_RLS_TABLES
]


def upgrade() -> None:
    """Upgrade schema - Helper functions and marketplace policies."""
    for signature, body in HELPERS.items():
        op.execute(f'CREATE OR REPLACE FUNCTION public.{signature} {body}')
        op.execute(f'GRANT EXECUTE ON FUNCTION public.{signature} TO authenticated')
    for table in NEW_RLS_TABLES:
        op.execute(f'ALTER TABLE {table} ENABLE ROW LEVEL SECURITY')
    for name, table, body in POLICIES:
        op.execute(f'CREATE POLICY "{name}" ON {table} {body}')


def downgrade() -> None:
    """Downgrade schema - Drop marketplace policies and helpers."""
    for name, table, _ in reversed(POLICIES):
        op.execute(f'DROP POLICY IF EXISTS "{name}" ON {table}')
    for table in NEW_RLS_TABLES:
        op.execute(f'ALTER TABLE {table} DISABLE ROW LEVEL SECURITY')
    for signature in HELPERS:
        op.execute(f'DROP FUNCTION IF EXISTS public.{signature}')
