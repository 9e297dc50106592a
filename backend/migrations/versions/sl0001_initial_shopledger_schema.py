"""initial shopledger schema

Revision ID: sl0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the complete schema from scratch:
- businesses / stores / store_counters: tenancy and per-store customer numbering
- customers / staff: store-scoped people, soft-deleted via is_archived
- inventory_items: products and services with current prices and stock
- orders / checkouts / transactions: one immutable triple per sold line
- profit_loss: running per-item sales totals
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'sl0001'
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                     server_default=sa.text('CURRENT_TIMESTAMP'))


def upgrade():
    # ============================================================================
    # businesses: tenant roots
    # ============================================================================
    op.create_table(
        'businesses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('phone_country_code', sa.String(length=8), nullable=False, server_default='+234'),
        sa.Column('email', sa.String(length=255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # stores: name and code unique per business
    # ============================================================================
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('phone_country_code', sa.String(length=8), nullable=False, server_default='+234'),
        sa.Column('country', sa.String(length=2), nullable=False, server_default='NG'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='NGN'),
        sa.Column('manager_staff_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        _created_at(),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
        # Rendered inline only where ALTER is unavailable (SQLite); added below otherwise
        sa.ForeignKeyConstraint(['manager_staff_id'], ['staff.id'], name='fk_stores_manager_staff', use_alter=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'name', name='uq_stores_business_name'),
        sa.UniqueConstraint('business_id', 'code', name='uq_stores_business_code'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stores_business_id', 'stores', ['business_id'])
    op.create_index('ix_stores_is_active', 'stores', ['is_active'])

    op.create_table(
        'store_counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('next_customer_number', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # customers / staff
    # ============================================================================
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('customer_number', sa.String(length=64), nullable=False),
        sa.Column('mobile_number', sa.String(length=32), nullable=True),
        sa.Column('country_code', sa.String(length=8), nullable=False, server_default='+234'),
        sa.Column('address', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'customer_number', name='uq_customers_store_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_store_id', 'customers', ['store_id'])
    op.create_index('ix_customers_is_archived', 'customers', ['is_archived'])
    op.create_index('ix_customers_store_archived', 'customers', ['store_id', 'is_archived'])

    op.create_table(
        'staff',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('staff_number', sa.String(length=64), nullable=False),
        sa.Column('mobile_number', sa.String(length=32), nullable=False),
        sa.Column('country_code', sa.String(length=8), nullable=False, server_default='+234'),
        sa.Column('pay_per_month_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('signed_contract', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='regular'),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'staff_number', name='uq_staff_store_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_staff_store_id', 'staff', ['store_id'])
    op.create_index('ix_staff_is_archived', 'staff', ['is_archived'])
    op.create_index('ix_staff_store_archived', 'staff', ['store_id', 'is_archived'])

    if op.get_bind().dialect.supports_alter:
        op.create_foreign_key(
            'fk_stores_manager_staff', 'stores', 'staff', ['manager_staff_id'], ['id'],
        )

    # ============================================================================
    # inventory_items: version_id backs optimistic locking on stock updates
    # ============================================================================
    op.create_table(
        'inventory_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('cost_price_cents', sa.Integer(), nullable=False),
        sa.Column('selling_price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'name', name='uq_inventory_store_name'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_inventory_items_store_id', 'inventory_items', ['store_id'])
    op.create_index('ix_inventory_store_type', 'inventory_items', ['store_id', 'type'])

    # ============================================================================
    # orders / checkouts / transactions: immutable sale records
    # ============================================================================
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('unit_cost_cents', sa.Integer(), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])
    op.create_index('ix_orders_inventory_id', 'orders', ['inventory_id'])
    op.create_index('ix_orders_store_inventory', 'orders', ['store_id', 'inventory_id'])

    op.create_table(
        'checkouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False, server_default='cash'),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='completed'),
        sa.Column('payment_reference', sa.String(length=128), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id'], ),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', name='uq_checkouts_order'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_checkouts_store_id', 'checkouts', ['store_id'])
    op.create_index('ix_checkouts_staff_id', 'checkouts', ['staff_id'])
    op.create_index('ix_checkouts_store_created', 'checkouts', ['store_id', 'created_at'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('checkout_id', sa.Integer(), nullable=False),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id'], ),
        sa.ForeignKeyConstraint(['checkout_id'], ['checkouts.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transactions_store_id', 'transactions', ['store_id'])
    op.create_index('ix_transactions_customer_id', 'transactions', ['customer_id'])
    op.create_index('ix_transactions_inventory_id', 'transactions', ['inventory_id'])
    op.create_index('ix_transactions_checkout_id', 'transactions', ['checkout_id'])
    op.create_index('ix_transactions_store_date', 'transactions', ['store_id', 'transaction_date'])

    # ============================================================================
    # profit_loss: one running row per (store, item)
    # ============================================================================
    op.create_table(
        'profit_loss',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('total_quantity_sold', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quantity_remaining', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_revenue_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_net_profit_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'inventory_id', name='uq_profit_loss_store_inventory'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_profit_loss_store_id', 'profit_loss', ['store_id'])
    op.create_index('ix_profit_loss_inventory_id', 'profit_loss', ['inventory_id'])


def downgrade():
    if op.get_bind().dialect.supports_alter:
        op.drop_constraint('fk_stores_manager_staff', 'stores', type_='foreignkey')

    for table in (
        'profit_loss', 'transactions', 'checkouts', 'orders', 'inventory_items',
        'staff', 'customers', 'store_counters', 'stores', 'businesses',
    ):
        op.drop_table(table)
