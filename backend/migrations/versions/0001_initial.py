"""initial ledger, inventory and document tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18 10:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _org_fk():
    return sa.Column('organization_id', sa.Integer(),
                     sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)


def _money(name, nullable=True):
    return sa.Column(name, sa.Numeric(15, 2), nullable=nullable)


def _qty(name, nullable=True):
    return sa.Column(name, sa.Numeric(15, 3), nullable=nullable)


def upgrade():
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('state_code', sa.String(length=5), nullable=True),
        sa.Column('gst_number', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # ---- ledger ----
    op.create_table(
        'ledger_accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('account_code', sa.String(length=20), nullable=False),
        sa.Column('account_name', sa.String(length=255), nullable=False),
        sa.Column('account_type', sa.String(length=20), nullable=False),
        sa.Column('account_group', sa.String(length=100), nullable=True),
        sa.Column('parent_account_id', sa.Integer(),
                  sa.ForeignKey('ledger_accounts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _money('opening_balance'),
        _money('current_balance', nullable=False),
        sa.Column('is_system_account', sa.Boolean(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'account_code', name='uq_ledger_account_code'),
    )
    op.create_index('ix_ledger_accounts_organization_id', 'ledger_accounts', ['organization_id'])

    op.create_table(
        'ledger_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('entry_number', sa.String(length=50), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('narration', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('reference_type', sa.String(length=50), nullable=True),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        _money('total_amount'),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('posted_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'entry_number', name='uq_ledger_entry_number'),
    )
    op.create_index('ix_ledger_entries_org_date', 'ledger_entries', ['organization_id', 'entry_date'])
    op.create_index('ix_ledger_entries_reference', 'ledger_entries', ['reference_type', 'reference_id'])

    op.create_table(
        'ledger_entry_details',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entry_id', sa.Integer(), sa.ForeignKey('ledger_entries.id'), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('ledger_accounts.id'), nullable=False),
        sa.Column('account_name', sa.String(length=255), nullable=True),
        _money('debit_amount', nullable=False),
        _money('credit_amount', nullable=False),
        sa.Column('narration', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('debit_amount >= 0', name='ck_ledger_detail_debit_nonnegative'),
        sa.CheckConstraint('credit_amount >= 0', name='ck_ledger_detail_credit_nonnegative'),
        sa.CheckConstraint('debit_amount = 0 OR credit_amount = 0', name='ck_ledger_detail_one_side'),
    )
    op.create_index('ix_ledger_entry_details_entry_id', 'ledger_entry_details', ['entry_id'])
    op.create_index('ix_ledger_entry_details_account_id', 'ledger_entry_details', ['account_id'])

    # ---- parties ----
    for party_table in ('customers', 'suppliers'):
        op.create_table(
            party_table,
            sa.Column('id', sa.Integer(), primary_key=True),
            _org_fk(),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('address', sa.Text(), nullable=True),
            sa.Column('state_code', sa.String(length=5), nullable=True),
            sa.Column('gst_number', sa.String(length=20), nullable=True),
            _money('current_balance', nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index(f'ix_{party_table}_organization_id', party_table, ['organization_id'])

    # ---- inventory ----
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'items',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('hsn_code', sa.String(length=20), nullable=True),
        sa.Column('unit_name', sa.String(length=20), nullable=True),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=True),
        _money('retail_price'),
        _money('wholesale_price'),
        _money('purchase_cost'),
        _qty('current_stock', nullable=False),
        _qty('min_stock_level'),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_purchase_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'sku', name='uq_item_sku'),
    )
    op.create_index('ix_items_organization_id', 'items', ['organization_id'])

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=False),
        sa.Column('movement_type', sa.String(length=20), nullable=False),
        _qty('quantity_change', nullable=False),
        _money('unit_price'),
        sa.Column('reference_type', sa.String(length=50), nullable=True),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_stock_movements_item_id', 'stock_movements', ['item_id'])

    op.create_table(
        'item_batches',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=False),
        sa.Column('batch_number', sa.String(length=100), nullable=False),
        sa.Column('manufacturing_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        _qty('quantity'),
        _money('cost_price'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'inventory_valuations',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=False),
        sa.Column('valuation_date', sa.Date(), nullable=False),
        sa.Column('method', sa.String(length=20), nullable=True),
        _qty('closing_stock'),
        _money('closing_value'),
        _money('average_cost'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    # ---- sales ----
    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('customer_phone', sa.String(length=50), nullable=True),
        sa.Column('customer_state_code', sa.String(length=5), nullable=True),
        sa.Column('sale_date', sa.Date(), nullable=False),
        _money('subtotal'),
        _money('discount_amount'),
        _money('taxable_amount'),
        _money('cgst_amount'),
        _money('sgst_amount'),
        _money('igst_amount'),
        _money('total_amount'),
        sa.Column('payment_mode', sa.String(length=20), nullable=True),
        _money('amount_paid'),
        _money('credit_amount'),
        sa.Column('is_credit', sa.Boolean(), nullable=True),
        sa.Column('is_paid', sa.Boolean(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('ledger_entry_id', sa.Integer(), sa.ForeignKey('ledger_entries.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'invoice_number', name='uq_sale_invoice_number'),
    )
    op.create_index('ix_sales_org_date', 'sales', ['organization_id', 'sale_date'])

    op.create_table(
        'sale_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sale_id', sa.Integer(), sa.ForeignKey('sales.id'), nullable=False),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=True),
        sa.Column('hsn_code', sa.String(length=20), nullable=True),
        _qty('quantity', nullable=False),
        _money('unit_price', nullable=False),
        _money('purchase_price'),
        sa.Column('discount_percent', sa.Numeric(5, 2), nullable=True),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=True),
        _money('taxable_amount'),
        _money('cgst_amount'),
        _money('sgst_amount'),
        _money('igst_amount'),
        _money('total_price'),
    )

    # ---- purchases ----
    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('po_number', sa.String(length=50), nullable=False),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('expected_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        _money('subtotal'),
        _money('tax_amount'),
        _money('total_amount'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'po_number', name='uq_purchase_order_number'),
    )

    op.create_table(
        'purchase_order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=False),
        _qty('quantity', nullable=False),
        _qty('received_quantity', nullable=False),
        _money('unit_price', nullable=False),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=True),
        _money('tax_amount'),
        _money('total_price'),
    )

    op.create_table(
        'purchase_receipts',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('receipt_number', sa.String(length=50), nullable=False),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=False),
        sa.Column('receipt_date', sa.Date(), nullable=False),
        _money('subtotal'),
        _money('tax_amount'),
        _money('total_amount'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('ledger_entry_id', sa.Integer(), sa.ForeignKey('ledger_entries.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'receipt_number', name='uq_purchase_receipt_number'),
    )

    op.create_table(
        'purchase_receipt_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('receipt_id', sa.Integer(), sa.ForeignKey('purchase_receipts.id'), nullable=False),
        sa.Column('purchase_order_item_id', sa.Integer(),
                  sa.ForeignKey('purchase_order_items.id'), nullable=False),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=False),
        _qty('quantity', nullable=False),
        _money('unit_price', nullable=False),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=True),
        _money('tax_amount'),
        _money('total_price'),
    )

    # ---- vouchers ----
    op.create_table(
        'vouchers',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('voucher_number', sa.String(length=50), nullable=False),
        sa.Column('voucher_type', sa.String(length=20), nullable=False),
        sa.Column('party_type', sa.String(length=20), nullable=True),
        sa.Column('party_id', sa.Integer(), nullable=True),
        sa.Column('party_name', sa.String(length=255), nullable=True),
        _money('amount', nullable=False),
        sa.Column('payment_mode', sa.String(length=20), nullable=True),
        sa.Column('debit_account_id', sa.Integer(), sa.ForeignKey('ledger_accounts.id'), nullable=True),
        sa.Column('credit_account_id', sa.Integer(), sa.ForeignKey('ledger_accounts.id'), nullable=True),
        sa.Column('narration', sa.Text(), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('voucher_date', sa.Date(), nullable=False),
        sa.Column('ledger_entry_id', sa.Integer(), sa.ForeignKey('ledger_entries.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'voucher_number', name='uq_voucher_number'),
    )

    op.create_table(
        'advance_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('payment_number', sa.String(length=50), nullable=False),
        sa.Column('payment_type', sa.String(length=30), nullable=False),
        sa.Column('party_type', sa.String(length=20), nullable=False),
        sa.Column('party_id', sa.Integer(), nullable=True),
        sa.Column('party_name', sa.String(length=255), nullable=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=True),
        _money('advance_amount', nullable=False),
        _money('utilized_amount'),
        _money('balance_amount'),
        sa.Column('payment_mode', sa.String(length=20), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('ledger_entry_id', sa.Integer(), sa.ForeignKey('ledger_entries.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'payment_number', name='uq_advance_payment_number'),
    )

    # ---- counter / workshop ----
    op.create_table(
        'cash_register',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('register_date', sa.Date(), nullable=False),
        _money('opening_balance'),
        _money('cash_in'),
        _money('cash_out'),
        _money('closing_balance'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_closed', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'job_cards',
        sa.Column('id', sa.Integer(), primary_key=True),
        _org_fk(),
        sa.Column('job_number', sa.String(length=50), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        _money('estimated_amount'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'job_card_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('job_card_id', sa.Integer(), sa.ForeignKey('job_cards.id'), nullable=False),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _qty('quantity'),
        _qty('weight'),
        _money('amount'),
    )


def downgrade():
    for table_name in (
        'job_card_items', 'job_cards', 'cash_register', 'advance_payments', 'vouchers',
        'purchase_receipt_items', 'purchase_receipts', 'purchase_order_items', 'purchase_orders',
        'sale_items', 'sales', 'inventory_valuations', 'item_batches', 'stock_movements',
        'items', 'categories', 'suppliers', 'customers',
        'ledger_entry_details', 'ledger_entries', 'ledger_accounts', 'organizations',
    ):
        op.drop_table(table_name)
