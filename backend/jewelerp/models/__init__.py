"""
SQLAlchemy Models for the Jewel ERP ledger
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Date, Numeric,
    ForeignKey, Index, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from jewelerp.core.database import Base


# ==================== ENUMS ====================

class AccountType(enum.Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


# Accounts whose balance grows with debits; the rest grow with credits
DEBIT_NORMAL_TYPES = (AccountType.ASSET.value, AccountType.EXPENSE.value)


class EntryStatus(enum.Enum):
    DRAFT = "draft"
    POSTED = "posted"


class MovementType(enum.Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    ADJUSTMENT = "adjustment"
    RETURN = "return"
    DAMAGE = "damage"


class VoucherType(enum.Enum):
    RECEIPT = "receipt"
    PAYMENT = "payment"
    CONTRA = "contra"
    JOURNAL = "journal"


class PurchaseOrderStatus(enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    RECEIVED = "received"
    CANCELLED = "cancelled"


# ==================== CORE MODELS ====================

class Organization(Base):
    """Jewelry shop / company that owns every other record"""
    __tablename__ = 'organizations'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    state_code = Column(String(5), nullable=True)
    gst_number = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    ledger_accounts = relationship("LedgerAccount", back_populates="organization", passive_deletes=True)


# ==================== LEDGER MODELS ====================

class LedgerAccount(Base):
    """Chart of accounts; current_balance caches posted details"""
    __tablename__ = 'ledger_accounts'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    account_code = Column(String(20), nullable=False)
    account_name = Column(String(255), nullable=False)
    account_type = Column(String(20), nullable=False)
    account_group = Column(String(100), nullable=True)
    parent_account_id = Column(Integer, ForeignKey('ledger_accounts.id', ondelete='SET NULL'), nullable=True)
    description = Column(Text, nullable=True)
    opening_balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    current_balance = Column(Numeric(15, 2), default=Decimal("0.00"), nullable=False)
    is_system_account = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="ledger_accounts")
    parent = relationship("LedgerAccount", remote_side=[id], backref="children")
    entry_details = relationship("LedgerEntryDetail", back_populates="account")

    @property
    def is_debit_normal(self) -> bool:
        return (self.account_type or '').lower() in DEBIT_NORMAL_TYPES

    def signed_amount(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Effect of a debit/credit pair on this account's balance"""
        if self.is_debit_normal:
            return debit - credit
        return credit - debit

    __table_args__ = (
        UniqueConstraint('organization_id', 'account_code', name='uq_ledger_account_code'),
        Index('ix_ledger_accounts_organization_id', 'organization_id'),
    )


class LedgerEntry(Base):
    """A balanced accounting event"""
    __tablename__ = 'ledger_entries'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    entry_number = Column(String(50), nullable=False)
    entry_date = Column(Date, nullable=False)
    narration = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=EntryStatus.DRAFT.value)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(Integer, nullable=True)
    reference_number = Column(String(100), nullable=True)
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    posted_at = Column(DateTime, nullable=True)

    # Relationships
    details = relationship("LedgerEntryDetail", back_populates="entry", cascade="all, delete-orphan",
                           order_by="LedgerEntryDetail.id")

    @property
    def is_posted(self) -> bool:
        return self.status == EntryStatus.POSTED.value

    __table_args__ = (
        UniqueConstraint('organization_id', 'entry_number', name='uq_ledger_entry_number'),
        Index('ix_ledger_entries_org_date', 'organization_id', 'entry_date'),
        Index('ix_ledger_entries_reference', 'reference_type', 'reference_id'),
    )


class LedgerEntryDetail(Base):
    """One debit or credit line of a ledger entry"""
    __tablename__ = 'ledger_entry_details'

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey('ledger_entries.id'), nullable=False)
    account_id = Column(Integer, ForeignKey('ledger_accounts.id'), nullable=False)
    account_name = Column(String(255), nullable=True)
    debit_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    credit_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    narration = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    entry = relationship("LedgerEntry", back_populates="details")
    account = relationship("LedgerAccount", back_populates="entry_details")

    __table_args__ = (
        CheckConstraint('debit_amount >= 0', name='ck_ledger_detail_debit_nonnegative'),
        CheckConstraint('credit_amount >= 0', name='ck_ledger_detail_credit_nonnegative'),
        CheckConstraint('debit_amount = 0 OR credit_amount = 0', name='ck_ledger_detail_one_side'),
        Index('ix_ledger_entry_details_entry_id', 'entry_id'),
        Index('ix_ledger_entry_details_account_id', 'account_id'),
    )


# ==================== PARTY MODELS ====================

class Customer(Base):
    """Customer; current_balance is the outstanding udhari"""
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    state_code = Column(String(5), nullable=True)
    gst_number = Column(String(20), nullable=True)
    current_balance = Column(Numeric(15, 2), default=Decimal("0.00"), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_customers_organization_id', 'organization_id'),
    )


class Supplier(Base):
    """Supplier; current_balance is what the shop owes"""
    __tablename__ = 'suppliers'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    state_code = Column(String(5), nullable=True)
    gst_number = Column(String(20), nullable=True)
    current_balance = Column(Numeric(15, 2), default=Decimal("0.00"), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_suppliers_organization_id', 'organization_id'),
    )


# ==================== INVENTORY MODELS ====================

class Category(Base):
    """Item category (gold, silver, diamond...)"""
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    items = relationship("Item", back_populates="category")


class Item(Base):
    """Stock keeping unit"""
    __tablename__ = 'items'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=True)
    sku = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    hsn_code = Column(String(20), nullable=True)
    unit_name = Column(String(20), default="pcs")
    gst_rate = Column(Numeric(5, 2), default=Decimal("3.00"))
    retail_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    wholesale_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    purchase_cost = Column(Numeric(15, 2), default=Decimal("0.00"))
    current_stock = Column(Numeric(15, 3), default=Decimal("0.000"), nullable=False)
    min_stock_level = Column(Numeric(15, 3), default=Decimal("0.000"))
    is_active = Column(Boolean, default=True)
    last_purchase_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="items")
    stock_movements = relationship("StockMovement", back_populates="item")

    __table_args__ = (
        UniqueConstraint('organization_id', 'sku', name='uq_item_sku'),
        Index('ix_items_organization_id', 'organization_id'),
    )


class StockMovement(Base):
    """Signed change to an item's stock"""
    __tablename__ = 'stock_movements'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=False)
    movement_type = Column(String(20), nullable=False)
    quantity_change = Column(Numeric(15, 3), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=True)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    item = relationship("Item", back_populates="stock_movements")

    __table_args__ = (
        Index('ix_stock_movements_item_id', 'item_id'),
    )


class ItemBatch(Base):
    """Lot of an item received together"""
    __tablename__ = 'item_batches'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=False)
    batch_number = Column(String(100), nullable=False)
    manufacturing_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    quantity = Column(Numeric(15, 3), default=Decimal("0.000"))
    cost_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_at = Column(DateTime, default=datetime.utcnow)


class InventoryValuation(Base):
    """Periodic stock valuation snapshot"""
    __tablename__ = 'inventory_valuations'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=False)
    valuation_date = Column(Date, nullable=False)
    method = Column(String(20), default="weighted_average")
    closing_stock = Column(Numeric(15, 3), default=Decimal("0.000"))
    closing_value = Column(Numeric(15, 2), default=Decimal("0.00"))
    average_cost = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_at = Column(DateTime, default=datetime.utcnow)


# ==================== SALES MODELS ====================

class Sale(Base):
    """Sales invoice"""
    __tablename__ = 'sales'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    invoice_number = Column(String(50), nullable=False)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    customer_state_code = Column(String(5), nullable=True)
    sale_date = Column(Date, nullable=False)
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    discount_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    taxable_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    cgst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    sgst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    igst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    payment_mode = Column(String(20), default="cash")
    amount_paid = Column(Numeric(15, 2), default=Decimal("0.00"))
    credit_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    is_credit = Column(Boolean, default=False)
    is_paid = Column(Boolean, default=True)
    notes = Column(Text, nullable=True)
    ledger_entry_id = Column(Integer, ForeignKey('ledger_entries.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    customer = relationship("Customer")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    ledger_entry = relationship("LedgerEntry")

    @property
    def tax_amount(self) -> Decimal:
        return (self.cgst_amount or 0) + (self.sgst_amount or 0) + (self.igst_amount or 0)

    __table_args__ = (
        UniqueConstraint('organization_id', 'invoice_number', name='uq_sale_invoice_number'),
        Index('ix_sales_org_date', 'organization_id', 'sale_date'),
    )


class SaleItem(Base):
    """Sales invoice line"""
    __tablename__ = 'sale_items'

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey('sales.id'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=False)
    item_name = Column(String(255), nullable=True)
    hsn_code = Column(String(20), nullable=True)
    quantity = Column(Numeric(15, 3), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    purchase_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    discount_percent = Column(Numeric(5, 2), default=Decimal("0.00"))
    gst_rate = Column(Numeric(5, 2), default=Decimal("0.00"))
    taxable_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    cgst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    sgst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    igst_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_price = Column(Numeric(15, 2), default=Decimal("0.00"))

    sale = relationship("Sale", back_populates="items")
    item = relationship("Item")


# ==================== PURCHASE MODELS ====================

class PurchaseOrder(Base):
    """Purchase order to a supplier"""
    __tablename__ = 'purchase_orders'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    po_number = Column(String(50), nullable=False)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=False)
    order_date = Column(Date, nullable=False)
    expected_date = Column(Date, nullable=True)
    status = Column(String(20), default=PurchaseOrderStatus.PENDING.value)
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    supplier = relationship("Supplier")
    items = relationship("PurchaseOrderItem", back_populates="purchase_order", cascade="all, delete-orphan")
    receipts = relationship("PurchaseReceipt", back_populates="purchase_order")

    __table_args__ = (
        UniqueConstraint('organization_id', 'po_number', name='uq_purchase_order_number'),
    )


class PurchaseOrderItem(Base):
    """Purchase order line"""
    __tablename__ = 'purchase_order_items'

    id = Column(Integer, primary_key=True)
    purchase_order_id = Column(Integer, ForeignKey('purchase_orders.id'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=False)
    quantity = Column(Numeric(15, 3), nullable=False)
    received_quantity = Column(Numeric(15, 3), default=Decimal("0.000"), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_price = Column(Numeric(15, 2), default=Decimal("0.00"))

    purchase_order = relationship("PurchaseOrder", back_populates="items")
    item = relationship("Item")

    @property
    def pending_quantity(self) -> Decimal:
        return (self.quantity or 0) - (self.received_quantity or 0)


class PurchaseReceipt(Base):
    """Goods receipt note against a purchase order"""
    __tablename__ = 'purchase_receipts'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    receipt_number = Column(String(50), nullable=False)
    purchase_order_id = Column(Integer, ForeignKey('purchase_orders.id'), nullable=False)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=False)
    receipt_date = Column(Date, nullable=False)
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    notes = Column(Text, nullable=True)
    ledger_entry_id = Column(Integer, ForeignKey('ledger_entries.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    purchase_order = relationship("PurchaseOrder", back_populates="receipts")
    supplier = relationship("Supplier")
    items = relationship("PurchaseReceiptItem", back_populates="receipt", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('organization_id', 'receipt_number', name='uq_purchase_receipt_number'),
    )


class PurchaseReceiptItem(Base):
    """Quantity received against one purchase order line"""
    __tablename__ = 'purchase_receipt_items'

    id = Column(Integer, primary_key=True)
    receipt_id = Column(Integer, ForeignKey('purchase_receipts.id'), nullable=False)
    purchase_order_item_id = Column(Integer, ForeignKey('purchase_order_items.id'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=False)
    quantity = Column(Numeric(15, 3), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), default=Decimal("0.00"))
    tax_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_price = Column(Numeric(15, 2), default=Decimal("0.00"))

    receipt = relationship("PurchaseReceipt", back_populates="items")
    purchase_order_item = relationship("PurchaseOrderItem")
    item = relationship("Item")


# ==================== VOUCHER MODELS ====================

class Voucher(Base):
    """Receipt / payment / contra / journal voucher"""
    __tablename__ = 'vouchers'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    voucher_number = Column(String(50), nullable=False)
    voucher_type = Column(String(20), nullable=False)
    party_type = Column(String(20), nullable=True)  # customer, supplier
    party_id = Column(Integer, nullable=True)
    party_name = Column(String(255), nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)
    payment_mode = Column(String(20), default="cash")
    debit_account_id = Column(Integer, ForeignKey('ledger_accounts.id'), nullable=True)
    credit_account_id = Column(Integer, ForeignKey('ledger_accounts.id'), nullable=True)
    narration = Column(Text, nullable=True)
    reference_number = Column(String(100), nullable=True)
    voucher_date = Column(Date, nullable=False)
    ledger_entry_id = Column(Integer, ForeignKey('ledger_entries.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    ledger_entry = relationship("LedgerEntry")

    __table_args__ = (
        UniqueConstraint('organization_id', 'voucher_number', name='uq_voucher_number'),
    )


class AdvancePayment(Base):
    """Advance paid to a supplier/employee or received from a customer"""
    __tablename__ = 'advance_payments'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    payment_number = Column(String(50), nullable=False)
    payment_type = Column(String(30), nullable=False)
    party_type = Column(String(20), nullable=False)
    party_id = Column(Integer, nullable=True)
    party_name = Column(String(255), nullable=True)
    purchase_order_id = Column(Integer, ForeignKey('purchase_orders.id'), nullable=True)
    advance_amount = Column(Numeric(15, 2), nullable=False)
    utilized_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    balance_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    payment_mode = Column(String(20), default="cash")
    reference_number = Column(String(100), nullable=True)
    payment_date = Column(Date, nullable=False)
    purpose = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), default="active")
    ledger_entry_id = Column(Integer, ForeignKey('ledger_entries.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('organization_id', 'payment_number', name='uq_advance_payment_number'),
    )


# ==================== COUNTER / WORKSHOP MODELS ====================

class CashRegister(Base):
    """Daily cash counter"""
    __tablename__ = 'cash_register'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    register_date = Column(Date, nullable=False)
    opening_balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    cash_in = Column(Numeric(15, 2), default=Decimal("0.00"))
    cash_out = Column(Numeric(15, 2), default=Decimal("0.00"))
    closing_balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    notes = Column(Text, nullable=True)
    is_closed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class JobCard(Base):
    """Repair / making order taken from a customer"""
    __tablename__ = 'job_cards'

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    job_number = Column(String(50), nullable=False)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="open")
    estimated_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_at = Column(DateTime, default=datetime.utcnow)

    items = relationship("JobCardItem", back_populates="job_card", cascade="all, delete-orphan")


class JobCardItem(Base):
    """Material or labour line of a job card"""
    __tablename__ = 'job_card_items'

    id = Column(Integer, primary_key=True)
    job_card_id = Column(Integer, ForeignKey('job_cards.id'), nullable=False)
    item_id = Column(Integer, ForeignKey('items.id'), nullable=True)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(15, 3), default=Decimal("1.000"))
    weight = Column(Numeric(15, 3), nullable=True)
    amount = Column(Numeric(15, 2), default=Decimal("0.00"))

    job_card = relationship("JobCard", back_populates="items")
