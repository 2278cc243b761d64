"""
Pydantic Schemas for API Validation
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Dict, List, Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum


# ==================== ENUMS ====================

class AccountTypeEnum(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class PaymentModeEnum(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    CREDIT = "credit"


class VoucherTypeEnum(str, Enum):
    RECEIPT = "receipt"
    PAYMENT = "payment"
    CONTRA = "contra"
    JOURNAL = "journal"


class AdvancePaymentTypeEnum(str, Enum):
    SUPPLIER_ADVANCE = "supplier_advance"
    CUSTOMER_ADVANCE = "customer_advance"
    EMPLOYEE_ADVANCE = "employee_advance"


# ==================== ORGANIZATION SCHEMAS ====================

class OrganizationBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    state_code: Optional[str] = Field(None, max_length=5)
    gst_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None


class OrganizationCreate(OrganizationBase):
    pass


class OrganizationResponse(OrganizationBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== LEDGER ACCOUNT SCHEMAS ====================

class LedgerAccountBase(BaseModel):
    account_name: str = Field(..., min_length=2, max_length=255)
    account_code: Optional[str] = Field(None, max_length=20)
    account_type: AccountTypeEnum
    account_group: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class LedgerAccountCreate(LedgerAccountBase):
    parent_account_id: Optional[int] = None
    opening_balance: Decimal = Decimal("0.00")


class LedgerAccountUpdate(BaseModel):
    account_name: Optional[str] = Field(None, min_length=2, max_length=255)
    account_group: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class LedgerAccountResponse(BaseModel):
    id: int
    organization_id: int
    account_code: str
    account_name: str
    account_type: str
    account_group: Optional[str]
    parent_account_id: Optional[int]
    description: Optional[str]
    opening_balance: Decimal
    current_balance: Decimal
    is_system_account: bool
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== LEDGER ENTRY SCHEMAS ====================

class LedgerLineCreate(BaseModel):
    """One posting line: exactly one of debit or credit is expected"""
    account_id: int
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None
    narration: Optional[str] = None


class LedgerEntryCreate(BaseModel):
    entry_date: Optional[date] = None
    narration: Optional[str] = None
    reference_number: Optional[str] = Field(None, max_length=100)
    created_by: Optional[str] = Field(None, max_length=255)
    lines: List[LedgerLineCreate] = Field(default_factory=list)


class LedgerEntryDetailResponse(BaseModel):
    id: int
    account_id: int
    account_name: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal
    narration: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryResponse(BaseModel):
    id: int
    organization_id: int
    entry_number: str
    entry_date: date
    narration: Optional[str]
    status: str
    reference_type: Optional[str]
    reference_id: Optional[int]
    reference_number: Optional[str]
    total_amount: Decimal
    created_by: Optional[str]
    created_at: datetime
    posted_at: Optional[datetime]
    details: List[LedgerEntryDetailResponse] = []

    model_config = ConfigDict(from_attributes=True)


# ==================== REPORT SCHEMAS ====================

class TrialBalanceRow(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal


class TrialBalanceResponse(BaseModel):
    as_of_date: Optional[date]
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal


class AccountMovement(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    amount: Decimal


class ProfitAndLossResponse(BaseModel):
    from_date: Optional[date]
    to_date: Optional[date]
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    income_accounts: List[AccountMovement] = []
    expense_accounts: List[AccountMovement] = []


class ItemProfitRow(BaseModel):
    item_id: int
    item_name: str
    quantity_sold: Decimal
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    margin_percent: Optional[Decimal] = None


class BalanceDrift(BaseModel):
    account_id: int
    account_code: str
    cached_balance: Decimal
    computed_balance: Decimal


# ==================== CRM SCHEMAS ====================

class PartyBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    state_code: Optional[str] = Field(None, max_length=5)
    gst_number: Optional[str] = Field(None, max_length=20)


class PartyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    state_code: Optional[str] = Field(None, max_length=5)
    gst_number: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class CustomerCreate(PartyBase):
    pass


class CustomerUpdate(PartyUpdate):
    pass


class CustomerResponse(PartyBase):
    id: int
    organization_id: int
    current_balance: Decimal = Decimal("0.00")
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SupplierCreate(PartyBase):
    pass


class SupplierUpdate(PartyUpdate):
    pass


class SupplierResponse(PartyBase):
    id: int
    organization_id: int
    current_balance: Decimal = Decimal("0.00")
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== INVENTORY SCHEMAS ====================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None


class CategoryResponse(CategoryCreate):
    id: int
    organization_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ItemBase(BaseModel):
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=2, max_length=255)
    category_id: Optional[int] = None
    hsn_code: Optional[str] = Field(None, max_length=20)
    unit_name: Optional[str] = Field("pcs", max_length=20)
    gst_rate: Decimal = Field(default=Decimal("3.00"), ge=0, le=100)
    retail_price: Decimal = Field(default=Decimal("0.00"), ge=0)
    wholesale_price: Decimal = Field(default=Decimal("0.00"), ge=0)
    purchase_cost: Decimal = Field(default=Decimal("0.00"), ge=0)
    min_stock_level: Decimal = Field(default=Decimal("0.000"), ge=0)


class ItemCreate(ItemBase):
    opening_stock: Decimal = Field(default=Decimal("0.000"), ge=0)


class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    category_id: Optional[int] = None
    hsn_code: Optional[str] = Field(None, max_length=20)
    unit_name: Optional[str] = Field(None, max_length=20)
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    retail_price: Optional[Decimal] = Field(None, ge=0)
    wholesale_price: Optional[Decimal] = Field(None, ge=0)
    purchase_cost: Optional[Decimal] = Field(None, ge=0)
    min_stock_level: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ItemResponse(ItemBase):
    id: int
    organization_id: int
    current_stock: Decimal
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockAdjustmentCreate(BaseModel):
    quantity_change: Decimal
    movement_type: str = Field(default="adjustment", pattern="^(adjustment|damage|return)$")
    notes: Optional[str] = None


class StockMovementResponse(BaseModel):
    id: int
    item_id: int
    movement_type: str
    quantity_change: Decimal
    unit_price: Optional[Decimal]
    reference_type: Optional[str]
    reference_id: Optional[int]
    notes: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== SALES SCHEMAS ====================

class SaleItemCreate(BaseModel):
    item_id: int
    quantity: Decimal = Field(..., gt=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    discount_percent: Decimal = Field(default=Decimal("0.00"), ge=0, le=100)
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)


class SaleCreate(BaseModel):
    customer_id: Optional[int] = None
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_state_code: Optional[str] = Field(None, max_length=5)
    sale_date: Optional[date] = None
    payment_mode: PaymentModeEnum = PaymentModeEnum.CASH
    amount_paid: Optional[Decimal] = Field(None, ge=0)
    is_gst_bill: bool = True
    notes: Optional[str] = None
    items: List[SaleItemCreate] = Field(..., min_length=1)


class SaleItemResponse(BaseModel):
    id: int
    item_id: int
    item_name: Optional[str]
    quantity: Decimal
    unit_price: Decimal
    purchase_price: Decimal
    discount_percent: Decimal
    gst_rate: Decimal
    taxable_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class SaleResponse(BaseModel):
    id: int
    organization_id: int
    invoice_number: str
    customer_id: Optional[int]
    customer_name: Optional[str]
    sale_date: date
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_amount: Decimal
    payment_mode: str
    amount_paid: Decimal
    credit_amount: Decimal
    is_credit: bool
    is_paid: bool
    ledger_entry_id: Optional[int]
    created_at: datetime
    items: List[SaleItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


# ==================== PURCHASE SCHEMAS ====================

class PurchaseOrderItemCreate(BaseModel):
    item_id: int
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)


class PurchaseOrderCreate(BaseModel):
    supplier_id: int
    order_date: Optional[date] = None
    expected_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1)


class PurchaseOrderItemResponse(BaseModel):
    id: int
    item_id: int
    quantity: Decimal
    received_quantity: Decimal
    unit_price: Decimal
    gst_rate: Decimal
    tax_amount: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderResponse(BaseModel):
    id: int
    organization_id: int
    po_number: str
    supplier_id: int
    order_date: date
    expected_date: Optional[date]
    status: str
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    notes: Optional[str]
    created_at: datetime
    items: List[PurchaseOrderItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


class PurchaseReceiptItemCreate(BaseModel):
    purchase_order_item_id: int
    quantity: Decimal = Field(..., gt=0)


class PurchaseReceiptCreate(BaseModel):
    purchase_order_id: int
    receipt_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[PurchaseReceiptItemCreate] = Field(..., min_length=1)


class PurchaseReceiptItemResponse(BaseModel):
    id: int
    purchase_order_item_id: int
    item_id: int
    quantity: Decimal
    unit_price: Decimal
    gst_rate: Decimal
    tax_amount: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class PurchaseReceiptResponse(BaseModel):
    id: int
    organization_id: int
    receipt_number: str
    purchase_order_id: int
    supplier_id: int
    receipt_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    ledger_entry_id: Optional[int]
    created_at: datetime
    items: List[PurchaseReceiptItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


# ==================== VOUCHER SCHEMAS ====================

class VoucherCreate(BaseModel):
    voucher_type: VoucherTypeEnum
    amount: Decimal = Field(..., gt=0)
    voucher_date: Optional[date] = None
    payment_mode: PaymentModeEnum = PaymentModeEnum.CASH
    party_type: Optional[str] = Field(None, pattern="^(customer|supplier)$")
    party_id: Optional[int] = None
    party_name: Optional[str] = Field(None, max_length=255)
    debit_account_id: Optional[int] = None
    credit_account_id: Optional[int] = None
    narration: Optional[str] = None
    reference_number: Optional[str] = Field(None, max_length=100)


class VoucherResponse(BaseModel):
    id: int
    organization_id: int
    voucher_number: str
    voucher_type: str
    party_type: Optional[str]
    party_id: Optional[int]
    party_name: Optional[str]
    amount: Decimal
    payment_mode: str
    debit_account_id: Optional[int]
    credit_account_id: Optional[int]
    narration: Optional[str]
    reference_number: Optional[str]
    voucher_date: date
    ledger_entry_id: Optional[int]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdvancePaymentCreate(BaseModel):
    payment_type: AdvancePaymentTypeEnum
    party_id: Optional[int] = None
    party_name: Optional[str] = Field(None, max_length=255)
    purchase_order_id: Optional[int] = None
    advance_amount: Decimal = Field(..., gt=0)
    payment_mode: PaymentModeEnum = PaymentModeEnum.CASH
    reference_number: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[date] = None
    purpose: Optional[str] = None
    notes: Optional[str] = None


class AdvancePaymentResponse(BaseModel):
    id: int
    organization_id: int
    payment_number: str
    payment_type: str
    party_type: str
    party_id: Optional[int]
    party_name: Optional[str]
    purchase_order_id: Optional[int]
    advance_amount: Decimal
    utilized_amount: Decimal
    balance_amount: Decimal
    payment_mode: str
    payment_date: date
    status: str
    ledger_entry_id: Optional[int]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== SETTINGS SCHEMAS ====================

class ResetResponse(BaseModel):
    cleared_tables: int
    deleted_rows: Dict[str, int]
    skipped_tables: List[str] = []


class MessageResponse(BaseModel):
    message: str
    success: bool = True
