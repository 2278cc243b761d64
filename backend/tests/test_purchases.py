from datetime import date
from decimal import Decimal

import pytest

from jewelerp.core.exceptions import ValidationError
from jewelerp.models import LedgerEntry
from jewelerp.schemas import (
    PurchaseOrderCreate, PurchaseOrderItemCreate, PurchaseReceiptCreate, PurchaseReceiptItemCreate
)
from jewelerp.services.ledger_service import LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.purchase_service import PurchaseService


@pytest.fixture
def order(db, org, supplier, ring):
    order = PurchaseService(db).create_order(PurchaseOrderCreate(
        supplier_id=supplier.id,
        order_date=date(2025, 7, 1),
        items=[PurchaseOrderItemCreate(item_id=ring.id, quantity=Decimal("10"), unit_price=Decimal("5000"))],
    ), org.id)
    db.commit()
    return order


def receive(db, org, order, quantity):
    return PurchaseService(db).receive(PurchaseReceiptCreate(
        purchase_order_id=order.id,
        receipt_date=date(2025, 7, 5),
        items=[PurchaseReceiptItemCreate(purchase_order_item_id=order.items[0].id, quantity=Decimal(quantity))],
    ), org.id)


class TestPurchaseOrders:
    def test_order_totals_and_no_ledger_effect(self, db, org, order):
        assert order.po_number == "PO-00001"
        assert order.status == "pending"
        assert order.subtotal == Decimal("50000")
        assert order.tax_amount == Decimal("1500")
        assert order.total_amount == Decimal("51500")
        assert db.query(LedgerEntry).filter(LedgerEntry.reference_type == "purchase_receipt").count() == 0

    def test_unknown_supplier_rejected(self, db, org, ring):
        with pytest.raises(ValidationError, match="Supplier not found"):
            PurchaseService(db).create_order(PurchaseOrderCreate(
                supplier_id=999,
                items=[PurchaseOrderItemCreate(item_id=ring.id, quantity=Decimal("1"), unit_price=Decimal("1"))],
            ), org.id)

    def test_cancel_pending_order(self, db, org, order):
        cancelled = PurchaseService(db).cancel_order(order.id, org.id)
        assert cancelled.status == "cancelled"
        with pytest.raises(ValidationError):
            receive(db, org, order, "1")


class TestGoodsReceipt:
    def test_partial_receipt(self, db, org, order, ring, supplier, accounts):
        receipt = receive(db, org, order, "4")
        db.commit()

        assert receipt.receipt_number == "GRN-00001"
        assert receipt.subtotal == Decimal("20000")
        assert receipt.tax_amount == Decimal("600")
        assert receipt.total_amount == Decimal("20600")
        assert order.status == "partial"
        assert order.items[0].received_quantity == Decimal("4")

        assert ring.current_stock == Decimal("9")
        assert ring.purchase_cost == Decimal("5000")
        assert ring.last_purchase_date == date(2025, 7, 5)
        assert supplier.current_balance == Decimal("20600")

        assert accounts(SystemAccount.PURCHASES).current_balance == Decimal("20000")
        assert accounts(SystemAccount.GST_INPUT).current_balance == Decimal("600")
        assert accounts(SystemAccount.SUNDRY_CREDITORS).current_balance == Decimal("20600")
        assert LedgerService(db).verify_balances(org.id) == []

    def test_full_receipt_closes_order(self, db, org, order):
        receive(db, org, order, "4")
        receive(db, org, order, "6")
        db.commit()
        assert order.status == "received"

        with pytest.raises(ValidationError):
            receive(db, org, order, "1")

    def test_cannot_receive_beyond_outstanding(self, db, org, order):
        receive(db, org, order, "4")
        with pytest.raises(ValidationError, match="outstanding"):
            receive(db, org, order, "7")

    def test_partial_order_cannot_be_cancelled(self, db, org, order):
        receive(db, org, order, "1")
        with pytest.raises(ValidationError, match="pending"):
            PurchaseService(db).cancel_order(order.id, org.id)

    def test_foreign_order_line_rejected(self, db, org, order):
        with pytest.raises(ValidationError, match="does not belong"):
            PurchaseService(db).receive(PurchaseReceiptCreate(
                purchase_order_id=order.id,
                items=[PurchaseReceiptItemCreate(purchase_order_item_id=98765, quantity=Decimal("1"))],
            ), org.id)
