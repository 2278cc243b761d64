from decimal import Decimal

import pytest

from jewelerp.core.exceptions import ValidationError
from jewelerp.models import Sale, StockMovement, LedgerEntry
from jewelerp.schemas import SaleCreate, SaleItemCreate
from jewelerp.services.ledger_service import LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.sales_service import SaleService, split_gst


def sale_of(item, quantity="1", **kwargs):
    line = {k: kwargs.pop(k) for k in ("discount_percent", "gst_rate", "unit_price") if k in kwargs}
    return SaleCreate(items=[SaleItemCreate(item_id=item.id, quantity=Decimal(quantity), **line)], **kwargs)


def test_split_gst_halves_round_to_the_total():
    parts = split_gst(Decimal("0.03"), inter_state=False)
    assert parts["cgst"] + parts["sgst"] == Decimal("0.03")
    assert parts["igst"] == 0
    assert split_gst(Decimal("300"), inter_state=True)["igst"] == Decimal("300")


class TestSaleTotals:
    def test_intra_state_cash_sale(self, db, org, ring, accounts):
        sale = SaleService(db).create(sale_of(ring), org.id)
        db.commit()

        assert sale.invoice_number == "INV-00001"
        assert sale.taxable_amount == Decimal("10000")
        assert sale.cgst_amount == Decimal("150")
        assert sale.sgst_amount == Decimal("150")
        assert sale.igst_amount == 0
        assert sale.total_amount == Decimal("10300")
        assert sale.amount_paid == Decimal("10300")
        assert sale.is_paid

        assert accounts(SystemAccount.CASH).current_balance == Decimal("10300")
        assert accounts(SystemAccount.SALES).current_balance == Decimal("10000")
        assert accounts(SystemAccount.GST_OUTPUT).current_balance == Decimal("300")

    def test_inter_state_sale_uses_igst(self, db, org, ring):
        sale = SaleService(db).create(sale_of(ring, customer_state_code="29"), org.id)
        assert sale.igst_amount == Decimal("300")
        assert sale.cgst_amount == 0 and sale.sgst_amount == 0

    def test_customer_state_drives_place_of_supply(self, db, org, ring, customer):
        customer.state_code = "24"
        db.commit()
        sale = SaleService(db).create(sale_of(ring, customer_id=customer.id), org.id)
        assert sale.customer_state_code == "24"
        assert sale.igst_amount == Decimal("300")

    def test_line_discount_rolls_up_to_bill(self, db, org, ring):
        sale = SaleService(db).create(sale_of(ring, discount_percent=Decimal("10")), org.id)
        assert sale.subtotal == Decimal("10000")
        assert sale.discount_amount == Decimal("1000")
        assert sale.taxable_amount == Decimal("9000")
        assert sale.total_amount == Decimal("9270")

    def test_non_gst_bill_has_no_tax(self, db, org, ring, accounts):
        SaleService(db).create(sale_of(ring, is_gst_bill=False), org.id)
        db.commit()
        assert accounts(SystemAccount.GST_OUTPUT).current_balance == 0
        assert accounts(SystemAccount.SALES).current_balance == Decimal("10000")

    def test_upi_sale_settles_to_bank(self, db, org, ring, accounts):
        SaleService(db).create(sale_of(ring, payment_mode="upi"), org.id)
        db.commit()
        assert accounts(SystemAccount.BANK).current_balance == Decimal("10300")
        assert accounts(SystemAccount.CASH).current_balance == 0


class TestSaleEffects:
    def test_stock_is_reduced_with_a_movement(self, db, org, ring):
        sale = SaleService(db).create(sale_of(ring, quantity="2"), org.id)
        db.commit()

        assert ring.current_stock == Decimal("3")
        movement = db.query(StockMovement).filter(StockMovement.reference_type == "sale").one()
        assert movement.quantity_change == Decimal("-2")
        assert movement.reference_id == sale.id

    def test_udhari_sale_raises_customer_balance(self, db, org, ring, customer, accounts):
        sale = SaleService(db).create(
            sale_of(ring, customer_id=customer.id, amount_paid=Decimal("3000")), org.id
        )
        db.commit()

        assert sale.credit_amount == Decimal("7300")
        assert sale.is_credit and not sale.is_paid
        assert customer.current_balance == Decimal("7300")
        assert accounts(SystemAccount.SUNDRY_DEBTORS).current_balance == Decimal("7300")
        assert accounts(SystemAccount.CASH).current_balance == Decimal("3000")

    def test_full_credit_mode_defaults_to_unpaid(self, db, org, ring, customer):
        sale = SaleService(db).create(sale_of(ring, customer_id=customer.id, payment_mode="credit"), org.id)
        assert sale.amount_paid == 0
        assert sale.credit_amount == sale.total_amount

    def test_credit_mode_books_part_payment_as_udhari(self, db, org, ring, customer, accounts):
        sale = SaleService(db).create(sale_of(
            ring, customer_id=customer.id, payment_mode="credit", amount_paid=Decimal("2000")
        ), org.id)
        db.commit()

        assert sale.amount_paid == 0
        assert sale.credit_amount == Decimal("10300")
        assert customer.current_balance == Decimal("10300")
        assert accounts(SystemAccount.SUNDRY_DEBTORS).current_balance == Decimal("10300")
        assert accounts(SystemAccount.CASH).current_balance == 0
        assert LedgerService(db).verify_balances(org.id) == []

    def test_sale_entry_references_invoice(self, db, org, ring):
        sale = SaleService(db).create(sale_of(ring), org.id)
        db.commit()

        entry = db.query(LedgerEntry).filter(LedgerEntry.id == sale.ledger_entry_id).one()
        assert entry.reference_type == "sale"
        assert entry.reference_number == sale.invoice_number
        assert LedgerService(db).verify_balances(org.id) == []


class TestSaleRejections:
    def test_credit_without_customer_rejected(self, db, org, ring):
        with pytest.raises(ValidationError, match="customer is required"):
            SaleService(db).create(sale_of(ring, amount_paid=Decimal("100")), org.id)

    def test_overpayment_rejected(self, db, org, ring):
        with pytest.raises(ValidationError, match="exceeds"):
            SaleService(db).create(sale_of(ring, amount_paid=Decimal("20000")), org.id)

    def test_insufficient_stock_writes_nothing(self, db, org, ring):
        with pytest.raises(ValidationError, match="Insufficient stock"):
            SaleService(db).create(SaleCreate(items=[
                SaleItemCreate(item_id=ring.id, quantity=Decimal("3")),
                SaleItemCreate(item_id=ring.id, quantity=Decimal("3")),
            ]), org.id)
        db.rollback()

        assert db.query(Sale).count() == 0
        assert db.query(LedgerEntry).count() == 0
        assert ring.current_stock == Decimal("5")

    def test_unknown_item_rejected(self, db, org):
        with pytest.raises(ValidationError, match="not found"):
            SaleService(db).create(SaleCreate(items=[SaleItemCreate(item_id=31337, quantity=Decimal("1"))]), org.id)

    def test_unknown_customer_rejected(self, db, org, ring):
        with pytest.raises(ValidationError, match="Customer not found"):
            SaleService(db).create(sale_of(ring, customer_id=31337), org.id)
