from decimal import Decimal

import pytest

from jewelerp.core.exceptions import ValidationError
from jewelerp.schemas import VoucherCreate, AdvancePaymentCreate
from jewelerp.services.ledger_service import LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.voucher_service import VoucherService, AdvancePaymentService


class TestVouchers:
    def test_receipt_from_customer_settles_udhari(self, db, org, customer, accounts):
        customer.current_balance = Decimal("5000")
        db.commit()

        voucher = VoucherService(db).create(VoucherCreate(
            voucher_type="receipt", amount=Decimal("2000"), party_id=customer.id
        ), org.id)
        db.commit()

        assert voucher.voucher_number == "RV-00001"
        assert voucher.party_type == "customer"
        assert voucher.party_name == customer.name
        assert customer.current_balance == Decimal("3000")
        assert accounts(SystemAccount.CASH).current_balance == Decimal("2000")
        assert accounts(SystemAccount.SUNDRY_DEBTORS).current_balance == Decimal("-2000")

    def test_payment_to_supplier(self, db, org, supplier, accounts):
        supplier.current_balance = Decimal("8000")
        db.commit()

        voucher = VoucherService(db).create(VoucherCreate(
            voucher_type="payment", amount=Decimal("8000"), party_id=supplier.id, payment_mode="cheque"
        ), org.id)
        db.commit()

        assert voucher.voucher_number == "PV-00001"
        assert supplier.current_balance == 0
        assert accounts(SystemAccount.BANK).current_balance == Decimal("-8000")
        assert accounts(SystemAccount.SUNDRY_CREDITORS).current_balance == Decimal("-8000")

    def test_receipt_from_supplier_raises_payable(self, db, org, supplier, accounts):
        VoucherService(db).create(VoucherCreate(
            voucher_type="receipt", amount=Decimal("1000"), party_type="supplier", party_id=supplier.id
        ), org.id)
        db.commit()

        assert accounts(SystemAccount.SUNDRY_CREDITORS).current_balance == Decimal("1000")
        assert supplier.current_balance == Decimal("1000")

    def test_refund_to_customer_raises_balance(self, db, org, customer):
        VoucherService(db).create(VoucherCreate(
            voucher_type="payment", amount=Decimal("500"), party_type="customer", party_id=customer.id
        ), org.id)
        db.commit()
        assert customer.current_balance == Decimal("500")

    def test_payment_without_party_goes_to_expenses(self, db, org, accounts):
        VoucherService(db).create(VoucherCreate(
            voucher_type="payment", amount=Decimal("1200"), party_name="Polishing karigar"
        ), org.id)
        db.commit()
        assert accounts(SystemAccount.INDIRECT_EXPENSES).current_balance == Decimal("1200")

    def test_contra_moves_cash_to_bank(self, db, org, accounts):
        bank = accounts(SystemAccount.BANK)
        cash = accounts(SystemAccount.CASH)
        voucher = VoucherService(db).create(VoucherCreate(
            voucher_type="contra", amount=Decimal("10000"),
            debit_account_id=bank.id, credit_account_id=cash.id
        ), org.id)
        db.commit()

        assert voucher.voucher_number == "CV-00001"
        assert bank.current_balance == Decimal("10000")
        assert cash.current_balance == Decimal("-10000")

    def test_contra_rejects_non_cash_accounts(self, db, org, accounts):
        with pytest.raises(ValidationError, match="cash and bank"):
            VoucherService(db).create(VoucherCreate(
                voucher_type="contra", amount=Decimal("1"),
                debit_account_id=accounts(SystemAccount.SALES).id,
                credit_account_id=accounts(SystemAccount.CASH).id
            ), org.id)

    def test_journal_needs_two_distinct_accounts(self, db, org, accounts):
        cash = accounts(SystemAccount.CASH)
        with pytest.raises(ValidationError, match="must differ"):
            VoucherService(db).create(VoucherCreate(
                voucher_type="journal", amount=Decimal("1"),
                debit_account_id=cash.id, credit_account_id=cash.id
            ), org.id)
        with pytest.raises(ValidationError):
            VoucherService(db).create(VoucherCreate(
                voucher_type="journal", amount=Decimal("1"), debit_account_id=cash.id
            ), org.id)

    def test_journal_posts_between_named_accounts(self, db, org, accounts):
        VoucherService(db).create(VoucherCreate(
            voucher_type="journal", amount=Decimal("750.25"),
            debit_account_id=accounts(SystemAccount.INDIRECT_EXPENSES).id,
            credit_account_id=accounts(SystemAccount.CAPITAL).id
        ), org.id)
        db.commit()
        assert accounts(SystemAccount.CAPITAL).current_balance == Decimal("750.25")
        assert LedgerService(db).verify_balances(org.id) == []

    def test_sub_paise_amount_rejected(self, db, org):
        with pytest.raises(ValidationError, match="decimal places"):
            VoucherService(db).create(VoucherCreate(voucher_type="payment", amount=Decimal("1.005")), org.id)

    def test_credit_mode_is_not_a_settlement(self, db, org, customer):
        with pytest.raises(ValidationError):
            VoucherService(db).create(VoucherCreate(
                voucher_type="receipt", amount=Decimal("10"), party_id=customer.id, payment_mode="credit"
            ), org.id)


class TestAdvancePayments:
    def test_supplier_advance(self, db, org, supplier, accounts):
        payment = AdvancePaymentService(db).create(AdvancePaymentCreate(
            payment_type="supplier_advance", party_id=supplier.id, advance_amount=Decimal("2000")
        ), org.id)
        db.commit()

        assert payment.payment_number == "ADV-00001"
        assert payment.party_type == "supplier"
        assert payment.party_name == supplier.name
        assert payment.balance_amount == Decimal("2000")
        assert accounts(SystemAccount.SUPPLIER_ADVANCES).current_balance == Decimal("2000")
        assert accounts(SystemAccount.CASH).current_balance == Decimal("-2000")

    def test_customer_advance_by_upi(self, db, org, customer, accounts):
        AdvancePaymentService(db).create(AdvancePaymentCreate(
            payment_type="customer_advance", party_id=customer.id,
            advance_amount=Decimal("1000"), payment_mode="upi"
        ), org.id)
        db.commit()

        assert accounts(SystemAccount.BANK).current_balance == Decimal("1000")
        assert accounts(SystemAccount.CUSTOMER_ADVANCES).current_balance == Decimal("1000")

    def test_employee_advance_needs_a_name(self, db, org, accounts):
        with pytest.raises(ValidationError, match="Party name"):
            AdvancePaymentService(db).create(AdvancePaymentCreate(
                payment_type="employee_advance", advance_amount=Decimal("500")
            ), org.id)

        AdvancePaymentService(db).create(AdvancePaymentCreate(
            payment_type="employee_advance", party_name="Ravi (karigar)", advance_amount=Decimal("500")
        ), org.id)
        db.commit()
        assert accounts(SystemAccount.STAFF_ADVANCES).current_balance == Decimal("500")
