"""
Voucher Service - Receipts, Payments, Contra, Journal and Advance Payments
"""
import logging
from typing import Optional, List, Tuple
from datetime import date
from sqlalchemy.orm import Session
from jewelerp.core.exceptions import ValidationError
from jewelerp.models import Voucher, VoucherType, AdvancePayment, Customer, Supplier, PurchaseOrder, LedgerAccount
from jewelerp.schemas import VoucherCreate, AdvancePaymentCreate
from jewelerp.services.ledger_service import LedgerAccountService, LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.utils import money, to_decimal, next_document_number

logger = logging.getLogger(__name__)

VOUCHER_PREFIXES = {
    VoucherType.RECEIPT.value: "RV",
    VoucherType.PAYMENT.value: "PV",
    VoucherType.CONTRA.value: "CV",
    VoucherType.JOURNAL.value: "JV",
}

# Account groups a contra voucher may move money between
CASH_BANK_GROUPS = ("Cash-in-hand", "Bank Accounts")


class VoucherService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, voucher_id: int, organization_id: int) -> Optional[Voucher]:
        return self.db.query(Voucher).filter(
            Voucher.id == voucher_id,
            Voucher.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, voucher_type: str = None,
                            start_date: date = None, end_date: date = None) -> List[Voucher]:
        query = self.db.query(Voucher).filter(Voucher.organization_id == organization_id)
        if voucher_type:
            query = query.filter(Voucher.voucher_type == voucher_type)
        if start_date:
            query = query.filter(Voucher.voucher_date >= start_date)
        if end_date:
            query = query.filter(Voucher.voucher_date <= end_date)
        return query.order_by(Voucher.voucher_date.desc(), Voucher.id.desc()).all()

    def get_next_number(self, organization_id: int, voucher_type: str) -> str:
        return next_document_number(
            self.db, Voucher, "voucher_number", organization_id, VOUCHER_PREFIXES[voucher_type]
        )

    def create(self, voucher_data: VoucherCreate, organization_id: int) -> Voucher:
        voucher_type = voucher_data.voucher_type.value
        amount = money(voucher_data.amount)
        if amount != voucher_data.amount:
            raise ValidationError("Amount has more than two decimal places", field="amount")

        party_type, party = self._resolve_party(voucher_data, organization_id)
        debit_account, credit_account = self._resolve_accounts(voucher_data, organization_id, party_type)

        voucher = Voucher(
            organization_id=organization_id,
            voucher_number=self.get_next_number(organization_id, voucher_type),
            voucher_type=voucher_type,
            party_type=party_type,
            party_id=party.id if party else None,
            party_name=voucher_data.party_name or (party.name if party else None),
            amount=amount,
            payment_mode=voucher_data.payment_mode.value,
            debit_account_id=debit_account.id,
            credit_account_id=credit_account.id,
            narration=voucher_data.narration,
            reference_number=voucher_data.reference_number,
            voucher_date=voucher_data.voucher_date or date.today(),
        )
        self.db.add(voucher)
        self.db.flush()

        # The party balance follows its control account: debtors rise on payments, creditors on receipts
        if party is not None:
            receipt = voucher_type == VoucherType.RECEIPT.value
            if party_type == "customer":
                change = -amount if receipt else amount
            else:
                change = amount if receipt else -amount
            party.current_balance = to_decimal(party.current_balance) + change

        voucher.ledger_entry_id = LedgerService(self.db).post_entry(
            organization_id,
            voucher.narration or f"{voucher_type.title()} voucher {voucher.voucher_number}",
            [
                {"account_id": debit_account.id, "debit": amount},
                {"account_id": credit_account.id, "credit": amount},
            ],
            entry_date=voucher.voucher_date,
            reference_type="voucher",
            reference_id=voucher.id,
            reference_number=voucher.voucher_number,
        )
        self.db.flush()

        logger.info(f"Created {voucher_type} voucher {voucher.voucher_number} for {amount}")
        return voucher

    def _resolve_party(self, voucher_data: VoucherCreate, organization_id: int):
        voucher_type = voucher_data.voucher_type.value
        if voucher_data.party_id is None:
            return None, None
        if voucher_type in (VoucherType.CONTRA.value, VoucherType.JOURNAL.value):
            raise ValidationError(f"{voucher_type.title()} vouchers do not take a party", field="party_id")

        party_type = voucher_data.party_type
        if not party_type:
            party_type = "customer" if voucher_type == VoucherType.RECEIPT.value else "supplier"

        model = Customer if party_type == "customer" else Supplier
        party = self.db.query(model).filter(
            model.id == voucher_data.party_id,
            model.organization_id == organization_id
        ).first()
        if not party:
            raise ValidationError(f"{party_type.title()} not found", field="party_id")
        return party_type, party

    def _resolve_accounts(self, voucher_data: VoucherCreate, organization_id: int,
                          party_type: Optional[str]) -> Tuple[LedgerAccount, LedgerAccount]:
        accounts = LedgerAccountService(self.db)
        voucher_type = voucher_data.voucher_type.value
        party_codes = {"customer": SystemAccount.SUNDRY_DEBTORS, "supplier": SystemAccount.SUNDRY_CREDITORS}

        if voucher_type == VoucherType.RECEIPT.value:
            debit = accounts.get_settlement_account(organization_id, voucher_data.payment_mode)
            if party_type:
                credit = accounts.get_system_account(organization_id, party_codes[party_type])
            elif voucher_data.credit_account_id:
                credit = self._explicit_account(accounts, voucher_data.credit_account_id, organization_id)
            else:
                credit = accounts.get_system_account(organization_id, SystemAccount.OTHER_INCOME)
            return debit, credit

        if voucher_type == VoucherType.PAYMENT.value:
            credit = accounts.get_settlement_account(organization_id, voucher_data.payment_mode)
            if party_type:
                debit = accounts.get_system_account(organization_id, party_codes[party_type])
            elif voucher_data.debit_account_id:
                debit = self._explicit_account(accounts, voucher_data.debit_account_id, organization_id)
            else:
                debit = accounts.get_system_account(organization_id, SystemAccount.INDIRECT_EXPENSES)
            return debit, credit

        if not voucher_data.debit_account_id or not voucher_data.credit_account_id:
            raise ValidationError(f"{voucher_type.title()} vouchers need a debit and a credit account")
        if voucher_data.debit_account_id == voucher_data.credit_account_id:
            raise ValidationError("Debit and credit accounts must differ")

        debit = self._explicit_account(accounts, voucher_data.debit_account_id, organization_id)
        credit = self._explicit_account(accounts, voucher_data.credit_account_id, organization_id)
        if voucher_type == VoucherType.CONTRA.value:
            for account in (debit, credit):
                if account.account_group not in CASH_BANK_GROUPS:
                    raise ValidationError(
                        f"Contra vouchers move money between cash and bank accounts; "
                        f"{account.account_name} is neither"
                    )
        return debit, credit

    @staticmethod
    def _explicit_account(accounts: LedgerAccountService, account_id: int, organization_id: int) -> LedgerAccount:
        account = accounts.get_by_id(account_id, organization_id)
        if not account or not account.is_active:
            raise ValidationError(f"Ledger account {account_id} not found")
        return account


class AdvancePaymentService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, payment_id: int, organization_id: int) -> Optional[AdvancePayment]:
        return self.db.query(AdvancePayment).filter(
            AdvancePayment.id == payment_id,
            AdvancePayment.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, payment_type: str = None,
                            status: str = None) -> List[AdvancePayment]:
        query = self.db.query(AdvancePayment).filter(AdvancePayment.organization_id == organization_id)
        if payment_type:
            query = query.filter(AdvancePayment.payment_type == payment_type)
        if status:
            query = query.filter(AdvancePayment.status == status)
        return query.order_by(AdvancePayment.payment_date.desc(), AdvancePayment.id.desc()).all()

    def create(self, payment_data: AdvancePaymentCreate, organization_id: int) -> AdvancePayment:
        payment_type = payment_data.payment_type.value
        party_type = payment_type.replace("_advance", "")
        amount = money(payment_data.advance_amount)
        if amount != payment_data.advance_amount:
            raise ValidationError("Amount has more than two decimal places", field="advance_amount")

        party_name = payment_data.party_name
        if payment_data.party_id is not None and party_type in ("customer", "supplier"):
            model = Customer if party_type == "customer" else Supplier
            party = self.db.query(model).filter(
                model.id == payment_data.party_id,
                model.organization_id == organization_id
            ).first()
            if not party:
                raise ValidationError(f"{party_type.title()} not found", field="party_id")
            party_name = party_name or party.name
        if not party_name:
            raise ValidationError("Party name is required", field="party_name")

        if payment_data.purchase_order_id:
            order = self.db.query(PurchaseOrder.id).filter(
                PurchaseOrder.id == payment_data.purchase_order_id,
                PurchaseOrder.organization_id == organization_id
            ).first()
            if not order:
                raise ValidationError("Purchase order not found", field="purchase_order_id")

        accounts = LedgerAccountService(self.db)
        settlement = accounts.get_settlement_account(organization_id, payment_data.payment_mode)
        if party_type == "customer":
            advance_account = accounts.get_system_account(organization_id, SystemAccount.CUSTOMER_ADVANCES)
            lines = [
                {"account_id": settlement.id, "debit": amount},
                {"account_id": advance_account.id, "credit": amount},
            ]
        else:
            code = SystemAccount.SUPPLIER_ADVANCES if party_type == "supplier" else SystemAccount.STAFF_ADVANCES
            advance_account = accounts.get_system_account(organization_id, code)
            lines = [
                {"account_id": advance_account.id, "debit": amount},
                {"account_id": settlement.id, "credit": amount},
            ]

        payment = AdvancePayment(
            organization_id=organization_id,
            payment_number=next_document_number(
                self.db, AdvancePayment, "payment_number", organization_id, "ADV"
            ),
            payment_type=payment_type,
            party_type=party_type,
            party_id=payment_data.party_id,
            party_name=party_name,
            purchase_order_id=payment_data.purchase_order_id,
            advance_amount=amount,
            utilized_amount=0,
            balance_amount=amount,
            payment_mode=payment_data.payment_mode.value,
            reference_number=payment_data.reference_number,
            payment_date=payment_data.payment_date or date.today(),
            purpose=payment_data.purpose,
            notes=payment_data.notes,
            status="active",
        )
        self.db.add(payment)
        self.db.flush()

        payment.ledger_entry_id = LedgerService(self.db).post_entry(
            organization_id,
            f"{payment_type.replace('_', ' ').title()} {payment.payment_number}: {party_name}",
            lines,
            entry_date=payment.payment_date,
            reference_type="advance_payment",
            reference_id=payment.id,
            reference_number=payment.payment_number,
        )
        self.db.flush()

        logger.info(f"Recorded {payment_type} {payment.payment_number} of {amount}")
        return payment
