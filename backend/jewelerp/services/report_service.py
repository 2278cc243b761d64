"""
Report Service - Trial Balance, Profit & Loss, General Ledger
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from jewelerp.models import (
    LedgerAccount, LedgerEntry, LedgerEntryDetail, EntryStatus, AccountType,
    Sale, SaleItem
)
from jewelerp.services.utils import ZERO, money, to_decimal


class ReportService:
    """Financial reports over posted ledger entries"""

    def __init__(self, db: Session):
        self.db = db

    def _posted_totals(self, organization_id: int, start_date: date = None,
                       end_date: date = None) -> Dict[int, Tuple[Decimal, Decimal]]:
        """Debit and credit totals per account in one grouped query"""
        query = self.db.query(
            LedgerEntryDetail.account_id,
            func.sum(LedgerEntryDetail.debit_amount).label("total_debit"),
            func.sum(LedgerEntryDetail.credit_amount).label("total_credit")
        ).join(
            LedgerEntry, LedgerEntryDetail.entry_id == LedgerEntry.id
        ).filter(
            LedgerEntry.organization_id == organization_id,
            LedgerEntry.status == EntryStatus.POSTED.value
        )

        if start_date:
            query = query.filter(LedgerEntry.entry_date >= start_date)
        if end_date:
            query = query.filter(LedgerEntry.entry_date <= end_date)

        rows = query.group_by(LedgerEntryDetail.account_id).all()
        return {
            row.account_id: (to_decimal(row.total_debit), to_decimal(row.total_credit))
            for row in rows
        }

    def trial_balance(self, organization_id: int, as_of_date: date = None) -> List[Dict]:
        """Every account's debit and credit totals up to as_of_date.

        Inactive accounts are listed only when they carry movements, so the
        two columns always agree.
        """
        totals = self._posted_totals(organization_id, end_date=as_of_date)
        accounts = self.db.query(LedgerAccount).filter(
            LedgerAccount.organization_id == organization_id
        ).order_by(LedgerAccount.account_code).all()

        result = []
        for account in accounts:
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            if not account.is_active and account.id not in totals:
                continue
            result.append({
                "account": account,
                "debit_total": debit,
                "credit_total": credit,
                "balance": debit - credit,
            })
        return result

    @staticmethod
    def trial_balance_totals(rows: List[Dict]) -> Dict:
        total_debit = sum((row["debit_total"] for row in rows), ZERO)
        total_credit = sum((row["credit_total"] for row in rows), ZERO)
        return {
            "total_debit": total_debit,
            "total_credit": total_credit,
            "difference": total_debit - total_credit,
        }

    def profit_and_loss(self, organization_id: int, from_date: date = None, to_date: date = None) -> Dict:
        """Income and expense movements inside the window (both ends inclusive)"""
        totals = self._posted_totals(organization_id, start_date=from_date, end_date=to_date)
        accounts = self.db.query(LedgerAccount).filter(
            LedgerAccount.organization_id == organization_id,
            LedgerAccount.account_type.in_([AccountType.INCOME.value, AccountType.EXPENSE.value])
        ).order_by(LedgerAccount.account_code).all()

        income_accounts = []
        expense_accounts = []
        for account in accounts:
            if account.id not in totals:
                continue
            debit, credit = totals[account.id]
            movement = {
                "account_id": account.id,
                "account_code": account.account_code,
                "account_name": account.account_name,
                "amount": account.signed_amount(debit, credit),
            }
            if account.account_type == AccountType.INCOME.value:
                income_accounts.append(movement)
            else:
                expense_accounts.append(movement)

        revenue = sum((row["amount"] for row in income_accounts), ZERO)
        cost = sum((row["amount"] for row in expense_accounts), ZERO)

        return {
            "from_date": from_date,
            "to_date": to_date,
            "revenue": revenue,
            "cost": cost,
            "profit": revenue - cost,
            "income_accounts": income_accounts,
            "expense_accounts": expense_accounts,
        }

    def general_ledger(self, organization_id: int, account_id: int = None,
                       start_date: date = None, end_date: date = None) -> List[Dict]:
        """Posted lines in date order with a running balance"""
        query = self.db.query(LedgerEntryDetail).options(
            joinedload(LedgerEntryDetail.entry),
            joinedload(LedgerEntryDetail.account)
        ).join(
            LedgerEntry, LedgerEntryDetail.entry_id == LedgerEntry.id
        ).filter(
            LedgerEntry.organization_id == organization_id,
            LedgerEntry.status == EntryStatus.POSTED.value
        )

        if account_id:
            query = query.filter(LedgerEntryDetail.account_id == account_id)
        if start_date:
            query = query.filter(LedgerEntry.entry_date >= start_date)
        if end_date:
            query = query.filter(LedgerEntry.entry_date <= end_date)

        details = query.order_by(LedgerEntry.entry_date, LedgerEntry.id, LedgerEntryDetail.id).all()

        result = []
        running_balance = ZERO
        for detail in details:
            debit = to_decimal(detail.debit_amount)
            credit = to_decimal(detail.credit_amount)
            # A single account runs in its own normal direction
            if account_id:
                running_balance += detail.account.signed_amount(debit, credit)
            else:
                running_balance += debit - credit
            result.append({
                "entry_id": detail.entry_id,
                "entry_number": detail.entry.entry_number,
                "entry_date": detail.entry.entry_date,
                "narration": detail.narration,
                "account_id": detail.account_id,
                "account_name": detail.account_name,
                "debit": debit,
                "credit": credit,
                "balance": running_balance,
            })
        return result

    def item_profit_loss(self, organization_id: int, from_date: date = None,
                         to_date: date = None) -> List[Dict]:
        """Item-wise margin from sale lines and their purchase price snapshot"""
        query = self.db.query(SaleItem).join(Sale, SaleItem.sale_id == Sale.id).filter(
            Sale.organization_id == organization_id
        )
        if from_date:
            query = query.filter(Sale.sale_date >= from_date)
        if to_date:
            query = query.filter(Sale.sale_date <= to_date)

        rows: Dict[int, Dict] = {}
        for line in query.all():
            row = rows.setdefault(line.item_id, {
                "item_id": line.item_id,
                "item_name": line.item_name or "",
                "quantity_sold": Decimal("0"),
                "revenue": ZERO,
                "cost": ZERO,
            })
            quantity = to_decimal(line.quantity)
            row["quantity_sold"] += quantity
            row["revenue"] += to_decimal(line.taxable_amount)
            row["cost"] += money(quantity * to_decimal(line.purchase_price))

        result = []
        for row in sorted(rows.values(), key=lambda r: r["item_name"]):
            row["profit"] = row["revenue"] - row["cost"]
            row["margin_percent"] = (
                money(row["profit"] * 100 / row["revenue"]) if row["revenue"] else None
            )
            result.append(row)
        return result
