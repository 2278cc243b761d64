import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from jewelerp.schemas import SaleCreate, SaleItemCreate
from jewelerp.services.ledger_service import LedgerAccountService, LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.report_service import ReportService
from jewelerp.services.sales_service import SaleService


def row_for(rows, account_id):
    return next(row for row in rows if row["account"].id == account_id)


class TestTrialBalance:
    def test_single_entry_scenario(self, db, org, accounts):
        cash = accounts(SystemAccount.CASH)
        capital = accounts(SystemAccount.CAPITAL)
        LedgerService(db).post_entry(org.id, "Capital", [
            {"account_id": cash.id, "debit": Decimal("1000")},
            {"account_id": capital.id, "credit": Decimal("1000")},
        ])
        db.commit()

        report = ReportService(db)
        rows = report.trial_balance(org.id)
        totals = report.trial_balance_totals(rows)

        assert row_for(rows, cash.id)["debit_total"] == Decimal("1000")
        assert row_for(rows, capital.id)["credit_total"] == Decimal("1000")
        assert totals["total_debit"] == Decimal("1000")
        assert totals["total_credit"] == Decimal("1000")
        assert totals["difference"] == 0

    def test_before_any_entry_is_all_zero(self, db, org, accounts):
        LedgerService(db).post_entry(org.id, "Capital", [
            {"account_id": accounts(SystemAccount.CASH).id, "debit": Decimal("1000")},
            {"account_id": accounts(SystemAccount.CAPITAL).id, "credit": Decimal("1000")},
        ], entry_date=date(2025, 4, 1))
        db.commit()

        rows = ReportService(db).trial_balance(org.id, as_of_date=date(2025, 3, 31))
        assert rows
        assert all(row["debit_total"] == 0 and row["credit_total"] == 0 for row in rows)
        assert ReportService.trial_balance_totals(rows)["total_debit"] == 0

    def test_empty_organization(self, db, org):
        rows = ReportService(db).trial_balance(org.id)
        totals = ReportService.trial_balance_totals(rows)
        assert totals == {"total_debit": 0, "total_credit": 0, "difference": 0}

    def test_drafts_are_excluded(self, db, org, accounts):
        LedgerService(db).create_draft(org.id, "Draft", [
            {"account_id": accounts(SystemAccount.CASH).id, "debit": Decimal("99")},
            {"account_id": accounts(SystemAccount.CAPITAL).id, "credit": Decimal("99")},
        ])
        db.commit()
        totals = ReportService.trial_balance_totals(ReportService(db).trial_balance(org.id))
        assert totals["total_debit"] == 0

    @pytest.mark.parametrize("seed", [3, 11, 99])
    def test_columns_agree_on_every_date(self, db, org, seed):
        rng = random.Random(seed)
        account_ids = [a.id for a in LedgerAccountService(db).get_by_organization(org.id)]
        start = date(2025, 4, 1)
        ledger = LedgerService(db)
        for _ in range(30):
            debit_account, credit_account = rng.sample(account_ids, 2)
            amount = Decimal(rng.randint(1, 10000000)) / 100
            ledger.post_entry(org.id, "Random", [
                {"account_id": debit_account, "debit": amount},
                {"account_id": credit_account, "credit": amount},
            ], entry_date=start + timedelta(days=rng.randint(0, 60)))
        db.commit()

        report = ReportService(db)
        for offset in range(-1, 62, 7):
            totals = report.trial_balance_totals(report.trial_balance(org.id, start + timedelta(days=offset)))
            assert totals["total_debit"] == totals["total_credit"]


class TestProfitAndLoss:
    @pytest.mark.parametrize("seed", [5, 17, 123, 4096])
    def test_profit_is_revenue_minus_cost(self, db, org, seed):
        rng = random.Random(seed)
        service = LedgerAccountService(db)
        income = [a.id for a in service.get_by_organization(org.id, account_type="income")]
        expense = [a.id for a in service.get_by_organization(org.id, account_type="expense")]
        balance_sheet = [
            a.id for a in service.get_by_organization(org.id)
            if a.account_type not in ("income", "expense")
        ]
        ledger = LedgerService(db)
        expected_revenue = Decimal("0")
        expected_cost = Decimal("0")

        for _ in range(40):
            amount = Decimal(rng.randint(1, 5000000)) / 100
            other = rng.choice(balance_sheet)
            if rng.random() < 0.5:
                account = rng.choice(income)
                ledger.post_entry(org.id, "Income", [
                    {"account_id": other, "debit": amount},
                    {"account_id": account, "credit": amount},
                ])
                expected_revenue += amount
            else:
                account = rng.choice(expense)
                ledger.post_entry(org.id, "Expense", [
                    {"account_id": account, "debit": amount},
                    {"account_id": other, "credit": amount},
                ])
                expected_cost += amount
        db.commit()

        result = ReportService(db).profit_and_loss(org.id)
        assert result["revenue"] == expected_revenue
        assert result["cost"] == expected_cost
        assert result["profit"] == result["revenue"] - result["cost"]

    def test_window_is_inclusive(self, db, org, accounts):
        ledger = LedgerService(db)
        for day, amount in ((1, "100"), (15, "200"), (30, "400")):
            ledger.post_entry(org.id, "Sale", [
                {"account_id": accounts(SystemAccount.CASH).id, "debit": Decimal(amount)},
                {"account_id": accounts(SystemAccount.SALES).id, "credit": Decimal(amount)},
            ], entry_date=date(2025, 6, day))
        db.commit()

        result = ReportService(db).profit_and_loss(org.id, date(2025, 6, 1), date(2025, 6, 15))
        assert result["revenue"] == Decimal("300")
        assert result["income_accounts"][0]["account_code"] == SystemAccount.SALES

    def test_sales_return_reduces_revenue(self, db, org, accounts):
        ledger = LedgerService(db)
        sales = accounts(SystemAccount.SALES)
        cash = accounts(SystemAccount.CASH)
        ledger.post_entry(org.id, "Sale", [
            {"account_id": cash.id, "debit": Decimal("1000")},
            {"account_id": sales.id, "credit": Decimal("1000")},
        ])
        ledger.post_entry(org.id, "Return", [
            {"account_id": sales.id, "debit": Decimal("250")},
            {"account_id": cash.id, "credit": Decimal("250")},
        ])
        db.commit()
        assert ReportService(db).profit_and_loss(org.id)["revenue"] == Decimal("750")


class TestGeneralLedger:
    def test_running_balance_for_one_account(self, db, org, accounts):
        cash = accounts(SystemAccount.CASH)
        ledger = LedgerService(db)
        ledger.post_entry(org.id, "Capital", [
            {"account_id": cash.id, "debit": Decimal("1000")},
            {"account_id": accounts(SystemAccount.CAPITAL).id, "credit": Decimal("1000")},
        ], entry_date=date(2025, 5, 1))
        ledger.post_entry(org.id, "Rent", [
            {"account_id": accounts(SystemAccount.INDIRECT_EXPENSES).id, "debit": Decimal("300")},
            {"account_id": cash.id, "credit": Decimal("300")},
        ], entry_date=date(2025, 5, 2))
        db.commit()

        rows = ReportService(db).general_ledger(org.id, account_id=cash.id)
        assert [row["balance"] for row in rows] == [Decimal("1000"), Decimal("700")]


class TestItemProfitLoss:
    def test_margin_from_purchase_price_snapshot(self, db, org, ring):
        SaleService(db).create(SaleCreate(items=[
            SaleItemCreate(item_id=ring.id, quantity=Decimal("2"), gst_rate=Decimal("0")),
        ]), org.id)
        db.commit()

        rows = ReportService(db).item_profit_loss(org.id)
        assert len(rows) == 1
        assert rows[0]["revenue"] == Decimal("20000")
        assert rows[0]["cost"] == Decimal("16000")
        assert rows[0]["profit"] == Decimal("4000")
        assert rows[0]["margin_percent"] == Decimal("20.00")


class TestTrialBalanceExport:
    def test_workbook_lists_accounts_and_totals(self, db, org, accounts):
        from openpyxl import load_workbook
        from jewelerp.services.export_service import trial_balance_workbook

        LedgerService(db).post_entry(org.id, "Capital", [
            {"account_id": accounts(SystemAccount.CASH).id, "debit": Decimal("1250.50")},
            {"account_id": accounts(SystemAccount.CAPITAL).id, "credit": Decimal("1250.50")},
        ])
        db.commit()

        report = ReportService(db)
        rows = report.trial_balance(org.id)
        buffer = trial_balance_workbook(org, rows, report.trial_balance_totals(rows))

        ws = load_workbook(buffer).active
        assert ws.title == "Trial Balance"
        assert ws["A1"].value == org.name

        codes = [ws.cell(row=r, column=1).value for r in range(7, 7 + len(rows))]
        assert codes == [row["account"].account_code for row in rows]
        total_row = 7 + len(rows)
        assert ws.cell(row=total_row, column=2).value == "TOTAL"
        assert Decimal(str(ws.cell(row=total_row, column=4).value)) == Decimal("1250.50")
        assert Decimal(str(ws.cell(row=total_row, column=5).value)) == Decimal("1250.50")
