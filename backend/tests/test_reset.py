from decimal import Decimal

import pytest

from jewelerp.core.exceptions import ResetError
from jewelerp.models import (
    Customer, Item, JobCard, JobCardItem, LedgerAccount, LedgerEntry, LedgerEntryDetail,
    PurchaseOrder, PurchaseReceiptItem, Sale, StockMovement, Supplier, Voucher
)
from jewelerp.schemas import (
    AdvancePaymentCreate, OrganizationCreate, PurchaseOrderCreate, PurchaseOrderItemCreate,
    PurchaseReceiptCreate, PurchaseReceiptItemCreate, SaleCreate, SaleItemCreate, VoucherCreate
)
from jewelerp.services import reset_service
from jewelerp.services.organization_service import DEFAULT_ACCOUNTS, OrganizationService, SystemAccount
from jewelerp.services.purchase_service import PurchaseService
from jewelerp.services.reset_service import ResetService, ResetStep, TRANSACTION_STEPS, is_missing_relation
from jewelerp.services.sales_service import SaleService
from jewelerp.services.voucher_service import AdvancePaymentService, VoucherService


@pytest.fixture
def busy_org(db, org, ring, customer, supplier):
    """An organization with every kind of transaction on file"""
    SaleService(db).create(SaleCreate(
        customer_id=customer.id, amount_paid=Decimal("1000"),
        items=[SaleItemCreate(item_id=ring.id, quantity=Decimal("1"))],
    ), org.id)

    purchases = PurchaseService(db)
    order = purchases.create_order(PurchaseOrderCreate(
        supplier_id=supplier.id,
        items=[PurchaseOrderItemCreate(item_id=ring.id, quantity=Decimal("3"), unit_price=Decimal("7000"))],
    ), org.id)
    purchases.receive(PurchaseReceiptCreate(
        purchase_order_id=order.id,
        items=[PurchaseReceiptItemCreate(purchase_order_item_id=order.items[0].id, quantity=Decimal("2"))],
    ), org.id)

    VoucherService(db).create(VoucherCreate(
        voucher_type="receipt", amount=Decimal("500"), party_id=customer.id
    ), org.id)
    AdvancePaymentService(db).create(AdvancePaymentCreate(
        payment_type="supplier_advance", party_id=supplier.id,
        purchase_order_id=order.id, advance_amount=Decimal("2500")
    ), org.id)

    job = JobCard(organization_id=org.id, job_number="JOB-00001", customer_id=customer.id, description="Resize")
    db.add(job)
    db.flush()
    db.add(JobCardItem(job_card_id=job.id, item_id=ring.id, description="Sizing", amount=Decimal("300")))
    db.commit()
    return org


def count(db, model, org_id):
    return db.query(model).filter(model.organization_id == org_id).count()


class TestResetTransactionalData:
    def test_clears_transactions_and_keeps_masters(self, db, busy_org):
        result = ResetService(db).reset_transactional_data(busy_org.id)

        assert result["cleared_tables"] == len(TRANSACTION_STEPS)
        assert result["skipped_tables"] == []
        assert result["deleted_rows"]["sales"] == 1
        assert result["deleted_rows"]["purchase_receipt_items"] == 1
        assert result["deleted_rows"]["job_card_items"] == 1

        for model in (Sale, PurchaseOrder, Voucher, StockMovement, LedgerEntry, JobCard):
            assert count(db, model, busy_org.id) == 0
        assert db.query(LedgerEntryDetail).count() == 0

        assert count(db, Item, busy_org.id) == 1
        assert count(db, Customer, busy_org.id) == 1
        assert count(db, Supplier, busy_org.id) == 1
        assert count(db, LedgerAccount, busy_org.id) == len(DEFAULT_ACCOUNTS)

    def test_counters_are_zeroed(self, db, busy_org):
        ResetService(db).reset_transactional_data(busy_org.id)

        assert all(item.current_stock == 0 for item in db.query(Item).all())
        assert all(c.current_balance == 0 for c in db.query(Customer).all())
        assert all(s.current_balance == 0 for s in db.query(Supplier).all())
        assert all(a.current_balance == 0 for a in db.query(LedgerAccount).all())

    def test_second_run_deletes_nothing(self, db, busy_org):
        service = ResetService(db)
        service.reset_transactional_data(busy_org.id)
        second = service.reset_transactional_data(busy_org.id)

        assert second["cleared_tables"] == len(TRANSACTION_STEPS)
        assert set(second["deleted_rows"].values()) == {0}

    def test_other_organizations_are_untouched(self, db, busy_org):
        from jewelerp.services.ledger_service import LedgerService

        other = OrganizationService(db).create(OrganizationCreate(name="Neighbour Jewellers"))
        db.flush()
        other_cash = db.query(LedgerAccount).filter(
            LedgerAccount.organization_id == other.id, LedgerAccount.account_code == SystemAccount.CASH
        ).one()
        other_capital = db.query(LedgerAccount).filter(
            LedgerAccount.organization_id == other.id, LedgerAccount.account_code == SystemAccount.CAPITAL
        ).one()
        LedgerService(db).post_entry(other.id, "Capital", [
            {"account_id": other_cash.id, "debit": Decimal("100")},
            {"account_id": other_capital.id, "credit": Decimal("100")},
        ])
        db.commit()

        ResetService(db).reset_transactional_data(busy_org.id)

        assert count(db, LedgerEntry, other.id) == 1
        assert other_cash.current_balance == Decimal("100")

    def test_receipt_items_go_before_their_order(self, db, busy_org):
        order_ids = [name for name, *_ in TRANSACTION_STEPS]
        assert order_ids.index("purchase_receipt_items") < order_ids.index("purchase_receipts")
        assert order_ids.index("purchase_receipts") < order_ids.index("purchase_orders")
        assert order_ids.index("purchase_order_items") < order_ids.index("purchase_orders")
        assert order_ids.index("ledger_entry_details") < order_ids.index("ledger_entries")

        # Foreign keys are enforced on the test database, so a bad order would raise here
        ResetService(db).reset_transactional_data(busy_org.id)
        assert db.query(PurchaseReceiptItem).count() == 0

    def test_missing_table_is_skipped(self, db, busy_org, engine):
        db.commit()
        JobCardItem.__table__.drop(engine)

        result = ResetService(db).reset_transactional_data(busy_org.id)

        assert result["skipped_tables"] == ["job_card_items"]
        assert result["cleared_tables"] == len(TRANSACTION_STEPS) - 1
        assert count(db, JobCard, busy_org.id) == 0

    def test_failure_stops_and_reports_progress(self, db, busy_org, monkeypatch):
        # Parents ahead of their children violate the foreign keys
        monkeypatch.setattr(reset_service, "TRANSACTION_STEPS", [
            ResetStep("sale_items", "Sale Items", "sales", "sale_id"),
            ResetStep("purchase_orders", "Purchase Orders"),
            ResetStep("sales", "Sales"),
        ])

        with pytest.raises(ResetError) as excinfo:
            ResetService(db).reset_transactional_data(busy_org.id)

        assert excinfo.value.step == "purchase_orders"
        assert excinfo.value.completed_steps == ["sale_items"]
        # Earlier steps stay committed, later ones never ran
        assert count(db, PurchaseOrder, busy_org.id) == 1
        assert count(db, Sale, busy_org.id) == 1

    def test_missing_parent_fails_instead_of_skipping_children(self, db, org, engine):
        db.commit()
        JobCard.__table__.drop(engine)

        with pytest.raises(ResetError) as excinfo:
            ResetService(db).reset_transactional_data(org.id)

        assert excinfo.value.step == "job_card_items"
        assert "job_card_items" not in excinfo.value.completed_steps


class TestFactoryReset:
    def test_masters_removed_and_chart_reseeded(self, db, busy_org):
        result = ResetService(db).factory_reset(busy_org.id)

        assert result["deleted_rows"]["items"] == 1
        assert result["deleted_rows"]["customers"] == 1
        assert count(db, Item, busy_org.id) == 0
        assert count(db, Customer, busy_org.id) == 0
        assert count(db, Supplier, busy_org.id) == 0

        codes = {a.account_code for a in db.query(LedgerAccount).filter(
            LedgerAccount.organization_id == busy_org.id
        ).all()}
        assert codes == {code for code, *_ in DEFAULT_ACCOUNTS}
        assert all(a.current_balance == 0 for a in db.query(LedgerAccount).all())

    def test_custom_accounts_are_dropped(self, db, org):
        from jewelerp.schemas import LedgerAccountCreate
        from jewelerp.services.ledger_service import LedgerAccountService

        LedgerAccountService(db).create(LedgerAccountCreate(
            account_name="Gold Loan", account_type="liability", opening_balance=Decimal("1000")
        ), org.id)
        db.commit()

        ResetService(db).factory_reset(org.id)
        assert count(db, LedgerAccount, org.id) == len(DEFAULT_ACCOUNTS)


class TestMissingRelation:
    class _PgError(Exception):
        pgcode = "42P01"

    class _Wrapped(Exception):
        def __init__(self, orig):
            super().__init__(str(orig))
            self.orig = orig

    def test_postgres_sqlstate(self):
        assert is_missing_relation(self._Wrapped(self._PgError("boom")))

    def test_messages(self):
        assert is_missing_relation(self._Wrapped(Exception("no such table: job_card_items")))
        assert is_missing_relation(self._Wrapped(Exception('relation "job_card_items" does not exist')))
        assert not is_missing_relation(self._Wrapped(Exception("FOREIGN KEY constraint failed")))

    def test_only_the_named_table_counts(self):
        parent_gone = self._Wrapped(Exception("no such table: job_cards"))
        assert is_missing_relation(parent_gone, "job_cards")
        assert not is_missing_relation(parent_gone, "job_card_items")
        pg_error = self._PgError('relation "sales" does not exist')
        assert not is_missing_relation(self._Wrapped(pg_error), "sale_items")
