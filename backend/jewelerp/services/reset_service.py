"""
Reset Service - Organization-scoped data wipes in foreign key order

Each table is cleared in its own transaction. A failed step stops the run
and leaves the earlier steps committed; every step is safe to repeat, so
the caller recovers by running the reset again.
"""
import logging
import re
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy import column, delete, select, table, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from jewelerp.core.exceptions import ResetError
from jewelerp.services.organization_service import OrganizationService

logger = logging.getLogger(__name__)

UNDEFINED_TABLE_SQLSTATE = "42P01"


class ResetStep(NamedTuple):
    table: str
    label: str
    # Line-item tables have no organization_id; they are scoped through their header
    parent_table: Optional[str] = None
    parent_key: Optional[str] = None


# Children before the parents they reference
TRANSACTION_STEPS = [
    ResetStep("purchase_receipt_items", "Receipt Items", "purchase_receipts", "receipt_id"),
    ResetStep("purchase_order_items", "PO Items", "purchase_orders", "purchase_order_id"),
    ResetStep("sale_items", "Sale Items", "sales", "sale_id"),
    ResetStep("job_card_items", "Job Card Items", "job_cards", "job_card_id"),
    ResetStep("ledger_entry_details", "Ledger Details", "ledger_entries", "entry_id"),
    ResetStep("purchase_receipts", "Purchase Receipts"),
    ResetStep("stock_movements", "Stock Movements"),
    ResetStep("item_batches", "Item Batches"),
    ResetStep("inventory_valuations", "Valuations"),
    ResetStep("vouchers", "Vouchers"),
    ResetStep("advance_payments", "Advance Payments"),
    ResetStep("sales", "Sales"),
    ResetStep("purchase_orders", "Purchase Orders"),
    ResetStep("job_cards", "Job Cards"),
    ResetStep("ledger_entries", "Ledger Entries"),
    ResetStep("cash_register", "Cash Register"),
]

MASTER_STEPS = [
    ResetStep("items", "Items"),
    ResetStep("categories", "Categories"),
    ResetStep("customers", "Customers"),
    ResetStep("suppliers", "Suppliers"),
    ResetStep("ledger_accounts", "Ledger Accounts"),
]

# (table, counter column) zeroed once the transactions are gone
COUNTER_RESETS = [
    ("items", "current_stock"),
    ("customers", "current_balance"),
    ("suppliers", "current_balance"),
    ("ledger_accounts", "current_balance"),
]


def is_missing_relation(error: SQLAlchemyError, table_name: Optional[str] = None) -> bool:
    """True when the database reports a table does not exist.

    With `table_name`, only an error naming that table counts; a step whose
    parent table is gone cannot be scoped and must fail instead.
    """
    orig = getattr(error, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    message = str(orig if orig is not None else error).lower()
    if sqlstate != UNDEFINED_TABLE_SQLSTATE:
        if "no such table" not in message and not ("relation" in message and "does not exist" in message):
            return False
    if table_name is None:
        return True
    return re.search(rf"\b{re.escape(table_name.lower())}\b", message) is not None


def build_delete(step: ResetStep, organization_id: int):
    if step.parent_table:
        parent = table(step.parent_table, column("id"), column("organization_id"))
        target = table(step.table, column(step.parent_key))
        owned = select(parent.c.id).where(parent.c.organization_id == organization_id)
        return delete(target).where(target.c[step.parent_key].in_(owned))

    target = table(step.table, column("organization_id"))
    return delete(target).where(target.c.organization_id == organization_id)


class ResetService:
    def __init__(self, db: Session):
        self.db = db

    def reset_transactional_data(self, organization_id: int) -> Dict:
        """Clear every transaction table and zero stock and balance counters"""
        logger.info(f"Starting data reset for organization {organization_id}")
        result = self._new_result()

        self._run_steps(organization_id, TRANSACTION_STEPS, result)
        self._reset_counters(organization_id, result)

        logger.info(
            f"Data reset for organization {organization_id} completed: "
            f"{result['cleared_tables']} tables cleared, {len(result['skipped_tables'])} skipped"
        )
        return self._public(result)

    def factory_reset(self, organization_id: int) -> Dict:
        """Clear transactions and master data, then re-seed the chart of accounts"""
        logger.info(f"Starting factory reset for organization {organization_id}")
        result = self._new_result()

        self._run_steps(organization_id, TRANSACTION_STEPS + MASTER_STEPS, result)

        step = "seed ledger_accounts"
        try:
            OrganizationService(self.db).create_default_chart_of_accounts(organization_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Factory reset failed at {step}: {e}")
            raise ResetError(str(e), step, result["completed"]) from e

        logger.info(f"Factory reset for organization {organization_id} completed")
        return self._public(result)

    @staticmethod
    def _new_result() -> Dict:
        return {"cleared_tables": 0, "deleted_rows": {}, "skipped_tables": [], "completed": []}

    @staticmethod
    def _public(result: Dict) -> Dict:
        return {
            "cleared_tables": result["cleared_tables"],
            "deleted_rows": result["deleted_rows"],
            "skipped_tables": result["skipped_tables"],
        }

    def _run_steps(self, organization_id: int, steps: List[ResetStep], result: Dict):
        # Sequential on purpose: the list order is the foreign key order
        for step in steps:
            try:
                outcome = self.db.execute(build_delete(step, organization_id))
                self.db.commit()
            except DBAPIError as e:
                self.db.rollback()
                if is_missing_relation(e, step.table):
                    logger.warning(f"Table {step.table} does not exist, skipping.")
                    result["skipped_tables"].append(step.table)
                    continue
                logger.error(f"Error deleting {step.label}: {e}")
                raise ResetError(f"Failed to clear {step.label}: {e.orig}", step.table, result["completed"]) from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error deleting {step.label}: {e}")
                raise ResetError(f"Failed to clear {step.label}: {e}", step.table, result["completed"]) from e

            deleted = max(outcome.rowcount or 0, 0)
            result["deleted_rows"][step.table] = deleted
            result["cleared_tables"] += 1
            result["completed"].append(step.table)
            logger.info(f"Cleared {step.table} ({deleted} rows)")

    def _reset_counters(self, organization_id: int, result: Dict):
        for table_name, counter in COUNTER_RESETS:
            step = f"{table_name}.{counter}"
            target = table(table_name, column("organization_id"), column(counter))
            try:
                self.db.execute(
                    update(target).where(target.c.organization_id == organization_id).values({counter: 0})
                )
                self.db.commit()
            except DBAPIError as e:
                self.db.rollback()
                if is_missing_relation(e, table_name):
                    logger.warning(f"Table {table_name} does not exist, skipping counter reset.")
                    continue
                logger.error(f"Error resetting {step}: {e}")
                raise ResetError(f"Failed to reset {step}: {e.orig}", step, result["completed"]) from e
            except SQLAlchemyError as e:
                self.db.rollback()
                raise ResetError(f"Failed to reset {step}: {e}", step, result["completed"]) from e
            result["completed"].append(step)
