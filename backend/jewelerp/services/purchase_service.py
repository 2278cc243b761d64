"""
Purchase Service - Purchase orders and goods receipts
"""
import logging
from typing import Optional, List, Dict
from decimal import Decimal
from datetime import date
from sqlalchemy.orm import Session, joinedload
from jewelerp.core.exceptions import ValidationError
from jewelerp.models import (
    PurchaseOrder, PurchaseOrderItem, PurchaseReceipt, PurchaseReceiptItem,
    Supplier, Item, MovementType, PurchaseOrderStatus
)
from jewelerp.schemas import PurchaseOrderCreate, PurchaseReceiptCreate
from jewelerp.services.inventory_service import ItemService
from jewelerp.services.ledger_service import LedgerAccountService, LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.utils import ZERO, money, to_decimal, next_document_number

logger = logging.getLogger(__name__)


class PurchaseService:
    def __init__(self, db: Session):
        self.db = db

    def get_order(self, order_id: int, organization_id: int) -> Optional[PurchaseOrder]:
        return self.db.query(PurchaseOrder).options(
            joinedload(PurchaseOrder.items),
            joinedload(PurchaseOrder.supplier)
        ).filter(
            PurchaseOrder.id == order_id,
            PurchaseOrder.organization_id == organization_id
        ).first()

    def get_orders(self, organization_id: int, status: str = None, supplier_id: int = None) -> List[PurchaseOrder]:
        query = self.db.query(PurchaseOrder).options(joinedload(PurchaseOrder.items)).filter(
            PurchaseOrder.organization_id == organization_id
        )
        if status:
            query = query.filter(PurchaseOrder.status == status)
        if supplier_id:
            query = query.filter(PurchaseOrder.supplier_id == supplier_id)
        return query.order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc()).all()

    def get_receipt(self, receipt_id: int, organization_id: int) -> Optional[PurchaseReceipt]:
        return self.db.query(PurchaseReceipt).options(joinedload(PurchaseReceipt.items)).filter(
            PurchaseReceipt.id == receipt_id,
            PurchaseReceipt.organization_id == organization_id
        ).first()

    def get_receipts(self, organization_id: int, purchase_order_id: int = None) -> List[PurchaseReceipt]:
        query = self.db.query(PurchaseReceipt).options(joinedload(PurchaseReceipt.items)).filter(
            PurchaseReceipt.organization_id == organization_id
        )
        if purchase_order_id:
            query = query.filter(PurchaseReceipt.purchase_order_id == purchase_order_id)
        return query.order_by(PurchaseReceipt.receipt_date.desc(), PurchaseReceipt.id.desc()).all()

    def create_order(self, order_data: PurchaseOrderCreate, organization_id: int) -> PurchaseOrder:
        """Record an order; nothing reaches the ledger until goods arrive"""
        supplier = self.db.query(Supplier).filter(
            Supplier.id == order_data.supplier_id,
            Supplier.organization_id == organization_id
        ).first()
        if not supplier:
            raise ValidationError("Supplier not found", field="supplier_id")

        item_ids = {line.item_id for line in order_data.items}
        items = {
            item.id: item for item in self.db.query(Item).filter(
                Item.id.in_(list(item_ids)),
                Item.organization_id == organization_id
            ).all()
        }
        missing = sorted(item_ids - set(items))
        if missing:
            raise ValidationError(f"Item(s) not found: {missing}", field="items")

        order = PurchaseOrder(
            organization_id=organization_id,
            po_number=next_document_number(self.db, PurchaseOrder, "po_number", organization_id, "PO"),
            supplier_id=supplier.id,
            order_date=order_data.order_date or date.today(),
            expected_date=order_data.expected_date,
            status=PurchaseOrderStatus.PENDING.value,
            notes=order_data.notes,
        )
        self.db.add(order)
        self.db.flush()

        subtotal = ZERO
        tax_total = ZERO
        for line in order_data.items:
            gst_rate = line.gst_rate if line.gst_rate is not None else to_decimal(items[line.item_id].gst_rate)
            amount = money(line.quantity * line.unit_price)
            tax = money(amount * gst_rate / 100)
            self.db.add(PurchaseOrderItem(
                purchase_order_id=order.id,
                item_id=line.item_id,
                quantity=line.quantity,
                received_quantity=Decimal("0"),
                unit_price=line.unit_price,
                gst_rate=gst_rate,
                tax_amount=tax,
                total_price=amount + tax,
            ))
            subtotal += amount
            tax_total += tax

        order.subtotal = subtotal
        order.tax_amount = tax_total
        order.total_amount = subtotal + tax_total
        self.db.flush()

        logger.info(f"Created purchase order {order.po_number} for organization {organization_id}")
        return order

    def cancel_order(self, order_id: int, organization_id: int) -> Optional[PurchaseOrder]:
        order = self.get_order(order_id, organization_id)
        if not order:
            return None
        if order.status != PurchaseOrderStatus.PENDING.value:
            raise ValidationError(f"Only pending orders can be cancelled (order is {order.status})")

        order.status = PurchaseOrderStatus.CANCELLED.value
        self.db.flush()
        return order

    def receive(self, receipt_data: PurchaseReceiptCreate, organization_id: int) -> PurchaseReceipt:
        """Receive goods against an order: stock, supplier balance and ledger move together"""
        order = self.get_order(receipt_data.purchase_order_id, organization_id)
        if not order:
            raise ValidationError("Purchase order not found", field="purchase_order_id")
        if order.status in (PurchaseOrderStatus.CANCELLED.value, PurchaseOrderStatus.RECEIVED.value):
            raise ValidationError(f"Cannot receive against a {order.status} order")

        order_lines = {line.id: line for line in order.items}
        requested: Dict[int, Decimal] = {}
        for line in receipt_data.items:
            if line.purchase_order_item_id not in order_lines:
                raise ValidationError(
                    f"Order line {line.purchase_order_item_id} does not belong to {order.po_number}", field="items"
                )
            requested[line.purchase_order_item_id] = requested.get(line.purchase_order_item_id, ZERO) + line.quantity

        for line_id, quantity in requested.items():
            pending = to_decimal(order_lines[line_id].pending_quantity)
            if quantity > pending:
                raise ValidationError(
                    f"Cannot receive {quantity} on order line {line_id}; only {pending} outstanding", field="items"
                )

        receipt_date = receipt_data.receipt_date or date.today()
        receipt = PurchaseReceipt(
            organization_id=organization_id,
            receipt_number=next_document_number(self.db, PurchaseReceipt, "receipt_number", organization_id, "GRN"),
            purchase_order_id=order.id,
            supplier_id=order.supplier_id,
            receipt_date=receipt_date,
            notes=receipt_data.notes,
        )
        self.db.add(receipt)
        self.db.flush()

        item_service = ItemService(self.db)
        subtotal = ZERO
        tax_total = ZERO
        for line_id, quantity in requested.items():
            order_line = order_lines[line_id]
            amount = money(quantity * order_line.unit_price)
            tax = money(amount * to_decimal(order_line.gst_rate) / 100)
            self.db.add(PurchaseReceiptItem(
                receipt_id=receipt.id,
                purchase_order_item_id=order_line.id,
                item_id=order_line.item_id,
                quantity=quantity,
                unit_price=order_line.unit_price,
                gst_rate=order_line.gst_rate,
                tax_amount=tax,
                total_price=amount + tax,
            ))
            order_line.received_quantity = to_decimal(order_line.received_quantity) + quantity

            item = order_line.item
            item_service.record_movement(
                item, MovementType.PURCHASE.value, quantity, unit_price=order_line.unit_price,
                reference_type="purchase_receipt", reference_id=receipt.id
            )
            item.purchase_cost = order_line.unit_price
            item.last_purchase_date = receipt_date

            subtotal += amount
            tax_total += tax

        receipt.subtotal = subtotal
        receipt.tax_amount = tax_total
        receipt.total_amount = subtotal + tax_total

        if all(to_decimal(line.pending_quantity) <= 0 for line in order.items):
            order.status = PurchaseOrderStatus.RECEIVED.value
        else:
            order.status = PurchaseOrderStatus.PARTIAL.value

        supplier = order.supplier
        supplier.current_balance = to_decimal(supplier.current_balance) + receipt.total_amount

        if receipt.total_amount > 0:
            receipt.ledger_entry_id = self._post_ledger_entry(receipt, supplier)

        self.db.flush()
        logger.info(
            f"Received {receipt.receipt_number} against {order.po_number} "
            f"(total {receipt.total_amount}, order now {order.status})"
        )
        return receipt

    def _post_ledger_entry(self, receipt: PurchaseReceipt, supplier: Supplier) -> int:
        accounts = LedgerAccountService(self.db)
        org_id = receipt.organization_id

        lines = []
        if receipt.subtotal > 0:
            purchases = accounts.get_system_account(org_id, SystemAccount.PURCHASES)
            lines.append({"account_id": purchases.id, "debit": receipt.subtotal})
        if receipt.tax_amount > 0:
            gst_input = accounts.get_system_account(org_id, SystemAccount.GST_INPUT)
            lines.append({"account_id": gst_input.id, "debit": receipt.tax_amount})
        creditors = accounts.get_system_account(org_id, SystemAccount.SUNDRY_CREDITORS)
        lines.append({"account_id": creditors.id, "credit": receipt.total_amount,
                      "narration": f"Payable to {supplier.name}"})

        return LedgerService(self.db).post_entry(
            org_id,
            f"Goods received {receipt.receipt_number}",
            lines,
            entry_date=receipt.receipt_date,
            reference_type="purchase_receipt",
            reference_id=receipt.id,
            reference_number=receipt.receipt_number,
        )
