"""
Sales Service - GST invoices with stock and ledger effects
"""
import logging
from typing import Optional, List, Dict
from decimal import Decimal
from datetime import date
from sqlalchemy.orm import Session, joinedload
from jewelerp.core.config import settings
from jewelerp.core.exceptions import ValidationError
from jewelerp.models import Sale, SaleItem, Item, Customer, Organization, MovementType
from jewelerp.schemas import SaleCreate
from jewelerp.services.inventory_service import ItemService
from jewelerp.services.ledger_service import LedgerAccountService, LedgerService
from jewelerp.services.organization_service import SystemAccount
from jewelerp.services.utils import ZERO, money, to_decimal, next_document_number

logger = logging.getLogger(__name__)


def split_gst(tax: Decimal, inter_state: bool) -> Dict[str, Decimal]:
    """IGST across states; CGST and SGST halves within one state"""
    if inter_state:
        return {"cgst": ZERO, "sgst": ZERO, "igst": tax}
    cgst = money(tax / 2)
    return {"cgst": cgst, "sgst": tax - cgst, "igst": ZERO}


class SaleService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, sale_id: int, organization_id: int) -> Optional[Sale]:
        return self.db.query(Sale).options(
            joinedload(Sale.items),
            joinedload(Sale.customer)
        ).filter(
            Sale.id == sale_id,
            Sale.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, start_date: date = None, end_date: date = None,
                            customer_id: int = None) -> List[Sale]:
        query = self.db.query(Sale).options(joinedload(Sale.items)).filter(
            Sale.organization_id == organization_id
        )
        if start_date:
            query = query.filter(Sale.sale_date >= start_date)
        if end_date:
            query = query.filter(Sale.sale_date <= end_date)
        if customer_id:
            query = query.filter(Sale.customer_id == customer_id)
        return query.order_by(Sale.sale_date.desc(), Sale.id.desc()).all()

    def get_next_number(self, organization_id: int) -> str:
        return next_document_number(self.db, Sale, "invoice_number", organization_id, "INV")

    def create(self, sale_data: SaleCreate, organization_id: int) -> Sale:
        organization = self.db.query(Organization).filter(Organization.id == organization_id).first()
        if not organization:
            raise ValidationError("Organization not found")

        customer = None
        if sale_data.customer_id:
            customer = self.db.query(Customer).filter(
                Customer.id == sale_data.customer_id,
                Customer.organization_id == organization_id
            ).first()
            if not customer:
                raise ValidationError("Customer not found", field="customer_id")

        item_service = ItemService(self.db)
        items = self._load_items(sale_data, organization_id, item_service.allow_negative_stock)

        seller_state = organization.state_code or settings.DEFAULT_STATE_CODE
        buyer_state = sale_data.customer_state_code or (customer.state_code if customer else None) or seller_state
        inter_state = buyer_state != seller_state

        lines = []
        for line in sale_data.items:
            item = items[line.item_id]
            unit_price = line.unit_price if line.unit_price is not None else to_decimal(item.retail_price)
            gross = money(line.quantity * unit_price)
            discount = money(gross * line.discount_percent / 100)
            taxable = gross - discount
            gst_rate = ZERO
            if sale_data.is_gst_bill:
                gst_rate = line.gst_rate if line.gst_rate is not None else to_decimal(item.gst_rate)
            tax = money(taxable * gst_rate / 100)
            lines.append({
                "line": line,
                "item": item,
                "unit_price": unit_price,
                "gross": gross,
                "discount": discount,
                "taxable": taxable,
                "gst_rate": gst_rate,
                "tax": tax,
                **split_gst(tax, inter_state),
            })

        subtotal = sum((l["gross"] for l in lines), ZERO)
        discount_amount = sum((l["discount"] for l in lines), ZERO)
        taxable_amount = sum((l["taxable"] for l in lines), ZERO)
        tax_amount = sum((l["tax"] for l in lines), ZERO)
        total_amount = taxable_amount + tax_amount

        payment_mode = sale_data.payment_mode.value
        # A credit bill is booked wholly as udhari
        if payment_mode == "credit":
            amount_paid = ZERO
        elif sale_data.amount_paid is not None:
            amount_paid = money(sale_data.amount_paid)
        else:
            amount_paid = total_amount
        if amount_paid > total_amount:
            raise ValidationError(
                f"Amount paid ({amount_paid}) exceeds invoice total ({total_amount})", field="amount_paid"
            )
        credit_amount = total_amount - amount_paid
        if credit_amount > 0 and not customer:
            raise ValidationError("A customer is required for credit (udhari) sales", field="customer_id")

        sale = Sale(
            organization_id=organization_id,
            invoice_number=self.get_next_number(organization_id),
            customer_id=customer.id if customer else None,
            customer_name=sale_data.customer_name or (customer.name if customer else None),
            customer_phone=sale_data.customer_phone or (customer.phone if customer else None),
            customer_state_code=buyer_state,
            sale_date=sale_data.sale_date or date.today(),
            subtotal=subtotal,
            discount_amount=discount_amount,
            taxable_amount=taxable_amount,
            cgst_amount=sum((l["cgst"] for l in lines), ZERO),
            sgst_amount=sum((l["sgst"] for l in lines), ZERO),
            igst_amount=sum((l["igst"] for l in lines), ZERO),
            total_amount=total_amount,
            payment_mode=payment_mode,
            amount_paid=amount_paid,
            credit_amount=credit_amount,
            is_credit=credit_amount > 0,
            is_paid=credit_amount == 0,
            notes=sale_data.notes,
        )
        self.db.add(sale)
        self.db.flush()

        for l in lines:
            item = l["item"]
            self.db.add(SaleItem(
                sale_id=sale.id,
                item_id=item.id,
                item_name=item.name,
                hsn_code=item.hsn_code,
                quantity=l["line"].quantity,
                unit_price=l["unit_price"],
                purchase_price=item.purchase_cost or ZERO,
                discount_percent=l["line"].discount_percent,
                gst_rate=l["gst_rate"],
                taxable_amount=l["taxable"],
                cgst_amount=l["cgst"],
                sgst_amount=l["sgst"],
                igst_amount=l["igst"],
                total_price=l["taxable"] + l["tax"],
            ))
            item_service.record_movement(
                item, MovementType.SALE.value, -l["line"].quantity, unit_price=l["unit_price"],
                reference_type="sale", reference_id=sale.id
            )

        if customer and credit_amount > 0:
            customer.current_balance = to_decimal(customer.current_balance) + credit_amount

        if total_amount > 0:
            sale.ledger_entry_id = self._post_ledger_entry(sale, tax_amount)

        self.db.flush()
        logger.info(f"Created sale {sale.invoice_number} for organization {organization_id} (total {total_amount})")
        return sale

    def _load_items(self, sale_data: SaleCreate, organization_id: int, allow_negative_stock: bool) -> Dict[int, Item]:
        """Resolve every line's item and check stock before anything is written"""
        requested: Dict[int, Decimal] = {}
        for line in sale_data.items:
            requested[line.item_id] = requested.get(line.item_id, ZERO) + line.quantity

        items = {
            item.id: item for item in self.db.query(Item).filter(
                Item.id.in_(list(requested)),
                Item.organization_id == organization_id
            ).all()
        }
        for item_id, quantity in requested.items():
            item = items.get(item_id)
            if not item or not item.is_active:
                raise ValidationError(f"Item {item_id} not found", field="items")
            if not allow_negative_stock and to_decimal(item.current_stock) < quantity:
                raise ValidationError(
                    f"Insufficient stock for '{item.name}'. Available: {item.current_stock}, Requested: {quantity}",
                    field="items"
                )
        return items

    def _post_ledger_entry(self, sale: Sale, tax_amount: Decimal) -> int:
        accounts = LedgerAccountService(self.db)
        org_id = sale.organization_id

        lines = []
        if sale.amount_paid > 0:
            settlement = accounts.get_settlement_account(org_id, sale.payment_mode)
            lines.append({"account_id": settlement.id, "debit": sale.amount_paid})
        if sale.credit_amount > 0:
            debtors = accounts.get_system_account(org_id, SystemAccount.SUNDRY_DEBTORS)
            lines.append({"account_id": debtors.id, "debit": sale.credit_amount,
                          "narration": f"Udhari: {sale.customer_name}"})
        if sale.taxable_amount > 0:
            sales_account = accounts.get_system_account(org_id, SystemAccount.SALES)
            lines.append({"account_id": sales_account.id, "credit": sale.taxable_amount})
        if tax_amount > 0:
            gst_output = accounts.get_system_account(org_id, SystemAccount.GST_OUTPUT)
            lines.append({"account_id": gst_output.id, "credit": tax_amount})

        return LedgerService(self.db).post_entry(
            org_id,
            f"Sale {sale.invoice_number}",
            lines,
            entry_date=sale.sale_date,
            reference_type="sale",
            reference_id=sale.id,
            reference_number=sale.invoice_number,
        )
