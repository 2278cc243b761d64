"""
Purchases API Routes - Purchase Orders and Goods Receipts
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import (
    PurchaseOrderCreate, PurchaseOrderResponse,
    PurchaseReceiptCreate, PurchaseReceiptResponse
)
from jewelerp.services.purchase_service import PurchaseService

router = APIRouter(prefix="/organizations/{organization_id}/purchases", tags=["Purchases"])


# ==================== PURCHASE ORDERS ====================

@router.get("/orders", response_model=List[PurchaseOrderResponse])
async def list_orders(
    status: Optional[str] = None,
    supplier_id: Optional[int] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return PurchaseService(db).get_orders(organization.id, status, supplier_id)


@router.post("/orders", response_model=PurchaseOrderResponse)
async def create_order(
    order_data: PurchaseOrderCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    purchase_service = PurchaseService(db)
    try:
        order = purchase_service.create_order(order_data, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    return purchase_service.get_order(order.id, organization.id)


@router.get("/orders/{order_id}", response_model=PurchaseOrderResponse)
async def get_order(
    order_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    order = PurchaseService(db).get_order(order_id, organization.id)
    if not order:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    return order


@router.post("/orders/{order_id}/cancel", response_model=PurchaseOrderResponse)
async def cancel_order(
    order_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        order = PurchaseService(db).cancel_order(order_id, organization.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not order:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    db.commit()
    db.refresh(order)
    return order


# ==================== GOODS RECEIPTS ====================

@router.get("/receipts", response_model=List[PurchaseReceiptResponse])
async def list_receipts(
    purchase_order_id: Optional[int] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return PurchaseService(db).get_receipts(organization.id, purchase_order_id)


@router.post("/receipts", response_model=PurchaseReceiptResponse)
async def receive_goods(
    receipt_data: PurchaseReceiptCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Receive goods against an order"""
    purchase_service = PurchaseService(db)
    try:
        receipt = purchase_service.receive(receipt_data, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    return purchase_service.get_receipt(receipt.id, organization.id)


@router.get("/receipts/{receipt_id}", response_model=PurchaseReceiptResponse)
async def get_receipt(
    receipt_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    receipt = PurchaseService(db).get_receipt(receipt_id, organization.id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Purchase receipt not found")
    return receipt
