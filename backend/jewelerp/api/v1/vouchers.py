"""
Voucher API Routes - Vouchers and Advance Payments
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import (
    VoucherCreate, VoucherResponse, AdvancePaymentCreate, AdvancePaymentResponse
)
from jewelerp.services.voucher_service import VoucherService, AdvancePaymentService

router = APIRouter(prefix="/organizations/{organization_id}", tags=["Vouchers"])


# ==================== VOUCHERS ====================

@router.get("/vouchers", response_model=List[VoucherResponse])
async def list_vouchers(
    voucher_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return VoucherService(db).get_by_organization(organization.id, voucher_type, start_date, end_date)


@router.post("/vouchers", response_model=VoucherResponse)
async def create_voucher(
    voucher_data: VoucherCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        voucher = VoucherService(db).create(voucher_data, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(voucher)
    return voucher


@router.get("/vouchers/{voucher_id}", response_model=VoucherResponse)
async def get_voucher(
    voucher_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    voucher = VoucherService(db).get_by_id(voucher_id, organization.id)
    if not voucher:
        raise HTTPException(status_code=404, detail="Voucher not found")
    return voucher


# ==================== ADVANCE PAYMENTS ====================

@router.get("/advance-payments", response_model=List[AdvancePaymentResponse])
async def list_advance_payments(
    payment_type: Optional[str] = None,
    status: Optional[str] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return AdvancePaymentService(db).get_by_organization(organization.id, payment_type, status)


@router.post("/advance-payments", response_model=AdvancePaymentResponse)
async def create_advance_payment(
    payment_data: AdvancePaymentCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        payment = AdvancePaymentService(db).create(payment_data, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(payment)
    return payment


@router.get("/advance-payments/{payment_id}", response_model=AdvancePaymentResponse)
async def get_advance_payment(
    payment_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    payment = AdvancePaymentService(db).get_by_id(payment_id, organization.id)
    if not payment:
        raise HTTPException(status_code=404, detail="Advance payment not found")
    return payment
