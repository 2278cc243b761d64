"""
Sales API Routes - GST invoices
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import SaleCreate, SaleResponse
from jewelerp.services.sales_service import SaleService

router = APIRouter(prefix="/organizations/{organization_id}/sales", tags=["Sales"])


@router.get("", response_model=List[SaleResponse])
async def list_sales(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    customer_id: Optional[int] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return SaleService(db).get_by_organization(organization.id, start_date, end_date, customer_id)


@router.post("", response_model=SaleResponse)
async def create_sale(
    sale_data: SaleCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Bill a sale: stock, udhari and ledger move in one transaction"""
    sale_service = SaleService(db)
    try:
        sale = sale_service.create(sale_data, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    return sale_service.get_by_id(sale.id, organization.id)


@router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(
    sale_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    sale = SaleService(db).get_by_id(sale_id, organization.id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale
