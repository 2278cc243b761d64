"""
CRM API Routes - Customers and Suppliers
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import (
    CustomerCreate, CustomerUpdate, CustomerResponse,
    SupplierCreate, SupplierUpdate, SupplierResponse, MessageResponse
)
from jewelerp.services.crm_service import CustomerService, SupplierService

router = APIRouter(prefix="/organizations/{organization_id}/crm", tags=["CRM"])


# ==================== CUSTOMERS ====================

@router.get("/customers", response_model=List[CustomerResponse])
async def list_customers(
    include_inactive: bool = False,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return CustomerService(db).get_by_organization(organization.id, include_inactive)


@router.get("/customers/outstanding", response_model=List[CustomerResponse])
async def list_outstanding_customers(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Customers with pending udhari, largest first"""
    return CustomerService(db).get_with_outstanding(organization.id)


@router.post("/customers", response_model=CustomerResponse)
async def create_customer(
    customer_data: CustomerCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    customer = CustomerService(db).create(customer_data, organization.id)
    db.commit()
    db.refresh(customer)
    return customer


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    customer = CustomerService(db).get_by_id(customer_id, organization.id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.put("/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    customer = CustomerService(db).update(customer_id, organization.id, customer_data)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    db.commit()
    db.refresh(customer)
    return customer


@router.delete("/customers/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    if not CustomerService(db).delete(customer_id, organization.id):
        raise HTTPException(status_code=404, detail="Customer not found")
    db.commit()
    return {"message": "Customer deleted successfully"}


# ==================== SUPPLIERS ====================

@router.get("/suppliers", response_model=List[SupplierResponse])
async def list_suppliers(
    include_inactive: bool = False,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return SupplierService(db).get_by_organization(organization.id, include_inactive)


@router.post("/suppliers", response_model=SupplierResponse)
async def create_supplier(
    supplier_data: SupplierCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    supplier = SupplierService(db).create(supplier_data, organization.id)
    db.commit()
    db.refresh(supplier)
    return supplier


@router.get("/suppliers/{supplier_id}", response_model=SupplierResponse)
async def get_supplier(
    supplier_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    supplier = SupplierService(db).get_by_id(supplier_id, organization.id)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


@router.put("/suppliers/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    supplier = SupplierService(db).update(supplier_id, organization.id, supplier_data)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    db.commit()
    db.refresh(supplier)
    return supplier


@router.delete("/suppliers/{supplier_id}", response_model=MessageResponse)
async def delete_supplier(
    supplier_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    if not SupplierService(db).delete(supplier_id, organization.id):
        raise HTTPException(status_code=404, detail="Supplier not found")
    db.commit()
    return {"message": "Supplier deleted successfully"}
