"""
Inventory API Routes - Categories, Items, Stock
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jewelerp.api.deps import get_organization
from jewelerp.core.database import get_db
from jewelerp.models import Organization
from jewelerp.schemas import (
    CategoryCreate, CategoryResponse, ItemCreate, ItemUpdate, ItemResponse,
    StockAdjustmentCreate, StockMovementResponse, MessageResponse
)
from jewelerp.services.inventory_service import CategoryService, ItemService

router = APIRouter(prefix="/organizations/{organization_id}/inventory", tags=["Inventory"])


# ==================== CATEGORIES ====================

@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return CategoryService(db).get_by_organization(organization.id)


@router.post("/categories", response_model=CategoryResponse)
async def create_category(
    category_data: CategoryCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    category = CategoryService(db).create(category_data, organization.id)
    db.commit()
    db.refresh(category)
    return category


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    if not CategoryService(db).delete(category_id, organization.id):
        raise HTTPException(status_code=400, detail="Category not found or has items")
    db.commit()
    return {"message": "Category deleted successfully"}


# ==================== ITEMS ====================

@router.get("/items", response_model=List[ItemResponse])
async def list_items(
    include_inactive: bool = False,
    category_id: Optional[int] = None,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return ItemService(db).get_by_organization(organization.id, include_inactive, category_id)


@router.get("/items/low-stock", response_model=List[ItemResponse])
async def list_low_stock(
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Items at or below their minimum stock level"""
    return ItemService(db).get_low_stock(organization.id)


@router.post("/items", response_model=ItemResponse)
async def create_item(
    item_data: ItemCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        item = ItemService(db).create(item_data, organization.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(item)
    return item


@router.get("/items/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    item = ItemService(db).get_by_id(item_id, organization.id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.put("/items/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: int,
    item_data: ItemUpdate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    try:
        item = ItemService(db).update(item_id, organization.id, item_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    db.commit()
    db.refresh(item)
    return item


@router.post("/items/{item_id}/adjust", response_model=StockMovementResponse)
async def adjust_stock(
    item_id: int,
    adjustment: StockAdjustmentCreate,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    """Manual stock correction; the ledger is not touched"""
    try:
        movement = ItemService(db).adjust_stock(item_id, organization.id, adjustment)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    if not movement:
        raise HTTPException(status_code=404, detail="Item not found")
    db.commit()
    db.refresh(movement)
    return movement


@router.get("/items/{item_id}/movements", response_model=List[StockMovementResponse])
async def list_movements(
    item_id: int,
    organization: Organization = Depends(get_organization),
    db: Session = Depends(get_db)
):
    return ItemService(db).get_movements(item_id, organization.id)
