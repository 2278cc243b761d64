"""
Inventory Service - Categories, Items, Stock Movements
"""
import logging
from typing import Optional, List
from decimal import Decimal
from sqlalchemy.orm import Session, joinedload
from jewelerp.core.config import settings
from jewelerp.core.exceptions import ValidationError
from jewelerp.models import Category, Item, StockMovement, MovementType
from jewelerp.schemas import CategoryCreate, ItemCreate, ItemUpdate, StockAdjustmentCreate
from jewelerp.services.utils import to_decimal

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, category_id: int, organization_id: int) -> Optional[Category]:
        return self.db.query(Category).filter(
            Category.id == category_id,
            Category.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int) -> List[Category]:
        return self.db.query(Category).filter(
            Category.organization_id == organization_id
        ).order_by(Category.name).all()

    def create(self, category_data: CategoryCreate, organization_id: int) -> Category:
        category = Category(
            name=category_data.name,
            description=category_data.description,
            organization_id=organization_id
        )
        self.db.add(category)
        self.db.flush()
        return category

    def delete(self, category_id: int, organization_id: int) -> bool:
        category = self.get_by_id(category_id, organization_id)
        if not category:
            return False

        # Categories in use are kept
        has_items = self.db.query(Item.id).filter(Item.category_id == category_id).first()
        if has_items:
            return False

        self.db.delete(category)
        self.db.flush()
        return True


class ItemService:
    def __init__(self, db: Session, allow_negative_stock: bool = None):
        self.db = db
        self.allow_negative_stock = (
            settings.ALLOW_NEGATIVE_STOCK if allow_negative_stock is None else allow_negative_stock
        )

    def get_by_id(self, item_id: int, organization_id: int) -> Optional[Item]:
        return self.db.query(Item).options(joinedload(Item.category)).filter(
            Item.id == item_id,
            Item.organization_id == organization_id
        ).first()

    def get_by_sku(self, sku: str, organization_id: int) -> Optional[Item]:
        return self.db.query(Item).filter(
            Item.sku == sku,
            Item.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, include_inactive: bool = False,
                            category_id: int = None) -> List[Item]:
        query = self.db.query(Item).filter(Item.organization_id == organization_id)
        if not include_inactive:
            query = query.filter(Item.is_active == True)
        if category_id:
            query = query.filter(Item.category_id == category_id)
        return query.order_by(Item.name).all()

    def get_low_stock(self, organization_id: int) -> List[Item]:
        """Active items at or below their minimum stock level"""
        return self.db.query(Item).filter(
            Item.organization_id == organization_id,
            Item.is_active == True,
            Item.current_stock <= Item.min_stock_level
        ).order_by(Item.name).all()

    def create(self, item_data: ItemCreate, organization_id: int) -> Item:
        if self.get_by_sku(item_data.sku, organization_id):
            raise ValidationError(f"Item with SKU '{item_data.sku}' already exists", field="sku")

        if item_data.category_id and not CategoryService(self.db).get_by_id(item_data.category_id, organization_id):
            raise ValidationError("Category not found", field="category_id")

        item = Item(
            **item_data.model_dump(exclude={"opening_stock"}),
            organization_id=organization_id,
            current_stock=Decimal("0"),
        )
        self.db.add(item)
        self.db.flush()

        if item_data.opening_stock:
            self.record_movement(
                item, MovementType.ADJUSTMENT.value, item_data.opening_stock,
                unit_price=item_data.purchase_cost, notes="Opening stock"
            )

        return item

    def update(self, item_id: int, organization_id: int, item_data: ItemUpdate) -> Optional[Item]:
        item = self.get_by_id(item_id, organization_id)
        if not item:
            return None

        update_data = item_data.model_dump(exclude_unset=True)
        if update_data.get("category_id") and not CategoryService(self.db).get_by_id(
            update_data["category_id"], organization_id
        ):
            raise ValidationError("Category not found", field="category_id")

        for key, value in update_data.items():
            setattr(item, key, value)

        self.db.flush()
        return item

    def record_movement(self, item: Item, movement_type: str, quantity_change, unit_price=None,
                        reference_type: str = None, reference_id: int = None,
                        notes: str = None) -> StockMovement:
        """Apply a signed stock change and keep its history row"""
        quantity_change = to_decimal(quantity_change)
        new_stock = to_decimal(item.current_stock) + quantity_change
        if new_stock < 0 and not self.allow_negative_stock:
            raise ValidationError(
                f"Insufficient stock for {item.name}: available {item.current_stock}, "
                f"requested {-quantity_change}",
                field="quantity"
            )

        item.current_stock = new_stock
        movement = StockMovement(
            organization_id=item.organization_id,
            item_id=item.id,
            movement_type=movement_type,
            quantity_change=quantity_change,
            unit_price=unit_price,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
        )
        self.db.add(movement)
        self.db.flush()
        return movement

    def adjust_stock(self, item_id: int, organization_id: int,
                     adjustment: StockAdjustmentCreate) -> Optional[StockMovement]:
        item = self.get_by_id(item_id, organization_id)
        if not item:
            return None
        if adjustment.quantity_change == 0:
            raise ValidationError("Quantity change cannot be zero", field="quantity_change")

        movement = self.record_movement(
            item, adjustment.movement_type, adjustment.quantity_change,
            unit_price=item.purchase_cost, notes=adjustment.notes
        )
        logger.info(f"Stock of item {item.sku} adjusted by {adjustment.quantity_change} ({adjustment.movement_type})")
        return movement

    def get_movements(self, item_id: int, organization_id: int) -> List[StockMovement]:
        return self.db.query(StockMovement).filter(
            StockMovement.item_id == item_id,
            StockMovement.organization_id == organization_id
        ).order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).all()
