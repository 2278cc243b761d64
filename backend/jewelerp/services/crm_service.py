"""
CRM Service - Customers and Suppliers
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from jewelerp.models import Customer, Supplier, Sale, PurchaseOrder, Voucher
from jewelerp.schemas import CustomerCreate, CustomerUpdate, SupplierCreate, SupplierUpdate


class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, customer_id: int, organization_id: int) -> Optional[Customer]:
        return self.db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, include_inactive: bool = False) -> List[Customer]:
        query = self.db.query(Customer).filter(Customer.organization_id == organization_id)
        if not include_inactive:
            query = query.filter(Customer.is_active == True)
        return query.order_by(Customer.name).all()

    def get_with_outstanding(self, organization_id: int) -> List[Customer]:
        """Customers carrying udhari"""
        return self.db.query(Customer).filter(
            Customer.organization_id == organization_id,
            Customer.current_balance > 0
        ).order_by(Customer.current_balance.desc()).all()

    def create(self, customer_data: CustomerCreate, organization_id: int) -> Customer:
        customer = Customer(**customer_data.model_dump(), organization_id=organization_id)
        self.db.add(customer)
        self.db.flush()
        return customer

    def update(self, customer_id: int, organization_id: int, customer_data: CustomerUpdate) -> Optional[Customer]:
        customer = self.get_by_id(customer_id, organization_id)
        if not customer:
            return None

        update_data = customer_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(customer, key, value)

        self.db.flush()
        return customer

    def delete(self, customer_id: int, organization_id: int) -> bool:
        customer = self.get_by_id(customer_id, organization_id)
        if not customer:
            return False

        has_sales = self.db.query(Sale.id).filter(Sale.customer_id == customer_id).first()
        has_vouchers = self.db.query(Voucher.id).filter(
            Voucher.party_type == "customer",
            Voucher.party_id == customer_id
        ).first()

        if has_sales or has_vouchers:
            customer.is_active = False
        else:
            self.db.delete(customer)

        self.db.flush()
        return True


class SupplierService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, supplier_id: int, organization_id: int) -> Optional[Supplier]:
        return self.db.query(Supplier).filter(
            Supplier.id == supplier_id,
            Supplier.organization_id == organization_id
        ).first()

    def get_by_organization(self, organization_id: int, include_inactive: bool = False) -> List[Supplier]:
        query = self.db.query(Supplier).filter(Supplier.organization_id == organization_id)
        if not include_inactive:
            query = query.filter(Supplier.is_active == True)
        return query.order_by(Supplier.name).all()

    def create(self, supplier_data: SupplierCreate, organization_id: int) -> Supplier:
        supplier = Supplier(**supplier_data.model_dump(), organization_id=organization_id)
        self.db.add(supplier)
        self.db.flush()
        return supplier

    def update(self, supplier_id: int, organization_id: int, supplier_data: SupplierUpdate) -> Optional[Supplier]:
        supplier = self.get_by_id(supplier_id, organization_id)
        if not supplier:
            return None

        update_data = supplier_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(supplier, key, value)

        self.db.flush()
        return supplier

    def delete(self, supplier_id: int, organization_id: int) -> bool:
        supplier = self.get_by_id(supplier_id, organization_id)
        if not supplier:
            return False

        has_orders = self.db.query(PurchaseOrder.id).filter(PurchaseOrder.supplier_id == supplier_id).first()
        if has_orders:
            supplier.is_active = False
        else:
            self.db.delete(supplier)

        self.db.flush()
        return True
