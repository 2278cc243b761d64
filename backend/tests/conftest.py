from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jewelerp.core.database import Base, get_db
import jewelerp.models  # noqa: F401
from jewelerp.schemas import OrganizationCreate, ItemCreate, CustomerCreate, SupplierCreate
from jewelerp.services.crm_service import CustomerService, SupplierService
from jewelerp.services.inventory_service import ItemService
from jewelerp.services.ledger_service import LedgerAccountService
from jewelerp.services.organization_service import OrganizationService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def org(db):
    organization = OrganizationService(db).create(
        OrganizationCreate(name="Shree Jewellers", state_code="27")
    )
    db.commit()
    return organization


@pytest.fixture
def accounts(db, org):
    """Look up a chart-of-accounts row by code"""
    service = LedgerAccountService(db)

    def lookup(code):
        return service.get_by_code(code, org.id)

    return lookup


@pytest.fixture
def ring(db, org):
    item = ItemService(db).create(ItemCreate(
        sku="RING-22K-01",
        name="22K Gold Ring",
        gst_rate=Decimal("3.00"),
        retail_price=Decimal("10000.00"),
        purchase_cost=Decimal("8000.00"),
        opening_stock=Decimal("5"),
    ), org.id)
    db.commit()
    return item


@pytest.fixture
def customer(db, org):
    customer = CustomerService(db).create(CustomerCreate(name="Meena Shah", phone="9800000001"), org.id)
    db.commit()
    return customer


@pytest.fixture
def supplier(db, org):
    supplier = SupplierService(db).create(SupplierCreate(name="Zaveri Bullion", state_code="27"), org.id)
    db.commit()
    return supplier


@pytest.fixture
def client(session_factory):
    from jewelerp.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
