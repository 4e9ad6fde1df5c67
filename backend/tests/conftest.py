import os
import tempfile

# must be set before app.config is imported anywhere
TEST_DB = os.path.join(tempfile.gettempdir(), "inventory_backend_test.db")
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB}"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest

from app.db import SessionLocal, init_db
from app.schemas.product_schema import ProductIn


@pytest.fixture(autouse=True)
def fresh_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


def make_draft(**overrides) -> ProductIn:
    fields = dict(
        name="Laptop Stand",
        sku="LAP-001",
        category="Accessories",
        quantity=10,
        price=Decimal("19.99"),
        supplier="DeskWorks",
        barcode=None,
        min_stock_level=2,
    )
    fields.update(overrides)
    return ProductIn(**fields)


def product_payload(**overrides) -> dict:
    payload = {
        "name": "Laptop Stand",
        "sku": "LAP-001",
        "category": "Accessories",
        "quantity": 10,
        "price": "19.99",
        "supplier": "DeskWorks",
        "barcode": None,
        "minStockLevel": 2,
    }
    payload.update(overrides)
    return payload
