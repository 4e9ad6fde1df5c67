from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db import get_db
from app.main import app
from conftest import product_payload

client = TestClient(app)


def _create(**overrides):
    res = client.post("/api/products", json=product_payload(**overrides))
    assert res.status_code == 201, res.text
    return res.json()


def test_create_returns_camel_case_record_with_derived_fields():
    body = _create(price="19.99", quantity=3, minStockLevel=5)
    assert body["id"] > 0
    assert body["sku"] == "LAP-001"
    assert Decimal(str(body["price"])) == Decimal("19.99")
    assert Decimal(str(body["totalValue"])) == Decimal("59.97")
    assert body["minStockLevel"] == 5
    assert body["isLowStock"] is True
    assert body["isOutOfStock"] is False
    assert body["createdAt"] == body["updatedAt"]


def test_list_and_get_endpoints():
    created = _create(barcode="BC-1")
    res = client.get("/api/products")
    assert res.status_code == 200
    assert [p["sku"] for p in res.json()] == ["LAP-001"]

    assert client.get(f"/api/products/{created['id']}").json()["sku"] == "LAP-001"
    assert client.get("/api/products/sku/LAP-001").json()["id"] == created["id"]
    assert client.get("/api/products/barcode/BC-1").json()["id"] == created["id"]

    assert client.get("/api/products/9999").status_code == 404
    assert client.get("/api/products/sku/NOPE").status_code == 404
    assert client.get("/api/products/barcode/NOPE").status_code == 404


def test_duplicate_sku_and_barcode_are_400():
    _create(sku="A-1", barcode="BC-1")
    res = client.post("/api/products", json=product_payload(sku="A-1"))
    assert res.status_code == 400
    assert "SKU 'A-1' already exists" in res.json()["detail"]

    res = client.post("/api/products", json=product_payload(sku="A-2", barcode="BC-1"))
    assert res.status_code == 400
    assert "barcode 'BC-1' already exists" in res.json()["detail"]
    assert len(client.get("/api/products").json()) == 1


def test_field_violations_are_400_with_details():
    res = client.post("/api/products", json=product_payload(price="0", quantity=-2))
    assert res.status_code == 400
    fields = sorted(v["field"] for v in res.json()["detail"])
    assert fields == ["price", "quantity"]


def test_malformed_body_is_422():
    payload = product_payload()
    del payload["sku"]
    assert client.post("/api/products", json=payload).status_code == 422


def test_snake_case_input_is_accepted():
    payload = product_payload()
    payload["min_stock_level"] = payload.pop("minStockLevel")
    res = client.post("/api/products", json=payload)
    assert res.status_code == 201
    assert res.json()["minStockLevel"] == 2


def test_full_update():
    created = _create(barcode="BC-1")
    res = client.put(
        f"/api/products/{created['id']}",
        json=product_payload(name="Laptop Stand Pro", barcode="BC-1", quantity=1),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Laptop Stand Pro"
    assert body["createdAt"] == created["createdAt"]
    assert body["id"] == created["id"]

    assert client.put("/api/products/9999", json=product_payload()).status_code == 404


def test_update_to_taken_sku_is_400():
    _create(sku="A-1")
    b = _create(sku="A-2")
    res = client.put(f"/api/products/{b['id']}", json=product_payload(sku="A-1"))
    assert res.status_code == 400


def test_delete_then_404():
    created = _create()
    res = client.delete(f"/api/products/{created['id']}")
    assert res.status_code == 200
    assert res.json() == {"message": "Product deleted successfully"}
    assert client.get(f"/api/products/{created['id']}").status_code == 404
    assert client.delete(f"/api/products/{created['id']}").status_code == 404


def test_stock_update():
    created = _create(quantity=20, minStockLevel=5)
    res = client.put(f"/api/products/{created['id']}/stock", json={"quantity": 0})
    assert res.status_code == 200
    body = res.json()
    assert body["isOutOfStock"] is True
    assert body["isLowStock"] is True

    res = client.put(f"/api/products/{created['id']}/stock", json={"quantity": -4})
    assert res.status_code == 400
    assert client.put("/api/products/9999/stock", json={"quantity": 1}).status_code == 404


def test_counts_beyond_integer_column_are_400():
    res = client.post("/api/products", json=product_payload(quantity=2**64))
    assert res.status_code == 400
    assert [v["field"] for v in res.json()["detail"]] == ["quantity"]

    created = _create(quantity=5)
    res = client.put(f"/api/products/{created['id']}/stock", json={"quantity": 2**64})
    assert res.status_code == 400
    assert client.get(f"/api/products/{created['id']}").json()["quantity"] == 5


def test_money_fields_are_json_numbers():
    body = _create(price="19.99", quantity=3)
    assert body["price"] == 19.99
    assert body["totalValue"] == 59.97
    stats = client.get("/api/products/stats").json()
    assert isinstance(stats["totalValue"], float)


def test_search_and_filters():
    _create(name="Laptop Stand", sku="STD-1", category="Accessories", supplier="DeskWorks", price="39.99")
    _create(name="Cable", sku="LAP-001", category="Accessories", supplier="WireCo", price="5.00", quantity=0)
    _create(name="Desk", sku="DSK-1", category="Furniture", supplier="DeskWorks", price="249.00", quantity=50)

    res = client.get("/api/products/search", params={"q": "lap"})
    assert res.status_code == 200
    assert sorted(p["name"] for p in res.json()) == ["Cable", "Laptop Stand"]

    assert [p["sku"] for p in client.get("/api/products/category/Furniture").json()] == ["DSK-1"]
    assert [p["sku"] for p in client.get("/api/products/supplier/DeskWorks").json()] == ["STD-1", "DSK-1"]
    assert client.get("/api/products/category/Unknown").json() == []

    res = client.get("/api/products/price-range", params={"minPrice": "5.00", "maxPrice": "39.99"})
    assert [p["sku"] for p in res.json()] == ["STD-1", "LAP-001"]
    res = client.get("/api/products/price-range", params={"minPrice": "50", "maxPrice": "10"})
    assert res.status_code == 400

    assert [p["sku"] for p in client.get("/api/products/out-of-stock").json()] == ["LAP-001"]
    assert [p["sku"] for p in client.get("/api/products/low-stock").json()] == ["LAP-001"]


def test_stats_empty_and_populated():
    body = client.get("/api/products/stats").json()
    assert body["totalProducts"] == 0
    assert body["lowStockProducts"] == 0
    assert body["outOfStockProducts"] == 0
    assert Decimal(str(body["totalValue"])) == 0
    assert body["totalQuantity"] == 0

    _create(sku="A", price="19.99", quantity=3, minStockLevel=5)
    _create(sku="B", price="1.00", quantity=0, minStockLevel=0)
    body = client.get("/api/products/stats").json()
    assert body["totalProducts"] == 2
    assert body["lowStockProducts"] == 2
    assert body["outOfStockProducts"] == 1
    assert Decimal(str(body["totalValue"])) == Decimal("59.97")
    assert body["totalQuantity"] == 3

    total = client.get("/api/products/total-value").json()
    assert Decimal(str(total["totalValue"])) == Decimal("59.97")


def test_summaries():
    _create(sku="A", category="Furniture", supplier="S1", quantity=2)
    _create(sku="B", category="Lighting", supplier="S1", quantity=3)
    cats = client.get("/api/products/summary/categories").json()
    assert cats == [
        {"category": "Furniture", "productCount": 1, "totalQuantity": 2},
        {"category": "Lighting", "productCount": 1, "totalQuantity": 3},
    ]
    sups = client.get("/api/products/summary/suppliers").json()
    assert sups == [{"supplier": "S1", "productCount": 2}]


def test_storage_failure_maps_to_500(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'x.db'}")
    BrokenSession = sessionmaker(bind=engine)

    def broken_db():
        s = BrokenSession()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = broken_db
    try:
        res = client.get("/api/products")
        assert res.status_code == 500
        assert res.json()["detail"] == "Internal server error"
        assert client.post("/api/products", json=product_payload()).status_code == 500
    finally:
        app.dependency_overrides.clear()
        engine.dispose()
