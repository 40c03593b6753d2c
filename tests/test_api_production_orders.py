"""API-level tests for the production order workflow and stock movements."""
import os
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_lumina_erp.db")

import pytest
from fastapi.testclient import TestClient

from core.errors import InsufficientStockException
from main import app
from modules.stock import movements
from modules.stock.schemas import StockDeduction

client = TestClient(app)

PLANNED_DATE = "2026-01-10T08:00:00"


@pytest.fixture(autouse=True)
def clean_db():
    """Reset database before each test by re-initializing."""
    from core.database import Base, engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def create_material(code, stock, unit_cost=1.0):
    resp = client.post("/raw-materials", json={
        "code": code,
        "name": code.capitalize(),
        "unit": "kg",
        "unit_cost": unit_cost,
        "current_stock": stock,
        "minimum_stock": 1,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def setup_product():
    steel = create_material("aco", 100.0, unit_cost=3.0)
    paint = create_material("tinta", 10.0, unit_cost=5.0)
    resp = client.post("/products", json={
        "code": "ARM-1",
        "name": "Armário",
        "sale_price": 50,
        "bom": {
            "items": [
                {"raw_material_id": steel["id"], "quantity": 2},
                {"raw_material_id": paint["id"], "quantity": 1},
            ],
            "production_steps": [],
        },
    })
    assert resp.status_code == 200, resp.text
    return resp.json(), steel, paint


def stock_of(material):
    return client.get(f"/raw-materials/{material['id']}").json()["current_stock"]


def create_order(product, quantity, status=None):
    payload = {"product_id": product["id"], "quantity": quantity, "planned_date": PLANNED_DATE}
    if status:
        payload["status"] = status
    return client.post("/production-orders", json=payload)


def move(order, status):
    return client.patch(f"/production-orders/{order['id']}/status", json={"status": status})


def test_validate_production_order(setup_product):
    product, _, _ = setup_product

    resp = client.post("/production-orders/validate", json={
        "product_id": product["id"], "quantity": 5, "planned_date": PLANNED_DATE,
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["is_valid"] is True
    assert data["insufficient_materials"] == []
    assert data["missing_bom"] is False
    # unit cost 2*3 + 1*5 = 11
    assert data["estimated_cost"] == pytest.approx(55.0)

    data = client.post("/production-orders/validate", json={
        "product_id": product["id"], "quantity": 20, "planned_date": PLANNED_DATE,
    }).json()
    assert data["is_valid"] is False
    assert data["insufficient_materials"] == ["Tinta"]


def test_create_order_with_insufficient_stock_is_rejected(setup_product):
    product, _, paint = setup_product

    resp = create_order(product, 20)
    assert resp.status_code == 409
    body = resp.json()
    assert body["codigo"] == "insufficient_stock"
    assert body["materiais"] == ["Tinta"]
    assert stock_of(paint) == 10.0
    assert client.get("/production-orders").json() == []


def test_order_lifecycle_deducts_stock_on_start(setup_product):
    product, steel, paint = setup_product

    resp = create_order(product, 5)
    assert resp.status_code == 200, resp.text
    order = resp.json()
    assert order["status"] == "PLANNED"
    assert order["estimated_cost"] == pytest.approx(55.0)
    assert stock_of(steel) == 100.0

    resp = move(order, "IN_PROGRESS")
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "IN_PROGRESS"
    assert stock_of(steel) == pytest.approx(90.0)
    assert stock_of(paint) == pytest.approx(5.0)

    movements = client.get("/stock/movements", params={"raw_material_id": steel["id"]}).json()
    assert len(movements) == 1
    assert movements[0]["type"] == "OUT"
    assert movements[0]["quantity"] == pytest.approx(10.0)
    assert movements[0]["production_order_id"] == order["id"]

    resp = move(order, "COMPLETED")
    assert resp.status_code == 200
    assert resp.json()["status"] == "COMPLETED"
    assert resp.json()["completed_date"] is not None
    assert stock_of(steel) == pytest.approx(90.0)


def test_invalid_transition_is_rejected(setup_product):
    product, _, _ = setup_product
    order = create_order(product, 1).json()

    resp = move(order, "COMPLETED")
    assert resp.status_code == 422

    assert move(order, "CANCELLED").status_code == 200
    assert move(order, "IN_PROGRESS").status_code == 422


def test_new_order_must_start_planned(setup_product):
    product, _, _ = setup_product
    assert create_order(product, 1, status="IN_PROGRESS").status_code == 422


def test_cancelled_order_skips_stock_check(setup_product):
    product, _, paint = setup_product
    resp = create_order(product, 500, status="CANCELLED")
    assert resp.status_code == 200
    assert resp.json()["estimated_cost"] is None
    assert stock_of(paint) == 10.0


def test_competing_orders_never_overdraw_stock(setup_product):
    product, steel, paint = setup_product
    first = create_order(product, 8).json()
    second = create_order(product, 8).json()

    assert move(first, "IN_PROGRESS").status_code == 200
    assert stock_of(paint) == pytest.approx(2.0)

    resp = move(second, "IN_PROGRESS")
    assert resp.status_code == 409
    assert resp.json()["materiais"] == ["Tinta"]

    # nothing from the rejected order was deducted
    assert stock_of(paint) == pytest.approx(2.0)
    assert stock_of(steel) == pytest.approx(84.0)
    assert client.get(f"/production-orders/{second['id']}").json()["status"] == "PLANNED"


def test_list_orders_by_status(setup_product):
    product, _, _ = setup_product
    order = create_order(product, 1).json()
    create_order(product, 2)
    move(order, "IN_PROGRESS")

    in_progress = client.get("/production-orders", params={"status": "IN_PROGRESS"}).json()
    assert [o["id"] for o in in_progress] == [order["id"]]
    assert len(client.get("/production-orders").json()) == 2


def test_product_without_bom():
    resp = client.post("/products", json={"code": "SOLTO", "name": "Solto", "sale_price": 10})
    product = resp.json()

    data = client.post("/production-orders/validate", json={
        "product_id": product["id"], "quantity": 1, "planned_date": PLANNED_DATE,
    }).json()
    assert data["is_valid"] is False
    assert data["missing_bom"] is True
    assert data["insufficient_materials"] == []
    assert data["estimated_cost"] is None

    resp = create_order(product, 1)
    assert resp.status_code == 422
    assert resp.json()["codigo"] == "missing_bom"


def test_unknown_product_is_not_found():
    resp = create_order({"id": "missing"}, 1)
    assert resp.status_code == 404


def test_stock_consumption_endpoint(setup_product):
    product, _, _ = setup_product
    data = client.post("/stock/consumption", json={"product_id": product["id"], "quantity": 20}).json()

    lines = {line["name"]: line for line in data["lines"]}
    assert lines["Aco"]["required_quantity"] == pytest.approx(40.0)
    assert lines["Aco"]["sufficient"] is True
    assert lines["Tinta"]["sufficient"] is False
    assert data["feasible"] is False


def test_manual_stock_movements():
    material = create_material("cola", 10.0)

    resp = client.post("/stock/movements", json={"raw_material_id": material["id"], "type": "IN", "quantity": 5})
    assert resp.status_code == 200
    assert stock_of(material) == pytest.approx(15.0)

    resp = client.post("/stock/movements", json={
        "raw_material_id": material["id"], "type": "ADJUSTMENT", "quantity": 12, "reason": "Inventário",
    })
    assert resp.status_code == 200
    assert stock_of(material) == pytest.approx(12.0)

    resp = client.post("/stock/movements", json={"raw_material_id": material["id"], "type": "OUT", "quantity": 20})
    assert resp.status_code == 409
    assert stock_of(material) == pytest.approx(12.0)

    resp = client.post("/stock/movements", json={"raw_material_id": material["id"], "type": "OUT", "quantity": 2})
    assert resp.status_code == 200
    assert stock_of(material) == pytest.approx(10.0)
    assert len(client.get("/stock/movements").json()) == 3


def test_reports_endpoints(setup_product):
    product, _, _ = setup_product
    order = create_order(product, 2).json()
    move(order, "IN_PROGRESS")
    move(order, "COMPLETED")

    production = client.get("/analytics/production").json()
    assert production["total_orders"] == 1
    assert production["total_quantity_produced"] == 2
    assert production["completion_rate"] == pytest.approx(100.0)

    inventory = client.get("/analytics/inventory").json()
    assert inventory["total_items"] == 2

    costs = client.get("/analytics/costs").json()
    assert costs["total_raw_materials_cost"] == pytest.approx(11.0)


def test_short_material_named_like_a_missing_bom_is_still_a_stock_error():
    material = client.post("/raw-materials", json={
        "code": "ESTRANHO",
        "name": "Produto sem ficha técnica",
        "unit": "un",
        "unit_cost": 1,
        "current_stock": 0,
    }).json()
    product = client.post("/products", json={
        "code": "P-X",
        "name": "Produto X",
        "sale_price": 10,
        "bom": {"items": [{"raw_material_id": material["id"], "quantity": 1}]},
    }).json()

    resp = create_order(product, 1)
    assert resp.status_code == 409
    assert resp.json()["materiais"] == ["Produto sem ficha técnica"]


def deduct(deductions):
    from core.database import SessionLocal
    db = SessionLocal()
    try:
        movements.apply_deductions(db, deductions, reason="Teste")
        db.commit()
    finally:
        db.close()


def test_apply_deductions_rolls_back_whole_batch(setup_product):
    _, steel, paint = setup_product
    batch = [
        StockDeduction(raw_material_id=steel["id"], name="Aco", quantity=10),
        StockDeduction(raw_material_id=paint["id"], name="Tinta", quantity=50),
    ]

    with pytest.raises(InsufficientStockException) as exc:
        deduct(batch)

    assert exc.value.materials == ["Tinta"]
    assert stock_of(steel) == pytest.approx(100.0)
    assert stock_of(paint) == pytest.approx(10.0)
    assert client.get("/stock/movements").json() == []


def test_apply_deductions_commits_every_line(setup_product):
    _, steel, paint = setup_product
    deduct([
        StockDeduction(raw_material_id=steel["id"], name="Aco", quantity=10),
        StockDeduction(raw_material_id=paint["id"], name="Tinta", quantity=10),
    ])

    assert stock_of(steel) == pytest.approx(90.0)
    assert stock_of(paint) == pytest.approx(0.0)
    recorded = client.get("/stock/movements").json()
    assert sorted(m["raw_material_id"] for m in recorded) == sorted([steel["id"], paint["id"]])
    assert all(m["type"] == "OUT" for m in recorded)
