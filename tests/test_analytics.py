import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from core.settings import Settings
from modules.analytics import service
from modules.production_orders.schemas import ProductionOrderRead
from modules.products.schemas import BillOfMaterialsRead, BOMItemRead, ProductRead
from modules.raw_materials.schemas import RawMaterialRead


def build_material(material_id="rm-1", stock=100.0, minimum=10.0, unit_cost=10.0):
    return RawMaterialRead(
        id=material_id,
        code=material_id.upper(),
        name=f"Material {material_id}",
        unit="un",
        unit_cost=unit_cost,
        current_stock=stock,
        minimum_stock=minimum,
        waste_percentage=0.0,
    )


def build_product(product_id, sale_price, material_qty=1.0, category="Geral", with_bom=True):
    bom = None
    if with_bom:
        material = build_material()
        bom = BillOfMaterialsRead(
            items=[BOMItemRead(raw_material_id=material.id, quantity=material_qty, unit="un", raw_material=material)]
        )
    return ProductRead(
        id=product_id,
        code=product_id.upper(),
        name=f"Produto {product_id}",
        category=category,
        sale_price=sale_price,
        bom=bom,
    )


def build_order(order_id, status, quantity):
    return ProductionOrderRead(
        id=order_id,
        product_id="p-1",
        quantity=quantity,
        status=status,
        planned_date="2026-03-01T08:00:00",
        created_at="2026-02-20T08:00:00",
    )


def test_dashboard_metrics_skip_products_without_cost():
    products = [
        build_product("p-1", sale_price=30.0),  # unit cost 10, margin 20
        build_product("p-2", sale_price=8.0),  # margin -2
        build_product("p-3", sale_price=50.0, with_bom=False),
    ]
    materials = [build_material("rm-1", stock=5.0, minimum=10.0), build_material("rm-2", stock=100.0)]

    metrics = service.dashboard_metrics(products, materials, Settings(dashboard_top_n=5))

    assert metrics.total_products == 3
    assert metrics.profitable_products == 1
    assert metrics.deficitary_products == 1
    assert metrics.average_profit_margin == pytest.approx((20.0 / 30.0 * 100 + -2.0 / 8.0 * 100) / 2)
    assert metrics.total_inventory_value == pytest.approx(1050.0)
    assert metrics.critical_stock_items == 1
    assert [p.product_id for p in metrics.top_profitable_products] == ["p-1", "p-2"]
    assert [p.product_id for p in metrics.bottom_performing_products] == ["p-2", "p-1"]


def test_dashboard_metrics_respect_top_n():
    products = [build_product(f"p-{i}", sale_price=10.0 + i) for i in range(4)]
    metrics = service.dashboard_metrics(products, [], Settings(dashboard_top_n=2))
    assert [p.product_id for p in metrics.top_profitable_products] == ["p-3", "p-2"]
    assert [p.product_id for p in metrics.bottom_performing_products] == ["p-0", "p-1"]


def test_dashboard_metrics_empty():
    metrics = service.dashboard_metrics([], [], Settings())
    assert metrics.average_profit_margin == 0
    assert metrics.top_profitable_products == []


def test_inventory_report_groups_by_stock_level():
    materials = [
        build_material("rm-1", stock=10.0, minimum=10.0),
        build_material("rm-2", stock=14.0, minimum=10.0),
        build_material("rm-3", stock=40.0, minimum=10.0),
    ]
    report = service.inventory_report(materials, Settings(low_stock_factor=1.5))

    assert [m.id for m in report.critical_items] == ["rm-1"]
    assert [m.id for m in report.low_stock_items] == ["rm-2"]
    assert [m.id for m in report.normal_stock_items] == ["rm-3"]
    assert report.total_value == pytest.approx(640.0)
    assert report.average_value == pytest.approx(640.0 / 3)


def test_production_report():
    orders = [
        build_order("o-1", "COMPLETED", 10),
        build_order("o-2", "COMPLETED", 20),
        build_order("o-3", "PLANNED", 30),
        build_order("o-4", "CANCELLED", 40),
    ]
    report = service.production_report(orders)

    assert report.orders_by_status == {"PLANNED": 1, "IN_PROGRESS": 0, "COMPLETED": 2, "CANCELLED": 1}
    assert report.total_quantity_produced == 30
    assert report.average_order_size == pytest.approx(25.0)
    assert report.completion_rate == pytest.approx(50.0)
    assert report.total_orders == 4


def test_production_report_without_orders():
    report = service.production_report([])
    assert report.completion_rate == 0
    assert report.average_order_size == 0


def test_cost_report_by_category():
    products = [
        build_product("p-1", sale_price=30.0, material_qty=1.0, category="Móveis"),
        build_product("p-2", sale_price=30.0, material_qty=2.0, category="Móveis"),
        build_product("p-3", sale_price=30.0, material_qty=3.0, category="Decoração"),
        build_product("p-4", sale_price=30.0, with_bom=False),
    ]
    report = service.cost_report(products)

    assert report.total_raw_materials_cost == pytest.approx(60.0)
    assert report.total_cost == pytest.approx(60.0)
    assert report.average_cost_per_product == pytest.approx(20.0)
    assert report.unavailable_products == ["p-4"]
    by_category = {c.category: c for c in report.costs_by_category}
    assert by_category["Móveis"].product_count == 2
    assert by_category["Móveis"].average_cost == pytest.approx(15.0)
    assert by_category["Decoração"].total_cost == pytest.approx(30.0)
