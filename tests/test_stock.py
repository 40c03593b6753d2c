import pathlib
import sys
from dataclasses import dataclass

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from core.settings import Settings
from modules.products.schemas import BillOfMaterialsRead, BOMItemRead
from modules.production_orders.schemas import ProductionOrderCreate
from modules.raw_materials.schemas import RawMaterialRead, SupplierRead
from modules.stock.service import StockService
from modules.stock.types import StockLevel


def build_material(material_id="rm-1", stock=100.0, minimum=10.0, waste=0.0, unit_cost=2.0, suppliers=None):
    return RawMaterialRead(
        id=material_id,
        code=material_id.upper(),
        name=f"Material {material_id}",
        unit="kg",
        unit_cost=unit_cost,
        current_stock=stock,
        minimum_stock=minimum,
        waste_percentage=waste,
        suppliers=suppliers or [],
    )


def build_bom(*items):
    return BillOfMaterialsRead(
        items=[BOMItemRead(raw_material_id=m.id, quantity=qty, unit=m.unit, raw_material=m) for m, qty in items]
    )


def build_order(quantity):
    return ProductionOrderCreate(product_id="prod-1", quantity=quantity, planned_date="2026-01-15T08:00:00")


@pytest.fixture
def stock_service():
    return StockService(settings=Settings(safety_stock_factor=1.2, purchase_projection_days=30))


def test_consumption_is_waste_adjusted(stock_service):
    material = build_material(waste=10.0)
    consumption = stock_service.calculate_stock_consumption(build_bom((material, 10.0)), 5)
    assert consumption == {"rm-1": pytest.approx(55.0)}


def test_consumption_of_empty_bom_is_empty(stock_service):
    assert stock_service.calculate_stock_consumption(build_bom(), 10) == {}


def test_exact_stock_is_sufficient(stock_service):
    material = build_material(stock=50.0)
    bom = build_bom((material, 10.0))

    result = stock_service.process_production_order(build_order(5), bom, [material])

    assert result.success is True
    assert result.insufficient_materials == []
    assert material.current_stock == 0


def test_exact_waste_adjusted_stock_is_sufficient(stock_service):
    material = build_material(waste=10.0)
    bom = build_bom((material, 10.0))
    material.current_stock = stock_service.calculate_stock_consumption(bom, 3)["rm-1"]

    result = stock_service.process_production_order(build_order(3), bom, [material])

    assert result.success is True


def test_no_partial_deduction_when_one_material_is_short(stock_service):
    steel = build_material("rm-1", stock=100.0)
    paint = build_material("rm-2", stock=1.0)
    bom = build_bom((steel, 2.0), (paint, 1.0))

    result = stock_service.process_production_order(build_order(5), bom, [steel, paint])

    assert result.success is False
    assert result.insufficient_materials == ["Material rm-2"]
    assert result.deductions == []
    assert steel.current_stock == 100.0
    assert paint.current_stock == 1.0


def test_successful_order_deducts_every_material(stock_service):
    steel = build_material("rm-1", stock=100.0)
    paint = build_material("rm-2", stock=10.0)
    bom = build_bom((steel, 2.0), (paint, 1.0))

    result = stock_service.process_production_order(build_order(5), bom, [steel, paint])

    assert result.success is True
    assert {d.raw_material_id: d.quantity for d in result.deductions} == {"rm-1": 10.0, "rm-2": 5.0}
    assert steel.current_stock == 90.0
    assert paint.current_stock == 5.0


def test_material_missing_from_collection_is_reported_by_id(stock_service):
    steel = build_material("rm-1")
    bom = build_bom((steel, 1.0))

    result = stock_service.check_production_order(build_order(1), bom, [])

    assert result.success is False
    assert result.insufficient_materials == ["rm-1"]


def test_check_production_order_is_read_only(stock_service):
    steel = build_material("rm-1", stock=100.0)
    result = stock_service.check_production_order(build_order(5), build_bom((steel, 2.0)), [steel])
    assert result.success is True
    assert steel.current_stock == 100.0


def test_check_accepts_any_object_with_quantity(stock_service):
    @dataclass
    class Run:
        quantity: int

    steel = build_material("rm-1", stock=10.0)
    order = Run(quantity=4)

    result = stock_service.check_production_order(order, build_bom((steel, 2.0)), [steel])

    assert result.success is True
    assert result.deductions[0].quantity == pytest.approx(8.0)


def test_predict_stock_rupture(stock_service):
    material = build_material(stock=100.0)
    assert stock_service.predict_stock_rupture(material, 30.0) == 3
    assert stock_service.predict_stock_rupture(material, 0) is None
    assert stock_service.predict_stock_rupture(material, -5.0) is None


def test_purchase_suggestion_uses_first_supplier_lead_time(stock_service):
    suppliers = [
        SupplierRead(id="s-1", name="Aços SA", lead_time_days=7),
        SupplierRead(id="s-2", name="Metal Ltda", lead_time_days=30),
    ]
    material = build_material(stock=100.0, minimum=50.0, suppliers=suppliers)
    # projected = 100 - 5*30 = -50; safety = 60; lead-time term = 5*7
    assert stock_service.calculate_purchase_suggestion(material, 5.0) == pytest.approx(145.0)


def test_purchase_suggestion_without_suppliers(stock_service):
    material = build_material(stock=100.0, minimum=50.0)
    assert stock_service.calculate_purchase_suggestion(material, 5.0) == pytest.approx(110.0)
    assert stock_service.calculate_purchase_suggestion(material, 5.0, days_to_project=10) == pytest.approx(10.0)


def test_purchase_suggestion_zero_when_stock_is_enough(stock_service):
    material = build_material(stock=1000.0, minimum=50.0)
    assert stock_service.calculate_purchase_suggestion(material, 5.0) == 0


def test_purchase_suggestion_never_negative(stock_service):
    suppliers = [SupplierRead(id="s-1", name="Aços SA", lead_time_days=1000)]
    material = build_material(stock=0.0, minimum=100.0, suppliers=suppliers)
    assert stock_service.calculate_purchase_suggestion(material, -1.0, days_to_project=1) == 0
    assert stock_service.calculate_purchase_suggestion(material, 1e9, days_to_project=365) >= 0


def test_critical_stock_boundary_is_inclusive(stock_service):
    at_minimum = build_material("rm-1", stock=10.0, minimum=10.0)
    below = build_material("rm-2", stock=5.0, minimum=10.0)
    above = build_material("rm-3", stock=11.0, minimum=10.0)

    critical = stock_service.get_critical_stock_items([at_minimum, below, above])

    assert [m.id for m in critical] == ["rm-1", "rm-2"]


def test_inventory_value(stock_service):
    materials = [build_material("rm-1", stock=10.0, unit_cost=2.5), build_material("rm-2", stock=4.0, unit_cost=10.0)]
    assert stock_service.calculate_inventory_value(materials) == pytest.approx(65.0)
    assert stock_service.calculate_inventory_value([]) == 0


def test_classify_stock_level(stock_service):
    assert stock_service.classify_stock_level(build_material(stock=10.0, minimum=10.0)) == StockLevel.CRITICAL
    assert stock_service.classify_stock_level(build_material(stock=15.0, minimum=10.0)) == StockLevel.LOW
    assert stock_service.classify_stock_level(build_material(stock=15.1, minimum=10.0)) == StockLevel.NORMAL
