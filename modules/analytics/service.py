"""Aggregate metrics for the dashboard and the report views.

Products whose cost is unavailable are left out of every profitability
figure instead of counting as zero.
"""

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from core.settings import Settings
from modules.analytics import schemas
from modules.costing import engine as costing_engine
from modules.costing.schemas import CostCalculation
from modules.production_orders.schemas import ProductionOrderRead
from modules.production_orders.types import ProductionOrderStatus
from modules.products.schemas import ProductRead
from modules.raw_materials.schemas import RawMaterialRead
from modules.stock.service import StockService
from modules.stock.types import StockLevel


def _costable(products: Sequence[ProductRead]) -> Tuple[List[Tuple[ProductRead, CostCalculation]], List[str]]:
    calculated = []
    unavailable = []
    for product in products:
        calculation = costing_engine.try_calculate_product_cost(product)
        if calculation is None:
            unavailable.append(product.id)
            continue
        calculated.append((product, calculation))
    return calculated, unavailable


def _performance(product: ProductRead, calculation: CostCalculation) -> schemas.ProductPerformance:
    return schemas.ProductPerformance(
        product_id=product.id,
        name=product.name,
        profit_margin=calculation.profit_margin,
        contribution_margin=calculation.contribution_margin,
    )


def dashboard_metrics(
    products: Sequence[ProductRead], raw_materials: Sequence[RawMaterialRead], settings: Settings
) -> schemas.DashboardMetrics:
    stock_service = StockService(settings=settings)
    calculated, _ = _costable(products)

    profitable = [pc for pc in calculated if pc[1].profit_margin > 0]
    average_margin = (
        sum(c.profit_margin_percentage for _, c in calculated) / len(calculated) if calculated else 0.0
    )
    ranked = sorted(calculated, key=lambda pc: pc[1].profit_margin, reverse=True)
    top_n = settings.dashboard_top_n

    return schemas.DashboardMetrics(
        total_products=len(products),
        profitable_products=len(profitable),
        deficitary_products=len(calculated) - len(profitable),
        average_profit_margin=average_margin,
        total_inventory_value=stock_service.calculate_inventory_value(raw_materials),
        critical_stock_items=len(stock_service.get_critical_stock_items(raw_materials)),
        top_profitable_products=[_performance(p, c) for p, c in ranked[:top_n]],
        bottom_performing_products=[_performance(p, c) for p, c in reversed(ranked[-top_n:])],
    )


def inventory_report(raw_materials: Sequence[RawMaterialRead], settings: Settings) -> schemas.InventoryReport:
    stock_service = StockService(settings=settings)
    levels: Dict[StockLevel, List[RawMaterialRead]] = defaultdict(list)
    for material in raw_materials:
        levels[stock_service.classify_stock_level(material)].append(material)

    total_value = stock_service.calculate_inventory_value(raw_materials)
    return schemas.InventoryReport(
        total_value=total_value,
        total_items=len(raw_materials),
        critical_items=levels[StockLevel.CRITICAL],
        low_stock_items=levels[StockLevel.LOW],
        normal_stock_items=levels[StockLevel.NORMAL],
        average_value=total_value / len(raw_materials) if raw_materials else 0.0,
    )


def production_report(orders: Sequence[ProductionOrderRead]) -> schemas.ProductionReport:
    by_status = {status.value: 0 for status in ProductionOrderStatus}
    for order in orders:
        by_status[order.status.value] += 1

    total_orders = len(orders)
    produced = sum(o.quantity for o in orders if o.status == ProductionOrderStatus.COMPLETED)
    return schemas.ProductionReport(
        orders_by_status=by_status,
        total_quantity_produced=produced,
        average_order_size=sum(o.quantity for o in orders) / total_orders if total_orders else 0.0,
        completion_rate=by_status[ProductionOrderStatus.COMPLETED.value] / total_orders * 100 if total_orders else 0.0,
        total_orders=total_orders,
    )


def cost_report(products: Sequence[ProductRead]) -> schemas.CostReport:
    calculated, unavailable = _costable(products)

    totals = {"raw": 0.0, "labor": 0.0, "indirect": 0.0, "loss": 0.0}
    categories: Dict[str, Dict[str, float]] = defaultdict(lambda: {"total_cost": 0.0, "product_count": 0})
    for product, calculation in calculated:
        totals["raw"] += calculation.raw_materials_cost
        totals["labor"] += calculation.labor_cost
        totals["indirect"] += calculation.indirect_costs
        totals["loss"] += calculation.loss_cost
        entry = categories[product.category]
        entry["total_cost"] += calculation.total_unit_cost
        entry["product_count"] += 1

    total_cost = sum(totals.values())
    costs_by_category = [
        schemas.CategoryCost(
            category=category,
            total_cost=data["total_cost"],
            product_count=int(data["product_count"]),
            average_cost=data["total_cost"] / data["product_count"],
        )
        for category, data in sorted(categories.items())
    ]
    return schemas.CostReport(
        total_raw_materials_cost=totals["raw"],
        total_labor_cost=totals["labor"],
        total_indirect_costs=totals["indirect"],
        total_loss_cost=totals["loss"],
        total_cost=total_cost,
        costs_by_category=costs_by_category,
        average_cost_per_product=total_cost / len(calculated) if calculated else 0.0,
        unavailable_products=unavailable,
    )
