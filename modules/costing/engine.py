"""Unit economics of a product derived from its bill of materials.

Every function here is pure: records go in, numbers or a fresh
``CostCalculation`` come out, and caller-owned records are never mutated.
Simulations work on ``model_copy`` copies of the product.
"""

import math
from datetime import datetime, timezone
from typing import Optional

from core.errors import DegenerateInputException, MissingBOMException
from core.settings import minutes_to_hours, percent_to_ratio
from modules.costing.schemas import CostCalculation
from modules.products.schemas import BillOfMaterialsRead, ProductRead


def compute_raw_materials_cost(bom: BillOfMaterialsRead) -> float:
    total = 0.0
    for item in bom.items:
        adjusted_quantity = item.quantity * (1 + percent_to_ratio(item.raw_material.waste_percentage))
        total += adjusted_quantity * item.raw_material.unit_cost
    return total


def compute_labor_cost(bom: BillOfMaterialsRead) -> float:
    return sum(minutes_to_hours(step.time_minutes) * step.labor_cost_per_hour for step in bom.production_steps)


def compute_indirect_costs(bom: BillOfMaterialsRead) -> float:
    # Step-level average_loss is not part of this formula; only the
    # product-level loss percentage feeds compute_loss_cost.
    return sum(step.indirect_costs for step in bom.production_steps)


def compute_loss_cost(
    raw_materials_cost: float,
    labor_cost: float,
    indirect_costs: float,
    loss_percentage: float,
) -> float:
    base_cost = raw_materials_cost + labor_cost + indirect_costs
    return base_cost * percent_to_ratio(loss_percentage)


def compute_break_even_point(fixed_costs: float, sale_price: float, variable_cost_per_unit: float) -> float:
    """Units needed to cover ``fixed_costs``.

    Returns 0 when the contribution margin is zero or negative; callers must
    read that as "never breaks even", not "already at break-even".
    """
    contribution_margin = sale_price - variable_cost_per_unit
    if contribution_margin <= 0:
        return 0.0
    return fixed_costs / contribution_margin


def calculate_product_cost(product: ProductRead) -> CostCalculation:
    """Full cost breakdown for one unit of ``product``.

    Raises MissingBOMException when the product has no BOM and
    DegenerateInputException when ``sale_price`` is zero, since the margin
    percentage would be undefined.
    """
    if product.bom is None:
        raise MissingBOMException()
    if product.sale_price == 0:
        raise DegenerateInputException()

    bom = product.bom
    raw_materials_cost = compute_raw_materials_cost(bom)
    labor_cost = compute_labor_cost(bom)
    indirect_costs = compute_indirect_costs(bom)
    loss_cost = compute_loss_cost(raw_materials_cost, labor_cost, indirect_costs, product.average_loss_percentage)

    total_production_cost = raw_materials_cost + labor_cost + indirect_costs + loss_cost
    total_unit_cost = total_production_cost + product.allocated_fixed_cost
    profit_margin = product.sale_price - total_unit_cost
    profit_margin_percentage = profit_margin / product.sale_price * 100
    contribution_margin = product.sale_price - total_production_cost
    break_even_point = compute_break_even_point(
        product.allocated_fixed_cost, product.sale_price, total_production_cost
    )

    return CostCalculation(
        product_id=product.id,
        raw_materials_cost=raw_materials_cost,
        labor_cost=labor_cost,
        indirect_costs=indirect_costs,
        loss_cost=loss_cost,
        total_production_cost=total_production_cost,
        fixed_cost_allocation=product.allocated_fixed_cost,
        total_unit_cost=total_unit_cost,
        profit_margin=profit_margin,
        profit_margin_percentage=profit_margin_percentage,
        break_even_point=break_even_point,
        contribution_margin=contribution_margin,
        calculated_at=datetime.now(timezone.utc),
    )


def try_calculate_product_cost(product: ProductRead) -> Optional[CostCalculation]:
    """Like calculate_product_cost, but None when the cost is unavailable."""
    try:
        return calculate_product_cost(product)
    except (MissingBOMException, DegenerateInputException):
        return None


def simulate_price_impact(product: ProductRead, new_sale_price: float) -> CostCalculation:
    return calculate_product_cost(product.model_copy(update={"sale_price": new_sale_price}))


def simulate_volume_for_target_profit(product: ProductRead, target_profit: float) -> int:
    calculation = calculate_product_cost(product)
    if calculation.contribution_margin <= 0:
        return 0
    required_volume = (product.allocated_fixed_cost + target_profit) / calculation.contribution_margin
    return math.ceil(required_volume)


def simulate_raw_material_impact(product: ProductRead, raw_material_id: str, new_unit_cost: float) -> CostCalculation:
    if product.bom is None:
        raise MissingBOMException()

    items = []
    for item in product.bom.items:
        if item.raw_material_id == raw_material_id:
            material = item.raw_material.model_copy(update={"unit_cost": new_unit_cost})
            item = item.model_copy(update={"raw_material": material})
        items.append(item)

    bom = product.bom.model_copy(update={"items": items})
    return calculate_product_cost(product.model_copy(update={"bom": bom}))
