from typing import Dict, List

from pydantic import BaseModel, Field

from modules.raw_materials.schemas import RawMaterialRead


class ProductPerformance(BaseModel):
    product_id: str
    name: str
    profit_margin: float
    contribution_margin: float


class DashboardMetrics(BaseModel):
    total_products: int
    profitable_products: int
    deficitary_products: int
    average_profit_margin: float
    total_inventory_value: float
    critical_stock_items: int
    top_profitable_products: List[ProductPerformance] = Field(default_factory=list)
    bottom_performing_products: List[ProductPerformance] = Field(default_factory=list)


class InventoryReport(BaseModel):
    total_value: float
    total_items: int
    critical_items: List[RawMaterialRead] = Field(default_factory=list)
    low_stock_items: List[RawMaterialRead] = Field(default_factory=list)
    normal_stock_items: List[RawMaterialRead] = Field(default_factory=list)
    average_value: float


class ProductionReport(BaseModel):
    orders_by_status: Dict[str, int]
    total_quantity_produced: int
    average_order_size: float
    completion_rate: float
    total_orders: int


class CategoryCost(BaseModel):
    category: str
    total_cost: float
    product_count: int
    average_cost: float


class CostReport(BaseModel):
    total_raw_materials_cost: float
    total_labor_cost: float
    total_indirect_costs: float
    total_loss_cost: float
    total_cost: float
    costs_by_category: List[CategoryCost] = Field(default_factory=list)
    average_cost_per_product: float
    # Products whose cost is unavailable (no BOM or zero price)
    unavailable_products: List[str] = Field(default_factory=list)
