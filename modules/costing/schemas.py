from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CostCalculation(BaseModel):
    product_id: str
    raw_materials_cost: float
    labor_cost: float
    indirect_costs: float
    loss_cost: float
    total_production_cost: float
    fixed_cost_allocation: float
    total_unit_cost: float
    profit_margin: float
    profit_margin_percentage: float
    # 0 means the product never breaks even at this price
    break_even_point: float
    contribution_margin: float
    calculated_at: datetime

    class Config:
        from_attributes = True


class PriceSimulationRequest(BaseModel):
    new_sale_price: float = Field(..., ge=0, description="Novo preço de venda")


class VolumeSimulationRequest(BaseModel):
    target_profit: float = Field(..., description="Lucro desejado")


class VolumeSimulationResult(BaseModel):
    product_id: str
    target_profit: float
    required_volume: int


class RawMaterialSimulationRequest(BaseModel):
    raw_material_id: str
    new_unit_cost: float = Field(..., ge=0, description="Novo custo unitário")


class BreakEvenRequest(BaseModel):
    fixed_costs: float = Field(..., ge=0)
    sale_price: float = Field(..., ge=0)
    variable_cost_per_unit: float = Field(..., ge=0)


class BreakEvenResult(BreakEvenRequest):
    contribution_margin: float
    break_even_point: float
    viable: bool


class CostSnapshotRead(CostCalculation):
    id: Optional[str] = None
