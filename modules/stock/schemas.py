from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from modules.stock.types import MovementType


class StockDeduction(BaseModel):
    raw_material_id: str
    name: str
    quantity: float


class StockCheckResult(BaseModel):
    success: bool
    insufficient_materials: List[str] = Field(default_factory=list)
    # Empty unless success is True
    deductions: List[StockDeduction] = Field(default_factory=list)


class ConsumptionRequest(BaseModel):
    product_id: str
    quantity: float = Field(..., gt=0)


class ConsumptionLine(BaseModel):
    raw_material_id: str
    name: str
    unit: str
    required_quantity: float
    current_stock: float
    sufficient: bool


class ConsumptionResult(BaseModel):
    product_id: str
    quantity: float
    lines: List[ConsumptionLine] = Field(default_factory=list)
    feasible: bool


class StockMovementCreate(BaseModel):
    raw_material_id: str
    type: MovementType
    quantity: float = Field(..., ge=0, description="Quantidade (ajuste: novo saldo)")
    reason: str = ""


class StockMovementRead(BaseModel):
    id: str
    raw_material_id: str
    type: MovementType
    quantity: float
    reason: str
    production_order_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
