from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from modules.production_orders.types import ProductionOrderStatus


class ProductionOrderBase(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0, description="Quantidade a produzir")
    planned_date: datetime
    status: ProductionOrderStatus = ProductionOrderStatus.PLANNED


class ProductionOrderCreate(ProductionOrderBase):
    pass


class ProductionOrderRead(ProductionOrderBase):
    id: str
    completed_date: Optional[datetime] = None
    actual_cost: Optional[float] = None
    estimated_cost: Optional[float] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProductionOrderValidation(BaseModel):
    is_valid: bool
    missing_bom: bool = False
    insufficient_materials: List[str] = Field(default_factory=list)
    # None means the cost could not be calculated, which is not the same as 0
    estimated_cost: Optional[float] = None


class StatusUpdate(BaseModel):
    status: ProductionOrderStatus
    completed_date: Optional[datetime] = None
    actual_cost: Optional[float] = Field(None, ge=0)
