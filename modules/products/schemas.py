from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from core.settings import percent_to_ratio
from modules.raw_materials.schemas import RawMaterialRead


def _ensure_unique_materials(items):
    seen = set()
    for item in items:
        if item.raw_material_id in seen:
            raise ValueError(f"Matéria-prima repetida na ficha técnica: {item.raw_material_id}")
        seen.add(item.raw_material_id)
    return items


class ProductionStepBase(BaseModel):
    name: str = Field(..., min_length=1, description="Etapa")
    description: str = ""
    time_minutes: float = Field(..., ge=0, description="Tempo (min)")
    labor_cost_per_hour: float = Field(..., ge=0, description="Custo mão de obra (por hora)")
    indirect_costs: float = Field(0.0, ge=0, description="Custos indiretos (energia, depreciação)")
    # Informational only, not used by the cost formula
    average_loss: float = Field(0.0, ge=0, description="Perda média da etapa (%)")


class ProductionStepCreate(ProductionStepBase):
    pass


class ProductionStepRead(ProductionStepBase):
    id: Optional[str] = None

    class Config:
        from_attributes = True


class BOMItemCreate(BaseModel):
    raw_material_id: str
    quantity: float = Field(..., gt=0, description="Quantidade por unidade produzida")
    unit: Optional[str] = Field(None, description="Unidade (padrão: unidade da matéria-prima)")


class BOMItemRead(BaseModel):
    raw_material_id: str
    quantity: float = Field(..., gt=0)
    unit: str
    raw_material: RawMaterialRead

    class Config:
        from_attributes = True

    @computed_field
    @property
    def waste_adjusted_quantity(self) -> float:
        return self.quantity * (1 + percent_to_ratio(self.raw_material.waste_percentage))


class BillOfMaterialsCreate(BaseModel):
    items: List[BOMItemCreate] = Field(default_factory=list)
    production_steps: List[ProductionStepCreate] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def check_unique_materials(cls, v: List[BOMItemCreate]) -> List[BOMItemCreate]:
        return _ensure_unique_materials(v)


class BillOfMaterialsRead(BaseModel):
    id: Optional[str] = None
    product_id: Optional[str] = None
    items: List[BOMItemRead] = Field(default_factory=list)
    production_steps: List[ProductionStepRead] = Field(default_factory=list)

    class Config:
        from_attributes = True

    @field_validator("items")
    @classmethod
    def check_unique_materials(cls, v: List[BOMItemRead]) -> List[BOMItemRead]:
        return _ensure_unique_materials(v)

    @computed_field
    @property
    def total_production_time(self) -> float:
        return sum(step.time_minutes for step in self.production_steps)


class ProductBase(BaseModel):
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    unit: str = "un"
    category: str = "Geral"
    sale_price: float = Field(..., ge=0, description="Preço de venda")
    allocated_fixed_cost: float = Field(0.0, ge=0, description="Custo fixo rateado por unidade")
    production_time: float = Field(0.0, ge=0, description="Tempo de produção (min)")
    average_loss_percentage: float = Field(0.0, ge=0, description="Perda média do produto (%)")


class ProductCreate(ProductBase):
    bom: Optional[BillOfMaterialsCreate] = None


class ProductUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    category: Optional[str] = None
    sale_price: Optional[float] = Field(None, ge=0)
    allocated_fixed_cost: Optional[float] = Field(None, ge=0)
    production_time: Optional[float] = Field(None, ge=0)
    average_loss_percentage: Optional[float] = Field(None, ge=0)


class ProductRead(ProductBase):
    id: str
    bom: Optional[BillOfMaterialsRead] = None

    class Config:
        from_attributes = True
