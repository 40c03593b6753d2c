from typing import List, Optional

from pydantic import BaseModel, Field


class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1, description="Razão social")
    contact: str = Field("", description="Pessoa de contato")
    email: str = ""
    phone: str = ""
    lead_time_days: float = Field(0.0, ge=0, description="Prazo de entrega (dias)")


class SupplierCreate(SupplierBase):
    pass


class SupplierRead(SupplierBase):
    id: str

    class Config:
        from_attributes = True


class RawMaterialBase(BaseModel):
    code: str = Field(..., min_length=1, description="Código interno")
    name: str = Field(..., min_length=1, description="Nome da matéria-prima")
    unit: str = Field(..., min_length=1, description="Unidade de medida")
    unit_cost: float = Field(..., ge=0, description="Custo unitário")
    current_stock: float = Field(0.0, ge=0, description="Estoque atual")
    minimum_stock: float = Field(0.0, ge=0, description="Estoque mínimo")
    waste_percentage: float = Field(0.0, ge=0, description="Desperdício médio (%)")


class RawMaterialCreate(RawMaterialBase):
    supplier_ids: List[str] = Field(default_factory=list)


class RawMaterialUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    unit_cost: Optional[float] = Field(None, ge=0)
    current_stock: Optional[float] = Field(None, ge=0)
    minimum_stock: Optional[float] = Field(None, ge=0)
    waste_percentage: Optional[float] = Field(None, ge=0)
    supplier_ids: Optional[List[str]] = None


class RawMaterialRead(RawMaterialBase):
    id: str
    suppliers: List[SupplierRead] = Field(default_factory=list)

    class Config:
        from_attributes = True


class RuptureForecast(BaseModel):
    raw_material_id: str
    daily_consumption: float
    # None means no rupture is expected
    days_until_rupture: Optional[int] = None


class PurchaseSuggestion(BaseModel):
    raw_material_id: str
    projected_consumption: float
    days_to_project: int
    suggested_quantity: float


class InventoryValue(BaseModel):
    total_value: float
    item_count: int
