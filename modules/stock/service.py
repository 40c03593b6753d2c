import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from core.settings import Settings, percent_to_ratio
from modules.products.schemas import BillOfMaterialsRead
from modules.raw_materials.schemas import RawMaterialRead
from modules.stock.schemas import StockCheckResult, StockDeduction
from modules.stock.types import OrderQuantity, StockLevel


class StockService:
    """Raw-material consumption and stock sufficiency over in-memory records."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def calculate_stock_consumption(self, bom: BillOfMaterialsRead, quantity: float) -> Dict[str, float]:
        consumption: Dict[str, float] = defaultdict(float)
        for item in bom.items:
            adjusted_quantity = item.quantity * (1 + percent_to_ratio(item.raw_material.waste_percentage))
            consumption[item.raw_material_id] += adjusted_quantity * quantity
        return dict(consumption)

    def check_production_order(
        self, order: OrderQuantity, bom: BillOfMaterialsRead, raw_materials: Iterable[RawMaterialRead]
    ) -> StockCheckResult:
        """Read-only feasibility check of ``order.quantity`` units against stock."""
        consumption = self.calculate_stock_consumption(bom, order.quantity)
        materials_by_id = {m.id: m for m in raw_materials}

        insufficient: List[str] = []
        deductions: List[StockDeduction] = []
        for material_id, required_quantity in consumption.items():
            material = materials_by_id.get(material_id)
            if material is None or material.current_stock < required_quantity:
                insufficient.append(material.name if material is not None else material_id)
                continue
            deductions.append(
                StockDeduction(raw_material_id=material_id, name=material.name, quantity=required_quantity)
            )

        if insufficient:
            return StockCheckResult(success=False, insufficient_materials=insufficient)
        return StockCheckResult(success=True, deductions=deductions)

    def process_production_order(
        self, order: OrderQuantity, bom: BillOfMaterialsRead, raw_materials: List[RawMaterialRead]
    ) -> StockCheckResult:
        """Check the order and, only if every material suffices, deduct stock.

        All deductions are computed and validated before the first one is
        applied, so a failed check leaves every record untouched.
        """
        result = self.check_production_order(order, bom, raw_materials)
        if result.success:
            self.apply_deductions(result.deductions, raw_materials)
        return result

    @staticmethod
    def apply_deductions(deductions: List[StockDeduction], raw_materials: Iterable[RawMaterialRead]) -> None:
        materials_by_id = {m.id: m for m in raw_materials}
        for deduction in deductions:
            materials_by_id[deduction.raw_material_id].current_stock -= deduction.quantity

    def predict_stock_rupture(self, material: RawMaterialRead, daily_consumption_rate: float) -> Optional[int]:
        """Whole days until stock runs out; None when no rupture is expected."""
        if daily_consumption_rate <= 0:
            return None
        return math.floor(material.current_stock / daily_consumption_rate)

    def calculate_purchase_suggestion(
        self,
        material: RawMaterialRead,
        projected_consumption_rate: float,
        days_to_project: Optional[int] = None,
    ) -> float:
        if days_to_project is None:
            days_to_project = self.settings.purchase_projection_days
        projected_stock = material.current_stock - projected_consumption_rate * days_to_project
        safety_stock = material.minimum_stock * self.settings.safety_stock_factor

        if projected_stock < safety_stock:
            lead_time = material.suppliers[0].lead_time_days if material.suppliers else 0
            lead_time_consumption = projected_consumption_rate * lead_time
            return max(0.0, safety_stock - projected_stock + lead_time_consumption)
        return 0.0

    def get_critical_stock_items(self, raw_materials: Iterable[RawMaterialRead]) -> List[RawMaterialRead]:
        return [m for m in raw_materials if m.current_stock <= m.minimum_stock]

    def calculate_inventory_value(self, raw_materials: Iterable[RawMaterialRead]) -> float:
        return sum(m.current_stock * m.unit_cost for m in raw_materials)

    def classify_stock_level(self, material: RawMaterialRead) -> StockLevel:
        if material.current_stock <= material.minimum_stock:
            return StockLevel.CRITICAL
        if material.current_stock <= material.minimum_stock * self.settings.low_stock_factor:
            return StockLevel.LOW
        return StockLevel.NORMAL
