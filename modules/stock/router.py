from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import MissingBOMException
from core.settings import get_settings
from modules.products import service as product_service
from modules.raw_materials import service as raw_material_service
from modules.stock import movements, schemas
from modules.stock.service import StockService

router = APIRouter(prefix="/stock", tags=["stock"])


@router.post("/consumption", response_model=schemas.ConsumptionResult)
def calculate_consumption(request: schemas.ConsumptionRequest, db: Session = Depends(get_db)):
    product = product_service.get_product(db, request.product_id)
    if product.bom is None:
        raise MissingBOMException()
    stock_service = StockService(settings=get_settings())
    consumption = stock_service.calculate_stock_consumption(product.bom, request.quantity)

    items_by_material = {item.raw_material_id: item for item in product.bom.items}
    lines = []
    for material_id, required_quantity in consumption.items():
        material = items_by_material[material_id].raw_material
        lines.append(
            schemas.ConsumptionLine(
                raw_material_id=material_id,
                name=material.name,
                unit=items_by_material[material_id].unit,
                required_quantity=required_quantity,
                current_stock=material.current_stock,
                sufficient=material.current_stock >= required_quantity,
            )
        )
    return schemas.ConsumptionResult(
        product_id=product.id,
        quantity=request.quantity,
        lines=lines,
        feasible=all(line.sufficient for line in lines),
    )


@router.post("/movements", response_model=schemas.StockMovementRead)
def create_movement(movement_in: schemas.StockMovementCreate, db: Session = Depends(get_db)):
    return movements.record_movement(db, movement_in)


@router.get("/movements", response_model=list[schemas.StockMovementRead])
def list_movements(raw_material_id: Optional[str] = None, db: Session = Depends(get_db)):
    if raw_material_id:
        raw_material_service.get_raw_material_model(db, raw_material_id)
    return movements.list_movements(db, raw_material_id)
