from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.database import get_db
from core.settings import get_settings
from modules.raw_materials import schemas, service
from modules.stock.service import StockService

router = APIRouter(tags=["raw_materials"])


@router.post("/suppliers", response_model=schemas.SupplierRead)
def create_supplier_endpoint(supplier_in: schemas.SupplierCreate, db: Session = Depends(get_db)):
    return service.create_supplier(db, supplier_in)


@router.get("/suppliers", response_model=list[schemas.SupplierRead])
def list_suppliers_endpoint(db: Session = Depends(get_db)):
    return service.list_suppliers(db)


@router.delete("/suppliers/{supplier_id}", status_code=204)
def delete_supplier_endpoint(supplier_id: str, db: Session = Depends(get_db)):
    service.delete_supplier(db, supplier_id)


@router.post("/raw-materials", response_model=schemas.RawMaterialRead)
def create_raw_material_endpoint(material_in: schemas.RawMaterialCreate, db: Session = Depends(get_db)):
    return service.create_raw_material(db, material_in)


@router.get("/raw-materials", response_model=list[schemas.RawMaterialRead])
def list_raw_materials_endpoint(db: Session = Depends(get_db)):
    return service.list_raw_materials(db)


@router.get("/raw-materials/critical", response_model=list[schemas.RawMaterialRead])
def critical_raw_materials_endpoint(db: Session = Depends(get_db)):
    stock_service = StockService(settings=get_settings())
    return stock_service.get_critical_stock_items(service.list_raw_materials(db))


@router.get("/raw-materials/inventory-value", response_model=schemas.InventoryValue)
def inventory_value_endpoint(db: Session = Depends(get_db)):
    stock_service = StockService(settings=get_settings())
    materials = service.list_raw_materials(db)
    return schemas.InventoryValue(
        total_value=stock_service.calculate_inventory_value(materials),
        item_count=len(materials),
    )


@router.get("/raw-materials/{material_id}", response_model=schemas.RawMaterialRead)
def get_raw_material_endpoint(material_id: str, db: Session = Depends(get_db)):
    return service.get_raw_material(db, material_id)


@router.patch("/raw-materials/{material_id}", response_model=schemas.RawMaterialRead)
def update_raw_material_endpoint(
    material_id: str, material_in: schemas.RawMaterialUpdate, db: Session = Depends(get_db)
):
    return service.update_raw_material(db, material_id, material_in)


@router.delete("/raw-materials/{material_id}", status_code=204)
def delete_raw_material_endpoint(material_id: str, db: Session = Depends(get_db)):
    service.delete_raw_material(db, material_id)


@router.get("/raw-materials/{material_id}/rupture", response_model=schemas.RuptureForecast)
def stock_rupture_endpoint(material_id: str, daily_consumption: float = Query(...), db: Session = Depends(get_db)):
    stock_service = StockService(settings=get_settings())
    material = service.get_raw_material(db, material_id)
    return schemas.RuptureForecast(
        raw_material_id=material.id,
        daily_consumption=daily_consumption,
        days_until_rupture=stock_service.predict_stock_rupture(material, daily_consumption),
    )


@router.get("/raw-materials/{material_id}/purchase-suggestion", response_model=schemas.PurchaseSuggestion)
def purchase_suggestion_endpoint(
    material_id: str,
    projected_consumption: float = Query(...),
    days: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    settings = get_settings()
    stock_service = StockService(settings=settings)
    material = service.get_raw_material(db, material_id)
    days_to_project = days or settings.purchase_projection_days
    return schemas.PurchaseSuggestion(
        raw_material_id=material.id,
        projected_consumption=projected_consumption,
        days_to_project=days_to_project,
        suggested_quantity=stock_service.calculate_purchase_suggestion(material, projected_consumption, days_to_project),
    )
