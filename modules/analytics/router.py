from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.settings import get_settings
from modules.analytics import schemas, service
from modules.production_orders import service as production_order_service
from modules.products import service as product_service
from modules.raw_materials import service as raw_material_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=schemas.DashboardMetrics)
def dashboard(db: Session = Depends(get_db)):
    return service.dashboard_metrics(
        product_service.list_products(db), raw_material_service.list_raw_materials(db), get_settings()
    )


@router.get("/inventory", response_model=schemas.InventoryReport)
def inventory(db: Session = Depends(get_db)):
    return service.inventory_report(raw_material_service.list_raw_materials(db), get_settings())


@router.get("/production", response_model=schemas.ProductionReport)
def production(db: Session = Depends(get_db)):
    return service.production_report(production_order_service.list_production_orders(db))


@router.get("/costs", response_model=schemas.CostReport)
def costs(db: Session = Depends(get_db)):
    return service.cost_report(product_service.list_products(db))
