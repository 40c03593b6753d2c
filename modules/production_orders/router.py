from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.settings import get_settings
from modules.production_orders import schemas, service
from modules.production_orders.types import ProductionOrderStatus

router = APIRouter(prefix="/production-orders", tags=["production_orders"])


@router.post("/validate", response_model=schemas.ProductionOrderValidation)
def validate_production_order_endpoint(order_in: schemas.ProductionOrderCreate, db: Session = Depends(get_db)):
    return service.validate_production_order(db, order_in, get_settings())


@router.post("", response_model=schemas.ProductionOrderRead)
def create_production_order_endpoint(order_in: schemas.ProductionOrderCreate, db: Session = Depends(get_db)):
    return service.create_production_order(db, order_in, get_settings())


@router.get("", response_model=list[schemas.ProductionOrderRead])
def list_production_orders_endpoint(status: Optional[ProductionOrderStatus] = None, db: Session = Depends(get_db)):
    return service.list_production_orders(db, status)


@router.get("/{order_id}", response_model=schemas.ProductionOrderRead)
def get_production_order_endpoint(order_id: str, db: Session = Depends(get_db)):
    return service.get_production_order(db, order_id)


@router.patch("/{order_id}/status", response_model=schemas.ProductionOrderRead)
def change_status_endpoint(order_id: str, update_in: schemas.StatusUpdate, db: Session = Depends(get_db)):
    return service.change_status(db, order_id, update_in, get_settings())
