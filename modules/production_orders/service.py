import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core.errors import InsufficientStockException, MissingBOMException, NotFoundException, ValidationAppException
from core.models import utcnow
from core.settings import Settings
from modules.costing import engine as costing_engine
from modules.production_orders import models, schemas
from modules.production_orders.types import ALLOWED_TRANSITIONS, ProductionOrderStatus
from modules.products import service as product_service
from modules.raw_materials import service as raw_material_service
from modules.stock import movements
from modules.stock.service import StockService

logger = logging.getLogger(__name__)


def validate_production_order(
    db: Session, order_in: schemas.ProductionOrderCreate, settings: Settings
) -> schemas.ProductionOrderValidation:
    product = product_service.get_product(db, order_in.product_id)
    if product.bom is None:
        return schemas.ProductionOrderValidation(is_valid=False, missing_bom=True)

    stock_service = StockService(settings=settings)
    check = stock_service.check_production_order(order_in, product.bom, raw_material_service.list_raw_materials(db))

    calculation = costing_engine.try_calculate_product_cost(product)
    estimated_cost = calculation.total_unit_cost * order_in.quantity if calculation is not None else None

    return schemas.ProductionOrderValidation(
        is_valid=check.success,
        insufficient_materials=check.insufficient_materials,
        estimated_cost=estimated_cost,
    )


def create_production_order(
    db: Session, order_in: schemas.ProductionOrderCreate, settings: Settings
) -> schemas.ProductionOrderRead:
    if order_in.status not in (ProductionOrderStatus.PLANNED, ProductionOrderStatus.CANCELLED):
        raise ValidationAppException("Novas ordens devem ser criadas como PLANNED")

    estimated_cost: Optional[float] = None
    if order_in.status == ProductionOrderStatus.CANCELLED:
        product_service.get_product_model(db, order_in.product_id)
    else:
        validation = validate_production_order(db, order_in, settings)
        if validation.missing_bom:
            raise MissingBOMException()
        if not validation.is_valid:
            logger.warning(
                "Production order for product %s rejected, insufficient: %s",
                order_in.product_id,
                ", ".join(validation.insufficient_materials),
            )
            raise InsufficientStockException(validation.insufficient_materials)
        estimated_cost = validation.estimated_cost

    order = models.ProductionOrder(
        product_id=order_in.product_id,
        quantity=order_in.quantity,
        status=order_in.status.value,
        planned_date=order_in.planned_date,
        estimated_cost=estimated_cost,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(
        "Production order %s created: %d x product %s",
        order.id,
        order.quantity,
        order.product_id,
        extra={"production_order_id": order.id},
    )
    return _to_record(order)


def change_status(
    db: Session, order_id: str, update_in: schemas.StatusUpdate, settings: Settings
) -> schemas.ProductionOrderRead:
    order = _get_production_order_model(db, order_id)
    current = ProductionOrderStatus(order.status)
    target = update_in.status
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ValidationAppException(f"Transição de status inválida: {current.value} -> {target.value}")

    if target == ProductionOrderStatus.IN_PROGRESS:
        _consume_stock(db, order, settings)
    elif target == ProductionOrderStatus.COMPLETED:
        order.completed_date = update_in.completed_date or utcnow()
        if update_in.actual_cost is not None:
            order.actual_cost = update_in.actual_cost

    order.status = target.value
    db.commit()
    db.refresh(order)
    logger.info(
        "Production order %s moved %s -> %s",
        order.id,
        current.value,
        target.value,
        extra={"production_order_id": order.id},
    )
    return _to_record(order)


def _consume_stock(db: Session, order: models.ProductionOrder, settings: Settings) -> None:
    product = product_service.get_product(db, order.product_id)
    if product.bom is None:
        raise MissingBOMException()
    stock_service = StockService(settings=settings)
    check = stock_service.check_production_order(order, product.bom, raw_material_service.list_raw_materials(db))
    if not check.success:
        raise InsufficientStockException(check.insufficient_materials)
    movements.apply_deductions(db, check.deductions, production_order_id=order.id)


def list_production_orders(db: Session, status: Optional[ProductionOrderStatus] = None) -> List[schemas.ProductionOrderRead]:
    query = db.query(models.ProductionOrder)
    if status is not None:
        query = query.filter(models.ProductionOrder.status == status.value)
    orders = query.order_by(models.ProductionOrder.planned_date).all()
    return [_to_record(o) for o in orders]


def get_production_order(db: Session, order_id: str) -> schemas.ProductionOrderRead:
    return _to_record(_get_production_order_model(db, order_id))


def _get_production_order_model(db: Session, order_id: str) -> models.ProductionOrder:
    order = db.query(models.ProductionOrder).filter(models.ProductionOrder.id == order_id).first()
    if not order:
        raise NotFoundException("Ordem de produção não encontrada")
    return order


def _to_record(order: models.ProductionOrder) -> schemas.ProductionOrderRead:
    return schemas.ProductionOrderRead.model_validate(order)
