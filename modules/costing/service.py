import logging

from sqlalchemy.orm import Session

from core.errors import NotFoundException
from modules.costing import engine, models, schemas
from modules.products import service as product_service

logger = logging.getLogger(__name__)


def calculate_for_product(db: Session, product_id: str) -> schemas.CostCalculation:
    product = product_service.get_product(db, product_id)
    return engine.calculate_product_cost(product)


def save_cost_snapshot(db: Session, product_id: str) -> schemas.CostSnapshotRead:
    """Recalculate the product cost and upsert it as the product's snapshot."""
    calculation = calculate_for_product(db, product_id)
    snapshot = db.query(models.CostSnapshot).filter(models.CostSnapshot.product_id == product_id).first()
    if snapshot is None:
        snapshot = models.CostSnapshot(product_id=product_id)
        db.add(snapshot)
    for field, value in calculation.model_dump(exclude={"product_id"}).items():
        setattr(snapshot, field, value)
    db.commit()
    db.refresh(snapshot)
    logger.info(
        "Cost snapshot saved for product %s: unit cost %.2f",
        product_id,
        calculation.total_unit_cost,
        extra={"product_id": product_id},
    )
    return schemas.CostSnapshotRead.model_validate(snapshot)


def get_cost_snapshot(db: Session, product_id: str) -> schemas.CostSnapshotRead:
    snapshot = db.query(models.CostSnapshot).filter(models.CostSnapshot.product_id == product_id).first()
    if snapshot is None:
        raise NotFoundException("Nenhum cálculo de custo salvo para o produto")
    return schemas.CostSnapshotRead.model_validate(snapshot)
