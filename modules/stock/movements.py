"""Persisted stock movements and transactional stock deductions."""

import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from core.errors import InsufficientStockException
from modules.raw_materials import service as raw_material_service
from modules.raw_materials.models import RawMaterial
from modules.stock import models, schemas
from modules.stock.types import MovementType

logger = logging.getLogger(__name__)


def _decrement_with_floor(db: Session, material_id: str, quantity: float) -> bool:
    result = db.execute(
        update(RawMaterial)
        .where(RawMaterial.id == material_id, RawMaterial.current_stock >= quantity)
        .values(current_stock=RawMaterial.current_stock - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def apply_deductions(
    db: Session,
    deductions: List[schemas.StockDeduction],
    production_order_id: Optional[str] = None,
    reason: str = "Consumo de produção",
) -> None:
    """Apply every deduction or none of them.

    Each decrement only succeeds while stock stays non-negative. On the first
    failure the whole session is rolled back, pending caller changes
    included. The caller commits on success.
    """
    failed: List[str] = []
    for deduction in deductions:
        if not _decrement_with_floor(db, deduction.raw_material_id, deduction.quantity):
            failed.append(deduction.name)
            continue
        db.add(
            models.StockMovement(
                raw_material_id=deduction.raw_material_id,
                type=MovementType.OUT.value,
                quantity=deduction.quantity,
                reason=reason,
                production_order_id=production_order_id,
            )
        )

    if failed:
        db.rollback()
        logger.warning("Stock deduction rolled back, insufficient: %s", ", ".join(failed))
        raise InsufficientStockException(failed)

    db.flush()
    db.expire_all()
    logger.info("Applied %d stock deductions", len(deductions), extra={"production_order_id": production_order_id})


def record_movement(db: Session, movement_in: schemas.StockMovementCreate) -> schemas.StockMovementRead:
    material = raw_material_service.get_raw_material_model(db, movement_in.raw_material_id)

    if movement_in.type == MovementType.IN:
        material.current_stock = RawMaterial.current_stock + movement_in.quantity
    elif movement_in.type == MovementType.OUT:
        if not _decrement_with_floor(db, material.id, movement_in.quantity):
            db.rollback()
            raise InsufficientStockException([material.name])
    else:
        material.current_stock = movement_in.quantity

    movement = models.StockMovement(
        raw_material_id=material.id,
        type=movement_in.type.value,
        quantity=movement_in.quantity,
        reason=movement_in.reason,
    )
    db.add(movement)
    db.commit()
    db.refresh(movement)
    logger.info("Stock movement %s of %s on %s", movement.type, movement.quantity, material.code)
    return schemas.StockMovementRead.model_validate(movement)


def list_movements(db: Session, raw_material_id: Optional[str] = None) -> List[schemas.StockMovementRead]:
    query = db.query(models.StockMovement)
    if raw_material_id:
        query = query.filter(models.StockMovement.raw_material_id == raw_material_id)
    movements = query.order_by(models.StockMovement.created_at.desc()).all()
    return [schemas.StockMovementRead.model_validate(m) for m in movements]
