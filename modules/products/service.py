import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import NotFoundException, ValidationAppException
from modules.costing.models import CostSnapshot
from modules.production_orders.models import ProductionOrder
from modules.products import models, schemas
from modules.raw_materials import service as raw_material_service

logger = logging.getLogger(__name__)


def to_record(product: models.Product) -> schemas.ProductRead:
    return schemas.ProductRead.model_validate(product)


def _build_bom(db: Session, bom_in: schemas.BillOfMaterialsCreate) -> models.BillOfMaterials:
    bom = models.BillOfMaterials()
    for position, item in enumerate(bom_in.items):
        material = raw_material_service.find_raw_material_model(db, item.raw_material_id)
        if not material:
            raise NotFoundException(f"Matéria-prima não encontrada: {item.raw_material_id}")
        bom.items.append(
            models.BOMItem(
                raw_material_id=material.id,
                raw_material=material,
                quantity=item.quantity,
                unit=item.unit or material.unit,
                position=position,
            )
        )
    for position, step in enumerate(bom_in.production_steps):
        bom.production_steps.append(models.ProductionStep(position=position, **step.model_dump()))
    return bom


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationAppException("Código de produto já cadastrado") from exc


def create_product(db: Session, product_in: schemas.ProductCreate) -> schemas.ProductRead:
    product = models.Product(**product_in.model_dump(exclude={"bom"}))
    if product_in.bom is not None:
        product.bom = _build_bom(db, product_in.bom)

    db.add(product)
    _commit(db)
    db.refresh(product)
    logger.info("Product %s created (%s), bom=%s", product.code, product.id, product.bom is not None)
    return to_record(product)


def update_product(db: Session, product_id: str, product_in: schemas.ProductUpdate) -> schemas.ProductRead:
    product = get_product_model(db, product_id)
    for field, value in product_in.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(product, field, value)
    _commit(db)
    db.refresh(product)
    return to_record(product)


def replace_bom(db: Session, product_id: str, bom_in: schemas.BillOfMaterialsCreate) -> schemas.ProductRead:
    product = get_product_model(db, product_id)
    new_bom = _build_bom(db, bom_in)
    if product.bom is not None:
        db.delete(product.bom)
        db.flush()
    product.bom = new_bom
    db.commit()
    db.refresh(product)
    logger.info("BOM replaced for product %s: %d items, %d steps", product.id, len(new_bom.items), len(new_bom.production_steps))
    return to_record(product)


def delete_product(db: Session, product_id: str) -> None:
    product = get_product_model(db, product_id)
    in_use = db.query(ProductionOrder).filter(ProductionOrder.product_id == product_id).first()
    if in_use is not None:
        raise ValidationAppException("Produto possui ordens de produção")
    db.query(CostSnapshot).filter(CostSnapshot.product_id == product_id).delete()
    db.delete(product)
    db.commit()


def list_products(db: Session) -> List[schemas.ProductRead]:
    products = db.query(models.Product).order_by(models.Product.name).all()
    return [to_record(p) for p in products]


def get_product(db: Session, product_id: str) -> schemas.ProductRead:
    return to_record(get_product_model(db, product_id))


def get_product_model(db: Session, product_id: str) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise NotFoundException("Produto não encontrado")
    return product
