import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import NotFoundException, ValidationAppException
from modules.products.models import BOMItem
from modules.raw_materials import models, schemas

logger = logging.getLogger(__name__)


def to_record(material: models.RawMaterial) -> schemas.RawMaterialRead:
    return schemas.RawMaterialRead.model_validate(material)


def create_supplier(db: Session, supplier_in: schemas.SupplierCreate) -> schemas.SupplierRead:
    supplier = models.Supplier(**supplier_in.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return schemas.SupplierRead.model_validate(supplier)


def list_suppliers(db: Session) -> List[schemas.SupplierRead]:
    suppliers = db.query(models.Supplier).order_by(models.Supplier.name).all()
    return [schemas.SupplierRead.model_validate(s) for s in suppliers]


def delete_supplier(db: Session, supplier_id: str) -> None:
    supplier = db.query(models.Supplier).filter(models.Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundException("Fornecedor não encontrado")
    db.query(models.MaterialSupplierLink).filter(models.MaterialSupplierLink.supplier_id == supplier_id).delete()
    db.delete(supplier)
    db.commit()


def _build_links(db: Session, supplier_ids: List[str]) -> List[models.MaterialSupplierLink]:
    links = []
    seen = set()
    for position, supplier_id in enumerate(supplier_ids):
        if supplier_id in seen:
            continue
        seen.add(supplier_id)
        supplier = db.query(models.Supplier).filter(models.Supplier.id == supplier_id).first()
        if not supplier:
            raise NotFoundException("Fornecedor não encontrado")
        links.append(models.MaterialSupplierLink(supplier_id=supplier_id, supplier=supplier, position=position))
    return links


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationAppException("Código de matéria-prima já cadastrado") from exc


def create_raw_material(db: Session, material_in: schemas.RawMaterialCreate) -> schemas.RawMaterialRead:
    data = material_in.model_dump(exclude={"supplier_ids"})
    material = models.RawMaterial(**data)
    material.supplier_links = _build_links(db, material_in.supplier_ids)
    db.add(material)
    _commit(db)
    db.refresh(material)
    logger.info("Raw material %s created (%s)", material.code, material.id)
    return to_record(material)


def update_raw_material(
    db: Session, material_id: str, material_in: schemas.RawMaterialUpdate
) -> schemas.RawMaterialRead:
    material = get_raw_material_model(db, material_id)
    changes = material_in.model_dump(exclude_unset=True, exclude={"supplier_ids"})
    for field, value in changes.items():
        if value is None:
            continue
        setattr(material, field, value)
    if material_in.supplier_ids is not None:
        material.supplier_links = _build_links(db, material_in.supplier_ids)
    _commit(db)
    db.refresh(material)
    return to_record(material)


def delete_raw_material(db: Session, material_id: str) -> None:
    material = get_raw_material_model(db, material_id)
    in_use = db.query(BOMItem).filter(BOMItem.raw_material_id == material_id).first()
    if in_use is not None:
        raise ValidationAppException("Matéria-prima em uso em uma ficha técnica")
    db.delete(material)
    db.commit()


def list_raw_materials(db: Session) -> List[schemas.RawMaterialRead]:
    materials = db.query(models.RawMaterial).order_by(models.RawMaterial.name).all()
    return [to_record(m) for m in materials]


def get_raw_material(db: Session, material_id: str) -> schemas.RawMaterialRead:
    return to_record(get_raw_material_model(db, material_id))


def get_raw_material_model(db: Session, material_id: str) -> models.RawMaterial:
    material = find_raw_material_model(db, material_id)
    if not material:
        raise NotFoundException("Matéria-prima não encontrada")
    return material


def find_raw_material_model(db: Session, material_id: str) -> Optional[models.RawMaterial]:
    return db.query(models.RawMaterial).filter(models.RawMaterial.id == material_id).first()
