from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from modules.products import schemas, service

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=schemas.ProductRead)
def create_product_endpoint(product_in: schemas.ProductCreate, db: Session = Depends(get_db)):
    return service.create_product(db, product_in)


@router.get("", response_model=list[schemas.ProductRead])
def list_products_endpoint(db: Session = Depends(get_db)):
    return service.list_products(db)


@router.get("/{product_id}", response_model=schemas.ProductRead)
def get_product_endpoint(product_id: str, db: Session = Depends(get_db)):
    return service.get_product(db, product_id)


@router.patch("/{product_id}", response_model=schemas.ProductRead)
def update_product_endpoint(product_id: str, product_in: schemas.ProductUpdate, db: Session = Depends(get_db)):
    return service.update_product(db, product_id, product_in)


@router.put("/{product_id}/bom", response_model=schemas.ProductRead)
def replace_bom_endpoint(product_id: str, bom_in: schemas.BillOfMaterialsCreate, db: Session = Depends(get_db)):
    return service.replace_bom(db, product_id, bom_in)


@router.delete("/{product_id}", status_code=204)
def delete_product_endpoint(product_id: str, db: Session = Depends(get_db)):
    service.delete_product(db, product_id)
