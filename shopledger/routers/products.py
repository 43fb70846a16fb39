from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db, require_login
from shopledger.schemas.product import (
    LotRead,
    ProductCreate,
    ProductRead,
    ProductReadWithLots,
    ProductUpdate,
    StockIngestRequest,
    StockIngestResult,
)
from shopledger.services import product_service

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(require_login)])


@router.get("")
def list_products(
    include: Optional[str] = Query(None, description="Use 'lots' to embed each product's lots"),
    db: Session = Depends(get_db),
):
    include_lots = include == "lots"
    products = product_service.list_products(db, include_lots=include_lots)
    schema = ProductReadWithLots if include_lots else ProductRead
    return [schema.model_validate(product) for product in products]


@router.post("", response_model=ProductReadWithLots, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return product_service.create_product(db, payload)


@router.get("/{product_id}", response_model=ProductReadWithLots)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_service.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    return product_service.update_product(db, product_id, payload)


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product_service.delete_product(db, product_id)
    return {"message": "Product deleted"}


@router.post("/{product_id}/ingreso", response_model=StockIngestResult)
def ingest_stock(product_id: int, payload: StockIngestRequest, db: Session = Depends(get_db)):
    product, lot = product_service.ingest_stock(
        db,
        product_id,
        payload.quantity,
        payload.purchase_price,
    )
    return StockIngestResult(
        product=ProductReadWithLots.model_validate(product),
        lot=LotRead.model_validate(lot),
    )


__all__ = ["router"]
