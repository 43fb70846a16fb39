from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.config import Settings
from shopledger.dependencies import get_app_settings, get_db, require_login
from shopledger.schemas.sale import SaleCreate, SaleItemRead, SaleRead, SaleUpdate
from shopledger.services import sale_service

router = APIRouter(prefix="/sales", tags=["Sales"], dependencies=[Depends(require_login)])


@router.get("", response_model=List[SaleRead])
def list_sales(db: Session = Depends(get_db)):
    return sale_service.list_sales(db)


@router.post("", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return sale_service.create_sale(db, payload, settings)


@router.get("/{sale_id}", response_model=SaleRead)
def get_sale(sale_id: int, db: Session = Depends(get_db)):
    return sale_service.get_sale(db, sale_id)


@router.get("/{sale_id}/items", response_model=List[SaleItemRead])
def list_sale_items(sale_id: int, db: Session = Depends(get_db)):
    return sale_service.list_sale_items(db, sale_id)


@router.put("/{sale_id}", response_model=SaleRead)
def update_sale(sale_id: int, payload: SaleUpdate, db: Session = Depends(get_db)):
    return sale_service.update_sale(db, sale_id, payload)


@router.delete("/{sale_id}")
def delete_sale(sale_id: int, db: Session = Depends(get_db)):
    sale_service.delete_sale(db, sale_id)
    return {"message": "Sale deleted"}


__all__ = ["router"]
