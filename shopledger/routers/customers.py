from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db, require_login
from shopledger.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from shopledger.schemas.sale import SaleRead
from shopledger.services import customer_service, sale_service

router = APIRouter(prefix="/customers", tags=["Customers"], dependencies=[Depends(require_login)])


@router.get("", response_model=List[CustomerRead])
def list_customers(db: Session = Depends(get_db)):
    return customer_service.list_customers(db)


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    return customer_service.create_customer(db, payload)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return customer_service.get_customer(db, customer_id)


@router.get("/{customer_id}/sales", response_model=List[SaleRead])
def customer_sales(customer_id: int, db: Session = Depends(get_db)):
    return sale_service.list_customer_sales(db, customer_id)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    return customer_service.update_customer(db, customer_id, payload)


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    customer_service.delete_customer(db, customer_id)
    return {"message": "Customer deleted"}


__all__ = ["router"]
