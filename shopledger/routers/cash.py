from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db, require_login
from shopledger.schemas.cash import CashTransactionCreate, CashTransactionRead
from shopledger.services import cash_service

router = APIRouter(prefix="/caja", tags=["Cash"], dependencies=[Depends(require_login)])


@router.get("", response_model=List[CashTransactionRead])
def list_transactions(db: Session = Depends(get_db)):
    return cash_service.list_cash_transactions(db)


@router.get("/balance")
def balance(db: Session = Depends(get_db)):
    return {
        "balance": cash_service.current_balance(db),
        "by_currency": cash_service.balance_by_currency(db),
    }


@router.post("", response_model=CashTransactionRead, status_code=status.HTTP_201_CREATED)
def create_transaction(payload: CashTransactionCreate, db: Session = Depends(get_db)):
    return cash_service.create_cash_transaction(db, payload)


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    rebalanced = cash_service.delete_cash_transaction(db, transaction_id)
    return {"message": "Transaction deleted", "rebalanced": rebalanced}


__all__ = ["router"]
