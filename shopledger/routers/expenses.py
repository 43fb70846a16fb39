from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db, require_login
from shopledger.schemas.expense import ExpenseCreate, ExpenseRead
from shopledger.services import expense_service

router = APIRouter(prefix="/gastos", tags=["Expenses"], dependencies=[Depends(require_login)])


@router.get("", response_model=List[ExpenseRead])
def list_expenses(db: Session = Depends(get_db)):
    return expense_service.list_expenses(db)


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    return expense_service.create_expense(db, payload)


@router.delete("/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    expense_service.delete_expense(db, expense_id)
    return {"message": "Expense deleted"}


__all__ = ["router"]
