import logging
from datetime import timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.core.exceptions import NotFoundError, ValidationError
from shopledger.database.session import unit_of_work
from shopledger.models.expense import EXPENSE_CATEGORIES, Expense
from shopledger.schemas.expense import ExpenseCreate

logger = logging.getLogger(__name__)


def list_expenses(db: Session) -> list[Expense]:
    stmt = select(Expense).order_by(Expense.spent_at.desc(), Expense.id.desc())
    return list(db.execute(stmt).scalars().all())


def create_expense(db: Session, payload: ExpenseCreate) -> Expense:
    concept = (payload.concept or "").strip()
    category = (payload.category or "").strip().lower()
    currency = (payload.currency or "").strip()
    if not concept or not category or not currency or payload.amount is None:
        raise ValidationError("concept, amount, category, spent_at and currency are required")
    if payload.amount <= 0:
        raise ValidationError("amount must be greater than 0", field="amount")
    if category not in EXPENSE_CATEGORIES:
        raise ValidationError(
            "category must be one of {}".format(", ".join(EXPENSE_CATEGORIES)),
            field="category",
        )

    spent_at = payload.spent_at
    if spent_at.tzinfo is None:
        spent_at = spent_at.replace(tzinfo=timezone.utc)
    else:
        spent_at = spent_at.astimezone(timezone.utc)

    with unit_of_work(db):
        expense = Expense(
            concept=concept,
            description=payload.description,
            amount=float(payload.amount),
            category=category,
            currency=currency,
            spent_at=spent_at,
        )
        db.add(expense)
    logger.info("Recorded expense %s: %.2f %s (%s)", expense.id, expense.amount, currency, category)
    return expense


def delete_expense(db: Session, expense_id: int) -> None:
    with unit_of_work(db):
        expense = db.get(Expense, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        db.delete(expense)
    logger.info("Deleted expense %s", expense_id)


__all__ = ["create_expense", "delete_expense", "list_expenses"]
