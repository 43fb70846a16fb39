from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from shopledger.database.base import Base

EXPENSE_CATEGORIES = ("empresariales", "personales")


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    concept = Column(String, nullable=False)
    description = Column(String)
    amount = Column(Float, nullable=False)
    category = Column(String, nullable=False)
    currency = Column(String(10), nullable=False)
    spent_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_expenses_spent_at", "spent_at"),
    )


__all__ = ["EXPENSE_CATEGORIES", "Expense"]
