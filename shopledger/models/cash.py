from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from shopledger.database.base import Base


class CashTransaction(Base):
    __tablename__ = "cash_transactions"

    id = Column(Integer, primary_key=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False)
    concept = Column(String, nullable=False)
    currency = Column(String(10), nullable=False)

    amount_in = Column(Float, nullable=False, default=0)
    amount_out = Column(Float, nullable=False, default=0)
    balance = Column(Float, nullable=False, default=0)
    exchange_rate = Column(Float)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_cash_transactions_occurred", "occurred_at", "id"),
    )


__all__ = ["CashTransaction"]
