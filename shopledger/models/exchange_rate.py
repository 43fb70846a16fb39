from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer

from shopledger.database.base import Base


class ExchangeRate(Base):
    __tablename__ = "exchange_rates"

    id = Column(Integer, primary_key=True)
    rate = Column(Float, nullable=False)
    recorded_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_exchange_rates_recorded", "recorded_at"),
    )


__all__ = ["ExchangeRate"]
