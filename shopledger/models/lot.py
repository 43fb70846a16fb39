from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from shopledger.database.base import Base


class ProductLot(Base):
    __tablename__ = "product_lots"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    quantity = Column(Integer, nullable=False)
    remaining = Column(Integer, nullable=False)
    purchase_price = Column(Float, nullable=False)

    received_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    product = relationship("Product", back_populates="lots")

    __table_args__ = (
        CheckConstraint("remaining >= 0 AND remaining <= quantity", name="ck_product_lots_remaining"),
        Index("idx_product_lots_fifo", "product_id", "received_at"),
    )


__all__ = ["ProductLot"]
