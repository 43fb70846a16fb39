from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from shopledger.database.base import Base

SALE_STATUSES = ("pending", "completed", "cancelled")
PAYMENT_TYPES = ("contado", "credito")


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)

    total = Column(Float, nullable=False, default=0)
    profit = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending")

    invoice_number = Column(String, nullable=False)
    payment_type = Column(String(20), nullable=False, default="contado")
    payment_method = Column(String, nullable=False)
    bank = Column(String)
    amount_paid = Column(Float, nullable=False, default=0)

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

    customer = relationship("Customer")
    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SaleItem.id",
    )

    __table_args__ = (
        Index("idx_sales_customer", "customer_id"),
        Index("idx_sales_created_at", "created_at"),
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    profit = Column(Float, nullable=False, default=0)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")
    allocations = relationship(
        "LotAllocation",
        back_populates="sale_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="LotAllocation.id",
    )

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        Index("idx_sale_items_sale", "sale_id"),
        Index("idx_sale_items_product", "product_id"),
    )


class LotAllocation(Base):
    """Units of one lot consumed by one sale line."""

    __tablename__ = "lot_allocations"

    id = Column(Integer, primary_key=True)
    sale_item_id = Column(Integer, ForeignKey("sale_items.id", ondelete="CASCADE"), nullable=False)
    lot_id = Column(Integer, ForeignKey("product_lots.id", ondelete="CASCADE"), nullable=False)

    quantity = Column(Integer, nullable=False)
    purchase_price = Column(Float, nullable=False)

    sale_item = relationship("SaleItem", back_populates="allocations")
    lot = relationship("ProductLot")

    __table_args__ = (
        Index("idx_lot_allocations_item", "sale_item_id"),
    )


__all__ = ["LotAllocation", "PAYMENT_TYPES", "SALE_STATUSES", "Sale", "SaleItem"]
