from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from shopledger.database.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    id_number = Column(String, nullable=False, unique=True)

    email = Column(String, unique=True)
    phone = Column(String)
    address = Column(String)

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


__all__ = ["Customer"]
