from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from shopledger.schemas.customer import CustomerRead

SaleStatus = Literal["pending", "completed", "cancelled"]
PaymentType = Literal["contado", "credito"]


class SaleItemCreate(BaseModel):
    product_id: int = Field(validation_alias=AliasChoices("product_id", "productId"))
    quantity: int
    price: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True)


class SaleCreate(BaseModel):
    customer_id: int = Field(validation_alias=AliasChoices("customer_id", "customerId"))
    items: List[SaleItemCreate] = Field(default_factory=list)
    invoice_number: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("invoice_number", "invoiceNumber"),
    )
    payment_type: PaymentType = Field(
        "contado",
        validation_alias=AliasChoices("payment_type", "paymentType"),
    )
    payment_method: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("payment_method", "paymentMethod"),
    )
    bank: Optional[str] = None
    amount_paid: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("amount_paid", "amountPaid"),
    )
    status: Optional[SaleStatus] = None

    model_config = ConfigDict(populate_by_name=True)


class SaleUpdate(BaseModel):
    amount_paid: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("amount_paid", "amountPaid"),
    )
    status: Optional[SaleStatus] = None

    model_config = ConfigDict(populate_by_name=True)


class LotAllocationRead(BaseModel):
    lot_id: int
    quantity: int
    purchase_price: float

    model_config = ConfigDict(from_attributes=True)


class SaleItemRead(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    price: float
    profit: float
    allocations: List[LotAllocationRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class SaleRead(BaseModel):
    id: int
    customer_id: int
    customer: Optional[CustomerRead] = None
    total: float
    profit: float
    status: SaleStatus
    invoice_number: str
    payment_type: PaymentType
    payment_method: str
    bank: Optional[str] = None
    amount_paid: float
    created_at: datetime
    items: List[SaleItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
