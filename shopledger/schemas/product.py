from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: float
    stock: int = 0
    min_stock: int = Field(0, validation_alias=AliasChoices("min_stock", "minStock"))
    purchase_price: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("purchase_price", "purchasePrice"),
    )

    model_config = ConfigDict(populate_by_name=True)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    min_stock: Optional[int] = Field(None, validation_alias=AliasChoices("min_stock", "minStock"))

    model_config = ConfigDict(populate_by_name=True)


class LotRead(BaseModel):
    id: int
    product_id: int
    quantity: int
    remaining: int
    purchase_price: float
    received_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    min_stock: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductReadWithLots(ProductRead):
    lots: List[LotRead] = Field(default_factory=list)


class StockIngestRequest(BaseModel):
    quantity: int = Field(validation_alias=AliasChoices("quantity", "cantidad"))
    purchase_price: float = Field(
        validation_alias=AliasChoices("purchase_price", "precio", "price"),
    )

    model_config = ConfigDict(populate_by_name=True)


class StockIngestResult(BaseModel):
    product: ProductReadWithLots
    lot: LotRead
