from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CashTransactionCreate(BaseModel):
    occurred_at: datetime = Field(validation_alias=AliasChoices("occurred_at", "fecha"))
    concept: str = Field(validation_alias=AliasChoices("concept", "concepto"))
    currency: str = Field(validation_alias=AliasChoices("currency", "moneda"))
    amount_in: Optional[float] = Field(None, validation_alias=AliasChoices("amount_in", "entrada"))
    amount_out: Optional[float] = Field(None, validation_alias=AliasChoices("amount_out", "salida"))
    exchange_rate: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("exchange_rate", "tasaCambio"),
    )

    model_config = ConfigDict(populate_by_name=True)


class CashTransactionRead(BaseModel):
    id: int
    occurred_at: datetime
    concept: str
    currency: str
    amount_in: float
    amount_out: float
    balance: float
    exchange_rate: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
