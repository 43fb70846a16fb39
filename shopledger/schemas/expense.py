from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ExpenseCreate(BaseModel):
    concept: str = Field(validation_alias=AliasChoices("concept", "concepto"))
    description: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("description", "descripcion"),
    )
    amount: float = Field(validation_alias=AliasChoices("amount", "monto"))
    category: str = Field(validation_alias=AliasChoices("category", "categoria"))
    spent_at: datetime = Field(validation_alias=AliasChoices("spent_at", "fecha"))
    currency: str = Field(validation_alias=AliasChoices("currency", "moneda"))

    model_config = ConfigDict(populate_by_name=True)


class ExpenseRead(BaseModel):
    id: int
    concept: str
    description: Optional[str] = None
    amount: float
    category: str
    spent_at: datetime
    currency: str

    model_config = ConfigDict(from_attributes=True)
