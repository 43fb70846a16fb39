from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ExchangeRateCreate(BaseModel):
    rate: float = Field(validation_alias=AliasChoices("rate", "tasa"))

    model_config = ConfigDict(populate_by_name=True)


class ExchangeRateRead(BaseModel):
    id: int
    rate: float
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)
