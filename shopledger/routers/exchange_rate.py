from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db, require_login
from shopledger.schemas.exchange_rate import ExchangeRateCreate, ExchangeRateRead
from shopledger.services import exchange_rate_service

router = APIRouter(prefix="/tasa-cambio", tags=["Exchange rate"], dependencies=[Depends(require_login)])


@router.get("", response_model=ExchangeRateRead)
def latest_rate(db: Session = Depends(get_db)):
    return exchange_rate_service.latest_rate(db)


@router.get("/history", response_model=List[ExchangeRateRead])
def rate_history(
    limit: int = Query(30, ge=1, le=365, description="Max records to return"),
    db: Session = Depends(get_db),
):
    return exchange_rate_service.list_rates(db, limit=limit)


@router.post("", response_model=ExchangeRateRead, status_code=status.HTTP_201_CREATED)
def record_rate(payload: ExchangeRateCreate, db: Session = Depends(get_db)):
    return exchange_rate_service.record_rate(db, payload.rate)


__all__ = ["router"]
