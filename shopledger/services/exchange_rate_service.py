import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.core.exceptions import NotFoundError, ValidationError
from shopledger.database.session import unit_of_work
from shopledger.models.exchange_rate import ExchangeRate

logger = logging.getLogger(__name__)


def _latest_first():
    return ExchangeRate.recorded_at.desc(), ExchangeRate.id.desc()


def record_rate(db: Session, rate: float, *, recorded_at: Optional[datetime] = None) -> ExchangeRate:
    if isinstance(rate, bool) or rate is None or rate <= 0:
        raise ValidationError("rate must be a positive number", field="rate")
    with unit_of_work(db):
        entry = ExchangeRate(rate=float(rate), recorded_at=recorded_at or datetime.now(timezone.utc))
        db.add(entry)
    logger.info("Recorded exchange rate %s", entry.rate)
    return entry


def latest_rate(db: Session) -> ExchangeRate:
    entry = db.execute(select(ExchangeRate).order_by(*_latest_first()).limit(1)).scalars().first()
    if entry is None:
        raise NotFoundError("ExchangeRate", "latest")
    return entry


def list_rates(db: Session, limit: int = 30) -> list[ExchangeRate]:
    stmt = select(ExchangeRate).order_by(*_latest_first()).limit(limit)
    return list(db.execute(stmt).scalars().all())


__all__ = ["latest_rate", "list_rates", "record_rate"]
