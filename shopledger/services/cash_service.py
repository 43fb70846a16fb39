"""
Cash register ledger with a stored running balance.

Each row keeps ``balance = previous balance + amount_in - amount_out`` where
"previous" is the row before it in (occurred_at, id) order. Inserting a
back-dated row or deleting any row rebalances every later row in ascending
order. The rebalance is a read-then-write-many sequence inside one
transaction; it takes no lock, so concurrent ledger writes can still race.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from shopledger.core.exceptions import NotFoundError, ValidationError
from shopledger.database.session import unit_of_work
from shopledger.models.cash import CashTransaction
from shopledger.schemas.cash import CashTransactionCreate

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _ledger_order():
    return CashTransaction.occurred_at.asc(), CashTransaction.id.asc()


def _balance_before(db: Session, occurred_at: datetime, tx_id: Optional[int]) -> float:
    """Balance of the latest row strictly before (occurred_at, tx_id)."""
    if tx_id is None:
        condition = CashTransaction.occurred_at <= occurred_at
    else:
        condition = or_(
            CashTransaction.occurred_at < occurred_at,
            and_(CashTransaction.occurred_at == occurred_at, CashTransaction.id < tx_id),
        )
    previous = (
        db.execute(
            select(CashTransaction)
            .where(condition)
            .order_by(CashTransaction.occurred_at.desc(), CashTransaction.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
    return float(previous.balance) if previous is not None else 0.0


def _rebalance_after(db: Session, occurred_at: datetime, tx_id: int, starting_balance: float) -> int:
    later = (
        db.execute(
            select(CashTransaction)
            .where(
                or_(
                    CashTransaction.occurred_at > occurred_at,
                    and_(CashTransaction.occurred_at == occurred_at, CashTransaction.id > tx_id),
                )
            )
            .order_by(*_ledger_order())
        )
        .scalars()
        .all()
    )
    balance = starting_balance
    for row in later:
        balance += float(row.amount_in) - float(row.amount_out)
        row.balance = balance
    return len(later)


def list_cash_transactions(db: Session) -> list[CashTransaction]:
    stmt = select(CashTransaction).order_by(
        CashTransaction.occurred_at.desc(), CashTransaction.id.desc()
    )
    return list(db.execute(stmt).scalars().all())


def current_balance(db: Session) -> float:
    last = (
        db.execute(
            select(CashTransaction)
            .order_by(CashTransaction.occurred_at.desc(), CashTransaction.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
    return float(last.balance) if last is not None else 0.0


def create_cash_transaction(db: Session, payload: CashTransactionCreate) -> CashTransaction:
    concept = (payload.concept or "").strip()
    currency = (payload.currency or "").strip()
    if not concept or not currency or (payload.amount_in is None and payload.amount_out is None):
        raise ValidationError("occurred_at, concept, currency and an amount are required")
    amount_in = float(payload.amount_in or 0)
    amount_out = float(payload.amount_out or 0)
    if amount_in < 0 or amount_out < 0:
        raise ValidationError("amounts must be non-negative")

    occurred_at = _as_utc(payload.occurred_at)
    with unit_of_work(db):
        previous_balance = _balance_before(db, occurred_at, None)
        transaction = CashTransaction(
            occurred_at=occurred_at,
            concept=concept,
            currency=currency,
            amount_in=amount_in,
            amount_out=amount_out,
            balance=previous_balance + amount_in - amount_out,
            exchange_rate=payload.exchange_rate,
        )
        db.add(transaction)
        db.flush()
        rebalanced = _rebalance_after(db, occurred_at, transaction.id, transaction.balance)

    if rebalanced:
        logger.info("Back-dated cash transaction %s rebalanced %s later row(s)", transaction.id, rebalanced)
    return transaction


def delete_cash_transaction(db: Session, transaction_id: int) -> int:
    """Delete a transaction and return how many later rows were rebalanced."""
    with unit_of_work(db):
        transaction = db.get(CashTransaction, transaction_id)
        if transaction is None:
            raise NotFoundError("CashTransaction", transaction_id)
        occurred_at = _as_utc(transaction.occurred_at)
        starting_balance = _balance_before(db, occurred_at, transaction.id)
        db.delete(transaction)
        db.flush()
        rebalanced = _rebalance_after(db, occurred_at, transaction_id, starting_balance)

    logger.info("Deleted cash transaction %s; rebalanced %s later row(s)", transaction_id, rebalanced)
    return rebalanced


def balance_by_currency(db: Session) -> dict[str, float]:
    totals: dict[str, float] = {}
    for row in db.execute(select(CashTransaction).order_by(*_ledger_order())).scalars():
        totals[row.currency] = totals.get(row.currency, 0.0) + float(row.amount_in) - float(row.amount_out)
    return totals


__all__ = [
    "balance_by_currency",
    "create_cash_transaction",
    "current_balance",
    "delete_cash_transaction",
    "list_cash_transactions",
]
