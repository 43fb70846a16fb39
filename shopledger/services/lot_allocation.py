"""
FIFO lot allocation.

Turns "sell N units of product P at price X" into a list of lot consumptions,
oldest lot first, and the realized profit of those units. Nothing is written
until the whole quantity is known to be available, so a failed allocation
leaves every lot untouched.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.core.exceptions import InsufficientStockError, ValidationError
from shopledger.models.lot import ProductLot
from shopledger.models.product import Product

logger = logging.getLogger(__name__)


@dataclass
class LotConsumption:
    lot: ProductLot
    quantity: int
    purchase_price: float
    profit: float


@dataclass
class AllocationResult:
    requested: int
    unit_price: float
    consumptions: List[LotConsumption] = field(default_factory=list)
    profit: float = 0.0

    @property
    def allocated(self) -> int:
        return sum(item.quantity for item in self.consumptions)

    @property
    def shortfall(self) -> int:
        return self.requested - self.allocated


def validate_request(quantity, unit_price) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be an integer greater than 0", field="quantity")
    if unit_price is None or unit_price < 0:
        raise ValidationError("price must be non-negative", field="price")


def plan_allocation(lots: Iterable[ProductLot], quantity: int, unit_price: float) -> AllocationResult:
    """Compute consumptions for ``quantity`` units; lots must already be oldest-first."""
    result = AllocationResult(requested=quantity, unit_price=float(unit_price))
    needed = quantity
    for lot in lots:
        if needed <= 0:
            break
        if lot.remaining <= 0:
            continue
        taken = min(needed, lot.remaining)
        purchase_price = float(lot.purchase_price)
        profit = (result.unit_price - purchase_price) * taken
        result.consumptions.append(
            LotConsumption(lot=lot, quantity=taken, purchase_price=purchase_price, profit=profit)
        )
        result.profit += profit
        needed -= taken
    return result


def load_available_lots(db: Session, product_id: int) -> list[ProductLot]:
    stmt = (
        select(ProductLot)
        .where(ProductLot.product_id == product_id, ProductLot.remaining > 0)
        .order_by(ProductLot.received_at.asc(), ProductLot.id.asc())
        .with_for_update()
    )
    return list(db.execute(stmt).scalars().all())


def allocate_lots(db: Session, product: Product, quantity: int, unit_price: float) -> AllocationResult:
    """Consume ``quantity`` units of ``product`` oldest lot first.

    Raises InsufficientStockError without touching any lot when the available
    lots cannot cover the request. Profit may come back negative; rejecting
    that is the caller's policy.
    """
    validate_request(quantity, unit_price)

    lots = load_available_lots(db, product.id)
    plan = plan_allocation(lots, quantity, unit_price)
    if plan.shortfall > 0:
        raise InsufficientStockError(
            product_id=product.id,
            product_name=product.name,
            requested=quantity,
            available=plan.allocated,
        )

    for consumption in plan.consumptions:
        consumption.lot.remaining -= consumption.quantity
    db.flush()

    logger.debug(
        "Allocated %s units of product %s across %s lots (profit %.2f)",
        quantity,
        product.id,
        len(plan.consumptions),
        plan.profit,
    )
    return plan


__all__ = [
    "AllocationResult",
    "LotConsumption",
    "allocate_lots",
    "load_available_lots",
    "plan_allocation",
    "validate_request",
]
