"""
Sale workflow.

A sale is created, paid down and deleted inside a single unit of work each:
customer and item validation, FIFO lot allocation per line, aggregate stock
decrement, totals and the initial payment state either all land together or
none of them do.
"""

import logging
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shopledger.config import Settings, get_settings
from shopledger.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ShopLedgerError,
    ValidationError,
)
from shopledger.database.session import unit_of_work
from shopledger.models.customer import Customer
from shopledger.models.sales import PAYMENT_TYPES, SALE_STATUSES, LotAllocation, Sale, SaleItem
from shopledger.schemas.sale import SaleCreate, SaleUpdate
from shopledger.services.customer_service import get_customer
from shopledger.services.lot_allocation import allocate_lots
from shopledger.services.product_service import get_product

logger = logging.getLogger(__name__)


def _sale_query():
    return select(Sale).options(
        selectinload(Sale.customer),
        selectinload(Sale.items).selectinload(SaleItem.product),
        selectinload(Sale.items).selectinload(SaleItem.allocations),
    )


def _default_invoice_number(prefix: str) -> str:
    return "{}-{}".format(prefix, int(time.time() * 1000))


def _validate_items(payload: SaleCreate) -> None:
    if not payload.items:
        raise ValidationError("A sale must contain at least one product", field="items")
    for index, item in enumerate(payload.items):
        if item.product_id is None:
            raise ValidationError("product_id is required", field="items[{}].product_id".format(index))
        if item.quantity is None or item.quantity <= 0:
            raise ValidationError(
                "quantity must be greater than 0",
                field="items[{}].quantity".format(index),
            )
        if item.price is not None and item.price < 0:
            raise ValidationError("price must be non-negative", field="items[{}].price".format(index))


def initial_payment_state(payment_type: str, total: float, amount_paid: Optional[float], status: Optional[str]):
    """Return (status, amount_paid) for a new sale."""
    if payment_type == "contado":
        return "completed", total

    paid = float(amount_paid or 0)
    if paid < 0:
        raise ValidationError("amount_paid must be non-negative", field="amount_paid")
    if paid > total:
        raise ValidationError("amount_paid cannot exceed the sale total", field="amount_paid")
    if total > 0 and paid >= total:
        return "completed", paid
    return status or "pending", paid


def list_sales(db: Session) -> list[Sale]:
    stmt = _sale_query().order_by(Sale.created_at.desc(), Sale.id.desc())
    return list(db.execute(stmt).scalars().all())


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = db.execute(_sale_query().where(Sale.id == sale_id)).scalars().first()
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    return sale


def list_customer_sales(db: Session, customer_id: int) -> list[Sale]:
    get_customer(db, customer_id)
    stmt = (
        _sale_query()
        .where(Sale.customer_id == customer_id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_sale_items(db: Session, sale_id: int) -> list[SaleItem]:
    return list(get_sale(db, sale_id).items)


def create_sale(db: Session, payload: SaleCreate, settings: Optional[Settings] = None) -> Sale:
    settings = settings or get_settings()
    _validate_items(payload)
    if payload.payment_type not in PAYMENT_TYPES:
        raise ValidationError("payment_type must be one of {}".format(", ".join(PAYMENT_TYPES)))

    try:
        with unit_of_work(db):
            if db.get(Customer, payload.customer_id) is None:
                raise NotFoundError("Customer", payload.customer_id)

            sale = Sale(
                customer_id=payload.customer_id,
                total=0.0,
                profit=0.0,
                status="pending",
                invoice_number=payload.invoice_number or _default_invoice_number(settings.INVOICE_PREFIX),
                payment_type=payload.payment_type,
                payment_method=payload.payment_method or settings.DEFAULT_PAYMENT_METHOD,
                bank=payload.bank or None,
                amount_paid=0.0,
            )
            db.add(sale)

            total = 0.0
            profit = 0.0
            for item in payload.items:
                product = get_product(db, item.product_id, for_update=True)
                unit_price = float(item.price if item.price is not None else product.price)

                allocation = allocate_lots(db, product, item.quantity, unit_price)
                if allocation.profit < 0 and not settings.ALLOW_NEGATIVE_PROFIT:
                    raise ValidationError(
                        "Sale price {:.2f} for product {} is below its lot cost".format(
                            unit_price, product.name
                        ),
                        field="price",
                    )
                if product.stock < item.quantity:
                    raise InsufficientStockError(
                        product_id=product.id,
                        product_name=product.name,
                        requested=item.quantity,
                        available=product.stock,
                    )
                product.stock -= item.quantity

                sale.items.append(
                    SaleItem(
                        product_id=product.id,
                        quantity=item.quantity,
                        price=unit_price,
                        profit=allocation.profit,
                        allocations=[
                            LotAllocation(
                                lot_id=consumption.lot.id,
                                quantity=consumption.quantity,
                                purchase_price=consumption.purchase_price,
                            )
                            for consumption in allocation.consumptions
                        ],
                    )
                )
                total += unit_price * item.quantity
                profit += allocation.profit

            sale.total = total
            sale.profit = profit
            sale.status, sale.amount_paid = initial_payment_state(
                payload.payment_type, total, payload.amount_paid, payload.status
            )
    except ShopLedgerError as exc:
        logger.warning("Sale for customer %s aborted: %s", payload.customer_id, exc.message)
        raise

    logger.info(
        "Created sale %s (%s): %s line(s), total %.2f, profit %.2f, status %s",
        sale.id,
        sale.invoice_number,
        len(payload.items),
        sale.total,
        sale.profit,
        sale.status,
    )
    return get_sale(db, sale.id)


def record_payment(db: Session, sale_id: int, amount_paid: float) -> Sale:
    if amount_paid is None or amount_paid < 0:
        raise ValidationError("amount_paid must be non-negative", field="amount_paid")

    with unit_of_work(db):
        sale = get_sale(db, sale_id)
        if amount_paid > sale.total:
            raise ValidationError("amount_paid cannot exceed the sale total", field="amount_paid")
        sale.amount_paid = float(amount_paid)
        if sale.total > 0 and sale.amount_paid >= sale.total:
            sale.status = "completed"
    return sale


def set_status(db: Session, sale_id: int, status: str) -> Sale:
    if status not in SALE_STATUSES:
        raise ValidationError("status must be one of {}".format(", ".join(SALE_STATUSES)), field="status")
    with unit_of_work(db):
        sale = get_sale(db, sale_id)
        sale.status = status
    return sale


def update_sale(db: Session, sale_id: int, payload: SaleUpdate) -> Sale:
    if payload.amount_paid is not None:
        return record_payment(db, sale_id, payload.amount_paid)
    if payload.status:
        return set_status(db, sale_id, payload.status)
    raise ValidationError("Invalid update data: provide amount_paid or status")


def delete_sale(db: Session, sale_id: int) -> None:
    """Delete a sale, returning its units to product stock and to the lots they came from."""
    with unit_of_work(db):
        sale = get_sale(db, sale_id)
        for item in sale.items:
            product = get_product(db, item.product_id, for_update=True)
            product.stock += item.quantity
            if not item.allocations:
                logger.warning(
                    "Sale item %s has no lot allocations; only aggregate stock of product %s restored",
                    item.id,
                    product.id,
                )
            for allocation in item.allocations:
                lot = allocation.lot
                lot.remaining = min(lot.quantity, lot.remaining + allocation.quantity)
        db.delete(sale)

    logger.info("Deleted sale %s and restored stock", sale_id)


__all__ = [
    "create_sale",
    "delete_sale",
    "get_sale",
    "initial_payment_state",
    "list_customer_sales",
    "list_sale_items",
    "list_sales",
    "record_payment",
    "set_status",
    "update_sale",
]
