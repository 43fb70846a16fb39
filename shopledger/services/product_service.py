import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from shopledger.core.exceptions import ConflictError, NotFoundError, ValidationError
from shopledger.database.session import unit_of_work
from shopledger.models.lot import ProductLot
from shopledger.models.product import Product
from shopledger.models.sales import SaleItem
from shopledger.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def _require_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required", field="name")
    return name


def _require_non_negative(value, field_name: str):
    if value is None or value < 0:
        raise ValidationError("{} must be non-negative".format(field_name), field=field_name)
    return value


def list_products(db: Session, include_lots: bool = False) -> list[Product]:
    stmt = select(Product).order_by(Product.name.asc(), Product.id.asc())
    if include_lots:
        stmt = stmt.options(selectinload(Product.lots))
    return list(db.execute(stmt).scalars().all())


def get_product(db: Session, product_id: int, *, for_update: bool = False) -> Product:
    stmt = select(Product).where(Product.id == product_id)
    if for_update:
        stmt = stmt.with_for_update()
    product = db.execute(stmt).scalars().first()
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def create_product(db: Session, payload: ProductCreate) -> Product:
    name = _require_name(payload.name)
    price = _require_non_negative(payload.price, "price")
    stock = _require_non_negative(payload.stock, "stock")
    min_stock = _require_non_negative(payload.min_stock, "min_stock")
    purchase_price = payload.purchase_price if payload.purchase_price is not None else price
    _require_non_negative(purchase_price, "purchase_price")

    with unit_of_work(db):
        product = Product(
            name=name,
            description=payload.description,
            price=float(price),
            stock=stock,
            min_stock=min_stock,
        )
        db.add(product)
        db.flush()
        if stock > 0:
            db.add(
                ProductLot(
                    product_id=product.id,
                    quantity=stock,
                    remaining=stock,
                    purchase_price=float(purchase_price),
                )
            )

    db.refresh(product)
    logger.info("Created product %s (%s) with initial stock %s", product.id, product.name, stock)
    return product


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    with unit_of_work(db):
        product = get_product(db, product_id)
        if payload.name is not None:
            product.name = _require_name(payload.name)
        if payload.description is not None:
            product.description = payload.description
        if payload.price is not None:
            product.price = float(_require_non_negative(payload.price, "price"))
        if payload.min_stock is not None:
            product.min_stock = _require_non_negative(payload.min_stock, "min_stock")
    return product


def delete_product(db: Session, product_id: int) -> None:
    with unit_of_work(db):
        product = get_product(db, product_id)
        in_use = db.execute(
            select(func.count(SaleItem.id)).where(SaleItem.product_id == product_id)
        ).scalar_one()
        if in_use:
            raise ConflictError(
                "Product {} is referenced by {} sale line(s) and cannot be deleted".format(
                    product.name, in_use
                ),
                product_id=product_id,
                sale_items=in_use,
            )
        db.delete(product)
    logger.info("Deleted product %s", product_id)


def ingest_stock(
    db: Session,
    product_id: int,
    quantity: int,
    purchase_price: float,
    *,
    received_at: Optional[datetime] = None,
) -> tuple[Product, ProductLot]:
    """Receive a new lot and raise the product's aggregate stock by the same amount."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be greater than 0", field="quantity")
    if purchase_price is None or purchase_price <= 0:
        raise ValidationError("price must be greater than 0", field="price")
    if received_at is None:
        received_at = datetime.now(timezone.utc)
    elif received_at.tzinfo is None:
        received_at = received_at.replace(tzinfo=timezone.utc)
    else:
        received_at = received_at.astimezone(timezone.utc)

    with unit_of_work(db):
        product = get_product(db, product_id, for_update=True)
        lot = ProductLot(
            product_id=product.id,
            quantity=quantity,
            remaining=quantity,
            purchase_price=float(purchase_price),
            received_at=received_at,
        )
        db.add(lot)
        product.stock += quantity

    db.refresh(product)
    logger.info(
        "Ingested lot %s for product %s: %s units at %.2f",
        lot.id,
        product.id,
        quantity,
        lot.purchase_price,
    )
    return product, lot


def lot_stock_total(db: Session, product_id: int) -> int:
    return db.execute(
        select(func.coalesce(func.sum(ProductLot.remaining), 0)).where(
            ProductLot.product_id == product_id
        )
    ).scalar_one()


__all__ = [
    "create_product",
    "delete_product",
    "get_product",
    "ingest_stock",
    "list_products",
    "lot_stock_total",
    "update_product",
]
