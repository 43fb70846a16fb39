import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopledger.core.exceptions import ConflictError, NotFoundError, ValidationError
from shopledger.database.session import unit_of_work
from shopledger.models.customer import Customer
from shopledger.models.sales import Sale
from shopledger.schemas.customer import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _normalized_fields(payload) -> dict:
    name = _clean(payload.name)
    id_number = _clean(payload.id_number)
    if not name or not id_number:
        raise ValidationError("name and id_number are required")
    return {
        "name": name,
        "id_number": id_number,
        "email": _clean(payload.email),
        "phone": _clean(payload.phone),
        "address": _clean(payload.address),
    }


def _ensure_unique(db: Session, id_number: str, email: Optional[str], exclude_id: Optional[int] = None):
    stmt = select(Customer.id).where(Customer.id_number == id_number)
    if exclude_id is not None:
        stmt = stmt.where(Customer.id != exclude_id)
    if db.execute(stmt.limit(1)).first() is not None:
        raise ConflictError("A customer with this id number already exists", id_number=id_number)

    if email:
        stmt = select(Customer.id).where(Customer.email == email)
        if exclude_id is not None:
            stmt = stmt.where(Customer.id != exclude_id)
        if db.execute(stmt.limit(1)).first() is not None:
            raise ConflictError("A customer with this email already exists", email=email)


def list_customers(db: Session) -> list[Customer]:
    return list(db.execute(select(Customer).order_by(Customer.name.asc())).scalars().all())


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


def create_customer(db: Session, payload: CustomerCreate) -> Customer:
    values = _normalized_fields(payload)
    with unit_of_work(db):
        _ensure_unique(db, values["id_number"], values["email"])
        customer = Customer(**values)
        db.add(customer)
    logger.info("Created customer %s (%s)", customer.id, customer.id_number)
    return customer


def update_customer(db: Session, customer_id: int, payload: CustomerUpdate) -> Customer:
    values = _normalized_fields(payload)
    with unit_of_work(db):
        customer = get_customer(db, customer_id)
        _ensure_unique(db, values["id_number"], values["email"], exclude_id=customer_id)
        for key, value in values.items():
            setattr(customer, key, value)
    return customer


def delete_customer(db: Session, customer_id: int) -> None:
    with unit_of_work(db):
        customer = get_customer(db, customer_id)
        sales_count = db.execute(
            select(func.count(Sale.id)).where(Sale.customer_id == customer_id)
        ).scalar_one()
        if sales_count:
            raise ConflictError(
                "Customer has {} sale(s) and cannot be deleted".format(sales_count),
                customer_id=customer_id,
                sales=sales_count,
            )
        db.delete(customer)
    logger.info("Deleted customer %s", customer_id)


__all__ = [
    "create_customer",
    "delete_customer",
    "get_customer",
    "list_customers",
    "update_customer",
]
