import argparse
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select

from shopledger.config import get_settings
from shopledger.core.logging import setup_logging
from shopledger.database import create_db_engine, create_session_factory, init_db
from shopledger.models import (
    CashTransaction,
    Customer,
    ExchangeRate,
    Expense,
    LotAllocation,
    Product,
    ProductLot,
    Sale,
    SaleItem,
)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample shop data.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    settings = get_settings()
    setup_logging(settings)
    args = parse_args()

    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    session_factory = create_session_factory(engine)

    db = session_factory()
    try:
        if args.reset:
            for model in (
                LotAllocation,
                SaleItem,
                Sale,
                ProductLot,
                Product,
                Customer,
                CashTransaction,
                Expense,
                ExchangeRate,
            ):
                db.execute(delete(model))
            db.commit()

        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product:
            print("Seed skipped: products already exist.")
            return

        now = datetime.now(timezone.utc)
        customers = [
            Customer(name="Ana Pérez", id_number="V-12345678", email="ana@example.com", phone="0414-1234567"),
            Customer(name="Bodega El Sol", id_number="J-30123456-7", address="Av. Principal 12"),
        ]
        db.add_all(customers)

        products = [
            Product(name="Harina PAN 1kg", description="Harina de maíz", price=1.6, stock=0, min_stock=20),
            Product(name="Aceite 1L", description="Aceite vegetal", price=3.5, stock=0, min_stock=10),
            Product(name="Café 500g", description="Café molido", price=6.0, stock=0, min_stock=5),
        ]
        db.add_all(products)
        db.flush()

        lots = [
            (products[0], 50, 1.1, 40),
            (products[0], 30, 1.2, 10),
            (products[1], 24, 2.6, 25),
            (products[2], 4, 4.2, 5),
        ]
        for product, quantity, purchase_price, age_days in lots:
            db.add(
                ProductLot(
                    product_id=product.id,
                    quantity=quantity,
                    remaining=quantity,
                    purchase_price=purchase_price,
                    received_at=now - timedelta(days=age_days),
                )
            )
            product.stock += quantity

        db.add(ExchangeRate(rate=36.5, recorded_at=now))
        db.add(
            CashTransaction(
                occurred_at=now - timedelta(days=1),
                concept="Fondo inicial",
                currency="USD",
                amount_in=200.0,
                amount_out=0.0,
                balance=200.0,
            )
        )
        db.commit()
        print("Seed data created.")
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    main()
