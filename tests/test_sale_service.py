import unittest
from datetime import datetime, timezone

from sqlalchemy import func, select

from shopledger.config import Settings
from shopledger.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from shopledger.database import create_db_engine, create_session_factory, init_db
from shopledger.models.lot import ProductLot
from shopledger.models.product import Product
from shopledger.models.sales import LotAllocation, Sale, SaleItem
from shopledger.schemas.customer import CustomerCreate
from shopledger.schemas.product import ProductCreate
from shopledger.schemas.sale import SaleCreate, SaleItemCreate, SaleUpdate
from shopledger.services.customer_service import create_customer
from shopledger.services.product_service import create_product, ingest_stock, lot_stock_total
from shopledger.services.sale_service import (
    create_sale,
    delete_sale,
    record_payment,
    update_sale,
)


def _utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


class SaleServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite://")
        init_db(self.engine)
        self.db = create_session_factory(self.engine)()
        self.settings = Settings(DATABASE_URL="sqlite://", INVOICE_PREFIX="TEST")

        self.customer = create_customer(self.db, CustomerCreate(name="Ana", id_number="V-1"))
        self.product = create_product(self.db, ProductCreate(name="Widget", price=20.0))
        _, self.lot1 = ingest_stock(self.db, self.product.id, 5, 10.0, received_at=_utc(2024, 1, 1))
        _, self.lot2 = ingest_stock(self.db, self.product.id, 5, 12.0, received_at=_utc(2024, 2, 1))

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _sale(self, *items, payment_type="contado", amount_paid=None):
        return SaleCreate(
            customer_id=self.customer.id,
            items=[SaleItemCreate(product_id=pid, quantity=qty, price=price) for pid, qty, price in items],
            payment_type=payment_type,
            amount_paid=amount_paid,
        )

    def _assert_stock_matches_lots(self, product_id):
        product = self.db.get(Product, product_id)
        self.assertEqual(product.stock, lot_stock_total(self.db, product_id))

    def test_cash_sale_allocates_fifo_and_completes(self):
        sale = create_sale(self.db, self._sale((self.product.id, 7, 20.0)), self.settings)

        self.assertEqual(sale.total, 140.0)
        self.assertEqual(sale.profit, 66.0)
        self.assertEqual(sale.status, "completed")
        self.assertEqual(sale.amount_paid, 140.0)
        self.assertTrue(sale.invoice_number.startswith("TEST-"))
        self.assertEqual(sum(i.price * i.quantity for i in sale.items), sale.total)
        self.assertEqual(sum(i.profit for i in sale.items), sale.profit)

        self.assertEqual(self.db.get(Product, self.product.id).stock, 3)
        self.assertEqual(self.db.get(ProductLot, self.lot1.id).remaining, 0)
        self.assertEqual(self.db.get(ProductLot, self.lot2.id).remaining, 3)
        self._assert_stock_matches_lots(self.product.id)

        allocations = [(a.lot_id, a.quantity) for a in sale.items[0].allocations]
        self.assertEqual(allocations, [(self.lot1.id, 5), (self.lot2.id, 2)])

    def test_item_without_price_uses_product_price(self):
        sale = create_sale(self.db, self._sale((self.product.id, 1, None)), self.settings)

        self.assertEqual(sale.items[0].price, 20.0)
        self.assertEqual(sale.total, 20.0)

    def test_credit_sale_status_follows_payments(self):
        sale = create_sale(
            self.db,
            self._sale((self.product.id, 5, 20.0), payment_type="credito"),
            self.settings,
        )
        self.assertEqual(sale.total, 100.0)
        self.assertEqual(sale.status, "pending")
        self.assertEqual(sale.amount_paid, 0.0)

        sale = record_payment(self.db, sale.id, 60)
        self.assertEqual(sale.status, "pending")
        self.assertEqual(sale.amount_paid, 60.0)

        sale = update_sale(self.db, sale.id, SaleUpdate(amount_paid=100))
        self.assertEqual(sale.status, "completed")

    def test_credit_sale_paid_in_full_completes_immediately(self):
        sale = create_sale(
            self.db,
            self._sale((self.product.id, 1, 20.0), payment_type="credito", amount_paid=20.0),
            self.settings,
        )
        self.assertEqual(sale.status, "completed")

    def test_payment_above_total_is_rejected(self):
        sale = create_sale(
            self.db,
            self._sale((self.product.id, 5, 20.0), payment_type="credito"),
            self.settings,
        )
        with self.assertRaises(ValidationError):
            record_payment(self.db, sale.id, 100.01)
        with self.assertRaises(ValidationError):
            create_sale(
                self.db,
                self._sale((self.product.id, 1, 20.0), payment_type="credito", amount_paid=25.0),
                self.settings,
            )

    def test_failed_line_rolls_back_whole_sale(self):
        other = create_product(self.db, ProductCreate(name="Gadget", price=9.0, stock=2, purchase_price=4.0))

        with self.assertRaises(InsufficientStockError) as ctx:
            create_sale(
                self.db,
                self._sale((self.product.id, 3, 20.0), (other.id, 3, 9.0)),
                self.settings,
            )

        self.assertEqual(ctx.exception.details["shortfall"], 1)
        self.assertEqual(self.db.execute(select(func.count(Sale.id))).scalar_one(), 0)
        self.assertEqual(self.db.execute(select(func.count(SaleItem.id))).scalar_one(), 0)
        self.assertEqual(self.db.execute(select(func.count(LotAllocation.id))).scalar_one(), 0)
        self.assertEqual(self.db.get(Product, self.product.id).stock, 10)
        self.assertEqual(self.db.get(ProductLot, self.lot1.id).remaining, 5)
        self.assertEqual(self.db.get(Product, other.id).stock, 2)

    def test_selling_more_than_available_fails(self):
        with self.assertRaises(InsufficientStockError):
            create_sale(self.db, self._sale((self.product.id, 11, 20.0)), self.settings)
        self.assertEqual(self.db.get(Product, self.product.id).stock, 10)
        self._assert_stock_matches_lots(self.product.id)

    def test_negative_profit_line_is_rejected_by_default(self):
        with self.assertRaises(ValidationError):
            create_sale(self.db, self._sale((self.product.id, 2, 5.0)), self.settings)
        self.assertEqual(self.db.get(ProductLot, self.lot1.id).remaining, 5)

    def test_negative_profit_allowed_when_configured(self):
        settings = Settings(DATABASE_URL="sqlite://", ALLOW_NEGATIVE_PROFIT=True)
        sale = create_sale(self.db, self._sale((self.product.id, 2, 5.0)), settings)
        self.assertEqual(sale.profit, -10.0)

    def test_same_product_twice_in_one_sale(self):
        sale = create_sale(
            self.db,
            self._sale((self.product.id, 4, 20.0), (self.product.id, 3, 20.0)),
            self.settings,
        )
        self.assertEqual(sale.profit, 4 * 10.0 + 1 * 10.0 + 2 * 8.0)
        self.assertEqual(self.db.get(Product, self.product.id).stock, 3)
        self._assert_stock_matches_lots(self.product.id)

    def test_validation_errors(self):
        with self.assertRaises(ValidationError):
            create_sale(self.db, SaleCreate(customer_id=self.customer.id, items=[]), self.settings)
        with self.assertRaises(ValidationError):
            create_sale(self.db, self._sale((self.product.id, 0, 20.0)), self.settings)
        with self.assertRaises(NotFoundError):
            create_sale(
                self.db,
                SaleCreate(customer_id=999, items=[SaleItemCreate(product_id=self.product.id, quantity=1)]),
                self.settings,
            )
        with self.assertRaises(NotFoundError):
            create_sale(self.db, self._sale((999, 1, 20.0)), self.settings)

    def test_manual_status_change(self):
        sale = create_sale(
            self.db,
            self._sale((self.product.id, 1, 20.0), payment_type="credito"),
            self.settings,
        )
        sale = update_sale(self.db, sale.id, SaleUpdate(status="cancelled"))
        self.assertEqual(sale.status, "cancelled")

        with self.assertRaises(ValidationError):
            update_sale(self.db, sale.id, SaleUpdate())

    def test_delete_restores_product_and_lot_stock(self):
        sale = create_sale(self.db, self._sale((self.product.id, 7, 20.0)), self.settings)

        delete_sale(self.db, sale.id)

        self.assertEqual(self.db.get(Product, self.product.id).stock, 10)
        self.assertEqual(self.db.get(ProductLot, self.lot1.id).remaining, 5)
        self.assertEqual(self.db.get(ProductLot, self.lot2.id).remaining, 5)
        self._assert_stock_matches_lots(self.product.id)
        self.assertIsNone(self.db.get(Sale, sale.id))
        self.assertEqual(self.db.execute(select(func.count(LotAllocation.id))).scalar_one(), 0)

    def test_delete_line_without_allocations_restores_aggregate_stock_only(self):
        sale = create_sale(self.db, self._sale((self.product.id, 7, 20.0)), self.settings)
        for item in sale.items:
            item.allocations.clear()
        self.db.commit()
        self.assertEqual(self.db.execute(select(func.count(LotAllocation.id))).scalar_one(), 0)

        with self.assertLogs("shopledger.services.sale_service", level="WARNING") as logs:
            delete_sale(self.db, sale.id)

        self.assertTrue(any("no lot allocations" in line for line in logs.output))
        self.assertEqual(self.db.get(Product, self.product.id).stock, 10)
        self.assertEqual(self.db.get(ProductLot, self.lot1.id).remaining, 0)
        self.assertEqual(self.db.get(ProductLot, self.lot2.id).remaining, 3)

    def test_zero_total_credit_sale_stays_pending_on_payment(self):
        settings = Settings(DATABASE_URL="sqlite://", ALLOW_NEGATIVE_PROFIT=True)
        sale = create_sale(
            self.db,
            self._sale((self.product.id, 1, 0.0), payment_type="credito"),
            settings,
        )
        self.assertEqual(sale.total, 0.0)
        self.assertEqual(sale.status, "pending")

        sale = record_payment(self.db, sale.id, 0)
        self.assertEqual(sale.status, "pending")

    def test_delete_missing_sale(self):
        with self.assertRaises(NotFoundError):
            delete_sale(self.db, 12345)


if __name__ == "__main__":
    unittest.main()
