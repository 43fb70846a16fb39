import unittest
from datetime import datetime, timezone

from shopledger.core.exceptions import NotFoundError, ValidationError
from shopledger.database import create_db_engine, create_session_factory, init_db
from shopledger.models.cash import CashTransaction
from shopledger.schemas.cash import CashTransactionCreate
from shopledger.services.cash_service import (
    balance_by_currency,
    create_cash_transaction,
    current_balance,
    delete_cash_transaction,
    list_cash_transactions,
)


def _at(day, hour=9):
    return datetime(2024, 5, day, hour, tzinfo=timezone.utc)


class CashLedgerTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite://")
        init_db(self.engine)
        self.db = create_session_factory(self.engine)()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _add(self, day, amount_in=None, amount_out=None, currency="USD", concept="Movimiento"):
        return create_cash_transaction(
            self.db,
            CashTransactionCreate(
                occurred_at=_at(day),
                concept=concept,
                currency=currency,
                amount_in=amount_in,
                amount_out=amount_out,
            ),
        )

    def _balances(self):
        # Newest first from the service; flip back to ledger order.
        return [row.balance for row in reversed(list_cash_transactions(self.db))]

    def test_running_balance(self):
        self._add(1, amount_in=100)
        self._add(2, amount_out=30)
        self._add(3, amount_in=5)

        self.assertEqual(self._balances(), [100.0, 70.0, 75.0])
        self.assertEqual(current_balance(self.db), 75.0)

    def test_delete_rebalances_following_rows(self):
        self._add(1, amount_in=100)
        middle = self._add(2, amount_out=30)
        self._add(3, amount_in=5)

        rebalanced = delete_cash_transaction(self.db, middle.id)

        self.assertEqual(rebalanced, 1)
        self.assertEqual(self._balances(), [100.0, 105.0])
        self.assertIsNone(self.db.get(CashTransaction, middle.id))

    def test_delete_first_row_starts_from_zero(self):
        first = self._add(1, amount_in=100)
        self._add(2, amount_out=30)

        delete_cash_transaction(self.db, first.id)

        self.assertEqual(self._balances(), [-30.0])

    def test_back_dated_insert_rebalances_later_rows(self):
        self._add(1, amount_in=100)
        self._add(5, amount_out=20)

        inserted = self._add(3, amount_in=50)

        self.assertEqual(inserted.balance, 150.0)
        self.assertEqual(self._balances(), [100.0, 150.0, 130.0])

    def test_balance_by_currency(self):
        self._add(1, amount_in=100, currency="USD")
        self._add(2, amount_in=3650, currency="VES")
        self._add(3, amount_out=10, currency="USD")

        self.assertEqual(balance_by_currency(self.db), {"USD": 90.0, "VES": 3650.0})

    def test_validation(self):
        with self.assertRaises(ValidationError):
            self._add(1)
        with self.assertRaises(ValidationError):
            self._add(1, amount_in=-5)
        with self.assertRaises(ValidationError):
            self._add(1, amount_in=5, concept="  ")
        with self.assertRaises(NotFoundError):
            delete_cash_transaction(self.db, 404)


if __name__ == "__main__":
    unittest.main()
