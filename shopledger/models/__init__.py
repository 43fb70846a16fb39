from shopledger.models.cash import CashTransaction
from shopledger.models.customer import Customer
from shopledger.models.exchange_rate import ExchangeRate
from shopledger.models.expense import Expense
from shopledger.models.lot import ProductLot
from shopledger.models.product import Product
from shopledger.models.sales import LotAllocation, Sale, SaleItem
from shopledger.models.user import User

__all__ = [
    "CashTransaction",
    "Customer",
    "ExchangeRate",
    "Expense",
    "LotAllocation",
    "Product",
    "ProductLot",
    "Sale",
    "SaleItem",
    "User",
]
