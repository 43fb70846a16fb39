from shopledger.routers.auth import router as auth_router
from shopledger.routers.cash import router as cash_router
from shopledger.routers.customers import router as customers_router
from shopledger.routers.exchange_rate import router as exchange_rate_router
from shopledger.routers.expenses import router as expenses_router
from shopledger.routers.health import router as health_router
from shopledger.routers.products import router as products_router
from shopledger.routers.reports import router as reports_router
from shopledger.routers.sales import router as sales_router

__all__ = [
    "auth_router",
    "cash_router",
    "customers_router",
    "exchange_rate_router",
    "expenses_router",
    "health_router",
    "products_router",
    "reports_router",
    "sales_router",
]
