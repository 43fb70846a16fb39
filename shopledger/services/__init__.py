from shopledger.services.lot_allocation import allocate_lots, plan_allocation
from shopledger.services.product_service import ingest_stock
from shopledger.services.report_service import dashboard_summary, financial_summary
from shopledger.services.sale_service import create_sale, delete_sale, update_sale

__all__ = [
    "allocate_lots",
    "create_sale",
    "dashboard_summary",
    "delete_sale",
    "financial_summary",
    "ingest_stock",
    "plan_allocation",
    "update_sale",
]
