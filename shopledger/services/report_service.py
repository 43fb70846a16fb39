from datetime import date, datetime, time, timedelta, timezone
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from shopledger.models.expense import EXPENSE_CATEGORIES, Expense
from shopledger.models.product import Product
from shopledger.models.sales import Sale, SaleItem
from shopledger.services.cash_service import balance_by_currency, current_balance

_MONTH_NAMES = (
    "Ene", "Feb", "Mar", "Abr", "May", "Jun",
    "Jul", "Ago", "Sep", "Oct", "Nov", "Dic",
)

_SALES_SHEET_HEADERS = (
    "Fecha",
    "Factura",
    "Cliente",
    "Producto",
    "Cantidad",
    "Precio",
    "Subtotal",
    "Ganancia",
    "Tipo de pago",
    "Estado",
)


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _range_bounds(start: Optional[date], end: Optional[date]):
    lower = _start_of(start) if start else None
    upper = _start_of(end + timedelta(days=1)) if end else None
    return lower, upper


def _as_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def _sales_between(db: Session, start: Optional[date], end: Optional[date], *, with_items: bool = False):
    lower, upper = _range_bounds(start, end)
    stmt = select(Sale).where(Sale.status != "cancelled")
    if lower is not None:
        stmt = stmt.where(Sale.created_at >= lower)
    if upper is not None:
        stmt = stmt.where(Sale.created_at < upper)
    if with_items:
        stmt = stmt.options(
            selectinload(Sale.customer),
            selectinload(Sale.items).selectinload(SaleItem.product),
        )
    return list(db.execute(stmt.order_by(Sale.created_at.asc(), Sale.id.asc())).scalars().all())


def _expenses_between(db: Session, start: Optional[date], end: Optional[date]):
    lower, upper = _range_bounds(start, end)
    stmt = select(Expense)
    if lower is not None:
        stmt = stmt.where(Expense.spent_at >= lower)
    if upper is not None:
        stmt = stmt.where(Expense.spent_at < upper)
    return list(db.execute(stmt).scalars().all())


def low_stock_products(db: Session) -> list[Product]:
    stmt = (
        select(Product)
        .where(Product.stock <= Product.min_stock)
        .order_by(Product.stock.asc(), Product.name.asc())
    )
    return list(db.execute(stmt).scalars().all())


def dashboard_summary(db: Session, today: Optional[date] = None) -> dict:
    today = today or datetime.now(timezone.utc).date()
    todays_sales = _sales_between(db, today, today)
    stock_total, product_count = db.execute(
        select(func.coalesce(func.sum(Product.stock), 0), func.count(Product.id))
    ).one()
    low_stock = low_stock_products(db)
    return {
        "date": today.isoformat(),
        "sales_today": sum(sale.total for sale in todays_sales),
        "sales_count_today": len(todays_sales),
        "total_stock": int(stock_total),
        "product_count": int(product_count),
        "low_stock": [
            {"id": p.id, "name": p.name, "stock": p.stock, "min_stock": p.min_stock}
            for p in low_stock
        ],
    }


def top_products(
    db: Session,
    limit: int = 5,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[dict]:
    totals = {}
    for sale in _sales_between(db, start, end, with_items=True):
        for item in sale.items:
            entry = totals.setdefault(
                item.product_id,
                {
                    "product_id": item.product_id,
                    "name": item.product_name,
                    "quantity": 0,
                    "revenue": 0.0,
                    "profit": 0.0,
                },
            )
            entry["quantity"] += item.quantity
            entry["revenue"] += item.price * item.quantity
            entry["profit"] += item.profit
    ranked = sorted(totals.values(), key=lambda row: (-row["quantity"], -row["revenue"]))
    return ranked[:limit]


def financial_summary(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> dict:
    sales = _sales_between(db, start, end)
    expenses = _expenses_between(db, start, end)

    total_sales = sum(sale.total for sale in sales)
    gross_profit = sum(sale.profit for sale in sales)
    total_expenses = sum(expense.amount for expense in expenses)
    receivables = sum(
        sale.total - sale.amount_paid
        for sale in sales
        if sale.payment_type == "credito" and sale.status != "completed"
    )

    by_category = {category: {"count": 0, "amount": 0.0} for category in EXPENSE_CATEGORIES}
    for expense in expenses:
        bucket = by_category.setdefault(expense.category, {"count": 0, "amount": 0.0})
        bucket["count"] += 1
        bucket["amount"] += expense.amount

    return {
        "start": start.isoformat() if start else None,
        "end": end.isoformat() if end else None,
        "sales_count": len(sales),
        "total_sales": total_sales,
        "gross_profit": gross_profit,
        "total_expenses": total_expenses,
        "net_profit": gross_profit - total_expenses,
        "pending_receivables": receivables,
        "expenses_by_category": by_category,
    }


def monthly_sales(db: Session, year: int) -> list[dict]:
    months = [
        {"month": index + 1, "label": _MONTH_NAMES[index], "total": 0.0, "count": 0}
        for index in range(12)
    ]
    for sale in _sales_between(db, date(year, 1, 1), date(year, 12, 31)):
        bucket = months[_as_date(sale.created_at).month - 1]
        bucket["total"] += sale.total
        bucket["count"] += 1
    return months


def daily_sales(db: Session, days: int = 7, today: Optional[date] = None) -> list[dict]:
    today = today or datetime.now(timezone.utc).date()
    first_day = today - timedelta(days=days - 1)
    buckets = {}
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        buckets[day] = {"date": day.isoformat(), "total": 0.0, "count": 0}
    for sale in _sales_between(db, first_day, today):
        bucket = buckets.get(_as_date(sale.created_at))
        if bucket is None:
            continue
        bucket["total"] += sale.total
        bucket["count"] += 1
    return [buckets[day] for day in sorted(buckets)]


def cash_summary(db: Session) -> dict:
    return {
        "balance": current_balance(db),
        "by_currency": balance_by_currency(db),
    }


def export_sales_workbook(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Ventas"
    sheet.append(list(_SALES_SHEET_HEADERS))
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for sale in _sales_between(db, start, end, with_items=True):
        customer_name = sale.customer.name if sale.customer is not None else ""
        for item in sale.items:
            sheet.append(
                [
                    _as_date(sale.created_at).isoformat(),
                    sale.invoice_number,
                    customer_name,
                    item.product_name,
                    item.quantity,
                    item.price,
                    item.price * item.quantity,
                    item.profit,
                    sale.payment_type,
                    sale.status,
                ]
            )

    summary = financial_summary(db, start, end)
    summary_sheet = workbook.create_sheet("Resumen")
    for label, key in (
        ("Ventas", "sales_count"),
        ("Total ventas", "total_sales"),
        ("Ganancia bruta", "gross_profit"),
        ("Gastos", "total_expenses"),
        ("Ganancia neta", "net_profit"),
        ("Por cobrar", "pending_receivables"),
    ):
        summary_sheet.append([label, summary[key]])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


__all__ = [
    "cash_summary",
    "daily_sales",
    "dashboard_summary",
    "export_sales_workbook",
    "financial_summary",
    "low_stock_products",
    "monthly_sales",
    "top_products",
]
