from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from shopledger.config import Settings
from shopledger.dependencies import get_app_settings, get_db, require_login
from shopledger.schemas.product import ProductRead
from shopledger.services import report_service

router = APIRouter(prefix="/reports", tags=["Reports"], dependencies=[Depends(require_login)])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    return report_service.dashboard_summary(db)


@router.get("/low-stock")
def low_stock(db: Session = Depends(get_db)):
    return [ProductRead.model_validate(p) for p in report_service.low_stock_products(db)]


@router.get("/top-products")
def top_products(
    limit: Optional[int] = Query(None, ge=1, le=100),
    start: Optional[date] = Query(None, description="First day (inclusive)"),
    end: Optional[date] = Query(None, description="Last day (inclusive)"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return report_service.top_products(db, limit or settings.TOP_PRODUCTS_LIMIT, start, end)


@router.get("/financial")
def financial(
    start: Optional[date] = Query(None, description="First day (inclusive)"),
    end: Optional[date] = Query(None, description="Last day (inclusive)"),
    db: Session = Depends(get_db),
):
    return report_service.financial_summary(db, start, end)


@router.get("/monthly")
def monthly(year: Optional[int] = Query(None, ge=2000, le=2100), db: Session = Depends(get_db)):
    year = year or datetime.now(timezone.utc).year
    return {"year": year, "months": report_service.monthly_sales(db, year)}


@router.get("/daily")
def daily(days: int = Query(7, ge=1, le=90), db: Session = Depends(get_db)):
    return report_service.daily_sales(db, days)


@router.get("/cash")
def cash(db: Session = Depends(get_db)):
    return report_service.cash_summary(db)


@router.get("/sales.xlsx")
def sales_workbook(
    start: Optional[date] = Query(None, description="First day (inclusive)"),
    end: Optional[date] = Query(None, description="Last day (inclusive)"),
    db: Session = Depends(get_db),
):
    content = report_service.export_sales_workbook(db, start, end)
    return Response(
        content=content,
        media_type=_XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="ventas.xlsx"'},
    )


__all__ = ["router"]
