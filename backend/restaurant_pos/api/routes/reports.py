"""Report export routes."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import Response

from restaurant_pos.core.errors import BadRequestError
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.db.session import DbSession
from restaurant_pos.services.report_service import generate_sales_xlsx, sales_orders

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/sales.xlsx")
@limiter.limit("10/minute")
def export_sales_xlsx(
    request: Request,
    db: DbSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """Orders in a date range as an Excel sheet. Defaults to the last 30 days."""
    end = end_date or datetime.now(timezone.utc).date()
    start = start_date or end - timedelta(days=30)
    if start > end:
        raise BadRequestError("start_date must not be after end_date")

    content = generate_sales_xlsx(sales_orders(db, start, end), start, end)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="sales_{start:%Y%m%d}_{end:%Y%m%d}.xlsx"'},
    )
