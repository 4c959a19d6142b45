"""Dashboard statistics and the sales spreadsheet export."""

import io
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from restaurant_pos.models.ingredient import Ingredient
from restaurant_pos.models.menu import Category, FoodItem
from restaurant_pos.models.order import ACTIVE_ORDER_STATUSES, Order, OrderStatus


def _day_bounds(day: date):
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def _percent_change(current: Decimal, previous: Decimal) -> float:
    if not previous:
        return 0.0
    return round(float((current - previous) / previous * 100), 2)


def _orders_between(db: Session, start: datetime, end: datetime):
    count, revenue = (
        db.query(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
        .filter(
            Order.created_at >= start,
            Order.created_at < end,
            Order.status != OrderStatus.CANCELLED,
        )
        .one()
    )
    return count, Decimal(str(revenue))


def dashboard_stats(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    """Today's trading figures against yesterday plus menu and stock counts."""
    today = today or datetime.now(timezone.utc).date()
    today_count, today_revenue = _orders_between(db, *_day_bounds(today))
    yesterday_count, yesterday_revenue = _orders_between(db, *_day_bounds(today - timedelta(days=1)))

    active_tables = (
        db.query(func.count(func.distinct(Order.table_number)))
        .filter(Order.status.in_(ACTIVE_ORDER_STATUSES), Order.table_number.isnot(None))
        .scalar()
    )
    max_table = db.query(func.max(Order.table_number)).scalar() or 0

    return {
        "today_orders": today_count,
        "today_revenue": float(today_revenue),
        "yesterday_orders": yesterday_count,
        "yesterday_revenue": float(yesterday_revenue),
        "revenue_change": _percent_change(today_revenue, yesterday_revenue),
        "order_count_change": _percent_change(Decimal(today_count), Decimal(yesterday_count)),
        "active_tables": active_tables,
        "inactive_tables": max(max_table - active_tables, 0),
        "total_food_items": db.query(func.count(FoodItem.id)).filter(FoodItem.is_active.is_(True)).scalar(),
        "total_categories": db.query(func.count(Category.id)).filter(Category.is_active.is_(True)).scalar(),
        "low_stock_ingredients": (
            db.query(func.count(Ingredient.id))
            .filter(
                Ingredient.is_active.is_(True),
                Ingredient.current_stock_quantity <= Ingredient.reorder_level,
            )
            .scalar()
        ),
    }


def sales_orders(db: Session, start: date, end: date) -> List[Order]:
    """Orders created between two dates (inclusive), oldest first."""
    range_start, _ = _day_bounds(start)
    _, range_end = _day_bounds(end)
    return (
        db.query(Order)
        .options(selectinload(Order.items), selectinload(Order.payments))
        .filter(Order.created_at >= range_start, Order.created_at < range_end)
        .order_by(Order.created_at, Order.id)
        .all()
    )


def generate_sales_xlsx(orders: List[Order], start: date, end: date) -> bytes:
    """Generate an Excel sales report, one row per order."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Sales"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="2563EB", end_color="2563EB", fill_type="solid")
    border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )

    ws["A1"] = f"Sales Report {start:%Y-%m-%d} to {end:%Y-%m-%d}"
    ws["A1"].font = Font(bold=True, size=14)
    ws.merge_cells("A1:I1")

    headers = ["Order #", "Bill Number", "Date", "Type", "Table", "Status", "Items", "Payment", "Total"]
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=3, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = border
        cell.alignment = Alignment(horizontal="center")

    revenue = Decimal("0")
    for idx, order in enumerate(orders, 1):
        row = 3 + idx
        if order.status != OrderStatus.CANCELLED:
            revenue += Decimal(order.total_amount)
        data = [
            order.id,
            order.bill_number or "",
            order.created_at.strftime("%Y-%m-%d %H:%M") if order.created_at else "",
            order.order_type.value,
            order.table_number or "",
            order.status.value,
            sum(item.quantity for item in order.items),
            ", ".join(sorted({p.payment_mode.value for p in order.payments})),
            float(order.total_amount),
        ]
        for col, value in enumerate(data, 1):
            ws.cell(row=row, column=col, value=value).border = border

    total_row = 4 + len(orders)
    ws.cell(row=total_row, column=8, value="Revenue:").font = Font(bold=True)
    ws.cell(row=total_row, column=9, value=float(revenue)).font = Font(bold=True)

    for column, width in zip("ABCDEFGHI", (9, 20, 17, 11, 7, 12, 7, 12, 12)):
        ws.column_dimensions[column].width = width

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
