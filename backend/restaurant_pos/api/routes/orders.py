"""Order routes shared across roles: admin listing, cancellation and sending bills."""

from typing import Optional

from fastapi import APIRouter, Query, Request

from restaurant_pos.api.serializers import order_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import paginated_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.models.order import Order
from restaurant_pos.schemas.order import CancelRequest, SendBillRequest, StatusUpdate
from restaurant_pos.services.notification_service import notify_bill
from restaurant_pos.services.order_service import OrderService, order_query
from restaurant_pos.services.order_status import StatusSurface, parse_status

admin_router = APIRouter()
router = APIRouter()


@admin_router.get("")
@limiter.limit("60/minute")
def list_orders(
    request: Request,
    db: DbSession,
    status_filter: Optional[str] = Query(None, alias="status"),
    table_number: Optional[int] = None,
    staff_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
):
    """All orders, newest first, filterable by status, table and staff member."""
    query = order_query(db)
    if status_filter:
        query = query.filter(Order.status == parse_status(status_filter.strip().upper()))
    if table_number is not None:
        query = query.filter(Order.table_number == table_number)
    if staff_id is not None:
        query = query.filter(Order.staff_id == staff_id)

    total = query.count()
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()
    return paginated_response([order_to_dict(o) for o in orders], total, skip, limit)


@admin_router.patch("/{order_id}/status")
@limiter.limit("30/minute")
def update_order_status(request: Request, db: DbSession, order_id: int, data: StatusUpdate):
    new_status = parse_status(data.status)
    order = OrderService(db).change_status(order_id, new_status, StatusSurface.ADMIN)
    return {"message": "Order status updated successfully", "order": order_to_dict(order)}


@router.patch("/{order_id}/cancel")
@limiter.limit("30/minute")
def cancel_order(request: Request, db: DbSession, order_id: int, data: Optional[CancelRequest] = None):
    """Cancel a PENDING order and return its ingredients to stock."""
    reason = data.reason if data else None
    order = OrderService(db).cancel(order_id, reason)
    return {"message": "Order cancelled successfully", "order": order_to_dict(order)}


@router.post("/{order_id}/bill")
@limiter.limit("20/minute")
def send_bill(request: Request, db: DbSession, order_id: int, data: SendBillRequest):
    """Email (and text, when a phone is given) the bill, then complete the order."""
    service = OrderService(db)
    order = service.get(order_id)
    service.update_customer_snapshot(order, data.customer_name, data.customer_email, data.customer_phone)
    order = service.complete(order_id)

    results = notify_bill(
        order,
        email=data.customer_email,
        phone=data.customer_phone,
        customer_name=order.customer_name,
    )
    return {"message": "Bill processed", "order": order_to_dict(order), **results}
