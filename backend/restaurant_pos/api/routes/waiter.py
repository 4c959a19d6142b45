"""Waiter routes: menu, table orders and marking orders served."""

from typing import Optional

from fastapi import APIRouter, Query, Request, status

from restaurant_pos.api.serializers import food_item_to_dict, order_to_dict
from restaurant_pos.core.errors import BadRequestError
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.schemas.order import StatusUpdate, WaiterOrderCreate
from restaurant_pos.services.customer_service import CustomerService
from restaurant_pos.services.menu_service import MenuService
from restaurant_pos.services.order_service import OrderService, order_query
from restaurant_pos.services.order_status import StatusSurface, parse_status
from restaurant_pos.services.staff_service import StaffService

router = APIRouter()


@router.get("/food-items")
@limiter.limit("60/minute")
def waiter_menu(request: Request, db: DbSession):
    """Orderable menu grouped by category name."""
    grouped = MenuService(db).waiter_menu()
    return {
        "categories": {
            name: [food_item_to_dict(item, active_portions_only=True) for item in items]
            for name, items in grouped.items()
        },
        "total": sum(len(items) for items in grouped.values()),
    }


@router.get("/orders")
@limiter.limit("60/minute")
def list_waiter_orders(
    request: Request,
    db: DbSession,
    staff_id: int = Query(...),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    """Orders taken by one staff member, newest first."""
    query = order_query(db).filter(Order.staff_id == staff_id)
    if status_filter:
        query = query.filter(Order.status == parse_status(status_filter.strip().upper()))
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return list_response([order_to_dict(o) for o in orders])


@router.post("/orders", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_waiter_order(request: Request, db: DbSession, data: WaiterOrderCreate):
    """Place a table order.

    Ingredient stock is checked across every line before anything is
    written; the order starts PENDING.
    """
    staff = StaffService(db).resolve_for_order(staff_id=data.staff_id)
    customer = CustomerService(db).resolve_for_order(data.customer_data)
    if data.payment_data is not None and customer is None:
        raise BadRequestError("Customer details are required to record a payment")

    order = OrderService(db).place_order(
        staff,
        data.items,
        status=OrderStatus.PENDING,
        order_type=data.order_type,
        table_number=data.table_number,
        notes=data.notes,
        customer=customer,
        payment=data.payment_data,
    )
    return {"message": "Order created successfully", "order": order_to_dict(order)}


@router.patch("/orders/{order_id}/status")
@limiter.limit("30/minute")
def update_waiter_order_status(request: Request, db: DbSession, order_id: int, data: StatusUpdate):
    """Waiters may only mark READY orders SERVED."""
    new_status = parse_status(data.status)
    order = OrderService(db).change_status(order_id, new_status, StatusSurface.WAITER)
    return {"message": "Order status updated successfully", "order": order_to_dict(order)}
