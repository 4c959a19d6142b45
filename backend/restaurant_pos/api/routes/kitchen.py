"""Kitchen routes: the order queue, status progression and ingredient availability."""

from fastapi import APIRouter, Request

from restaurant_pos.api.serializers import kitchen_order_to_dict, order_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.order import StatusUpdate
from restaurant_pos.services.kitchen_service import ingredient_availability, kitchen_queue, recipe_map
from restaurant_pos.services.order_service import OrderService
from restaurant_pos.services.order_status import StatusSurface, parse_status

router = APIRouter()


@router.get("/orders")
@limiter.limit("120/minute")
def list_kitchen_orders(request: Request, db: DbSession):
    """PENDING, PREPARING and READY orders with each line's ingredient breakdown."""
    orders = kitchen_queue(db)
    recipes = recipe_map(db, orders)
    return list_response([kitchen_order_to_dict(o, recipes) for o in orders])


@router.patch("/orders/{order_id}/status")
@limiter.limit("60/minute")
def update_kitchen_order_status(request: Request, db: DbSession, order_id: int, data: StatusUpdate):
    """PENDING -> PREPARING -> READY; anything else is rejected."""
    new_status = parse_status(data.status)
    order = OrderService(db).change_status(order_id, new_status, StatusSurface.KITCHEN)
    return {"message": "Order status updated successfully", "order": order_to_dict(order)}


@router.get("/food-item-ingredients")
@limiter.limit("60/minute")
def food_item_ingredients(request: Request, db: DbSession):
    return list_response(ingredient_availability(db))
