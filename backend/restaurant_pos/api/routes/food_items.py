"""Food item administration routes.

Each food item is sold in one or more portions, each with its own price
and ingredient recipe.
"""

from typing import Optional

from fastapi import APIRouter, Request, status

from restaurant_pos.api.serializers import food_item_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.menu import FoodItemCreate, FoodItemUpdate
from restaurant_pos.services.menu_service import MenuService

router = APIRouter()


@router.get("")
@limiter.limit("60/minute")
def list_food_items(
    request: Request,
    db: DbSession,
    category_id: Optional[int] = None,
    active_only: bool = False,
):
    """List food items with their category, portions and per-portion ingredients."""
    items = MenuService(db).list_food_items(category_id=category_id, active_only=active_only)
    return list_response([food_item_to_dict(item) for item in items])


@router.get("/{food_item_id}")
@limiter.limit("60/minute")
def get_food_item(request: Request, db: DbSession, food_item_id: int):
    return food_item_to_dict(MenuService(db).get_food_item(food_item_id))


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_food_item(request: Request, db: DbSession, data: FoodItemCreate):
    return food_item_to_dict(MenuService(db).create_food_item(data))


@router.put("/{food_item_id}")
@limiter.limit("30/minute")
def update_food_item(request: Request, db: DbSession, food_item_id: int, data: FoodItemUpdate):
    """Update a food item. A ``portions`` list replaces every existing portion."""
    return food_item_to_dict(MenuService(db).update_food_item(food_item_id, data))


@router.delete("/{food_item_id}")
@limiter.limit("30/minute")
def delete_food_item(request: Request, db: DbSession, food_item_id: int):
    MenuService(db).delete_food_item(food_item_id)
    return {"status": "deleted", "id": food_item_id}
