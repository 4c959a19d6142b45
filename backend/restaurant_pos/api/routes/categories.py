"""Menu category administration routes."""

from fastapi import APIRouter, Request, status

from restaurant_pos.api.serializers import category_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.menu import CategoryCreate, CategoryUpdate
from restaurant_pos.services.menu_service import MenuService

router = APIRouter()


@router.get("")
@limiter.limit("60/minute")
def list_categories(request: Request, db: DbSession, active_only: bool = False):
    """List menu categories, optionally only the active ones."""
    categories = MenuService(db).list_categories(active_only=active_only)
    return list_response([category_to_dict(c) for c in categories])


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_category(request: Request, db: DbSession, data: CategoryCreate):
    return category_to_dict(MenuService(db).create_category(data))


@router.put("/{category_id}")
@limiter.limit("30/minute")
def update_category(request: Request, db: DbSession, category_id: int, data: CategoryUpdate):
    """Update a category. Deactivation is refused while it still has active food items."""
    return category_to_dict(MenuService(db).update_category(category_id, data))


@router.delete("/{category_id}")
@limiter.limit("30/minute")
def delete_category(request: Request, db: DbSession, category_id: int):
    MenuService(db).delete_category(category_id)
    return {"status": "deleted", "id": category_id}
