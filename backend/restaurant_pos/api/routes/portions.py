"""Portion (size/variant) administration routes."""

from fastapi import APIRouter, Request, status

from restaurant_pos.api.serializers import portion_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.menu import PortionCreate, PortionUpdate
from restaurant_pos.services.menu_service import MenuService

router = APIRouter()


@router.get("")
@limiter.limit("60/minute")
def list_portions(request: Request, db: DbSession, active_only: bool = False):
    portions = MenuService(db).list_portions(active_only=active_only)
    return list_response([portion_to_dict(p) for p in portions])


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_portion(request: Request, db: DbSession, data: PortionCreate):
    return portion_to_dict(MenuService(db).create_portion(data))


@router.put("/{portion_id}")
@limiter.limit("30/minute")
def update_portion(request: Request, db: DbSession, portion_id: int, data: PortionUpdate):
    """Update a portion. Deactivation is refused while active food items are sold in it."""
    return portion_to_dict(MenuService(db).update_portion(portion_id, data))


@router.delete("/{portion_id}")
@limiter.limit("30/minute")
def delete_portion(request: Request, db: DbSession, portion_id: int):
    MenuService(db).delete_portion(portion_id)
    return {"status": "deleted", "id": portion_id}
