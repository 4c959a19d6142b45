"""Restaurant settings routes."""

from fastapi import APIRouter, Request

from restaurant_pos.api.serializers import settings_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.settings import SettingsUpdate
from restaurant_pos.services.billing_service import get_restaurant_settings, update_restaurant_settings

admin_router = APIRouter()
router = APIRouter()


@admin_router.get("")
@limiter.limit("60/minute")
def get_settings(request: Request, db: DbSession):
    return settings_to_dict(get_restaurant_settings(db))


@admin_router.put("")
@limiter.limit("30/minute")
def update_settings(request: Request, db: DbSession, data: SettingsUpdate):
    """Update the service charge rate (0-100) and/or theme."""
    row = update_restaurant_settings(db, data)
    return {"message": "Settings updated successfully", "settings": settings_to_dict(row)}


@router.get("")
@limiter.limit("60/minute")
def get_public_settings(request: Request, db: DbSession):
    row = get_restaurant_settings(db)
    return {"service_charge_rate": float(row.service_charge_rate), "theme": row.theme}
