"""Admin dashboard routes."""

from fastapi import APIRouter, Request

from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.db.session import DbSession
from restaurant_pos.services.report_service import dashboard_stats

router = APIRouter()


@router.get("/dashboard-stats")
@limiter.limit("60/minute")
def get_dashboard_stats(request: Request, db: DbSession):
    """Today's orders and revenue against yesterday, table occupancy and menu/stock counts."""
    return dashboard_stats(db)
