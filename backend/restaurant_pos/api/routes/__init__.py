"""API routes."""

from fastapi import APIRouter

from restaurant_pos.api.routes import (
    bills,
    cashier,
    categories,
    customers,
    dashboard,
    food_items,
    ingredients,
    kitchen,
    notifications,
    orders,
    portions,
    reports,
    settings,
    staff,
    waiter,
)

api_router = APIRouter()

# Admin back office
api_router.include_router(categories.router, prefix="/admin/categories", tags=["menu"])
api_router.include_router(portions.router, prefix="/admin/portions", tags=["menu"])
api_router.include_router(food_items.router, prefix="/admin/food-items", tags=["menu"])
api_router.include_router(ingredients.router, prefix="/admin/ingredients", tags=["inventory"])
api_router.include_router(staff.router, prefix="/admin/staff", tags=["staff"])
api_router.include_router(orders.admin_router, prefix="/admin/orders", tags=["orders"])
api_router.include_router(dashboard.router, prefix="/admin", tags=["dashboard"])
api_router.include_router(settings.admin_router, prefix="/admin/settings", tags=["settings"])
api_router.include_router(reports.router, prefix="/admin/reports", tags=["reports"])

# Front of house
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(waiter.router, prefix="/waiter", tags=["waiter"])
api_router.include_router(kitchen.router, prefix="/kitchen", tags=["kitchen"])
api_router.include_router(cashier.router, prefix="/cashier", tags=["cashier"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])

# Customer-facing
api_router.include_router(bills.router, prefix="/bill", tags=["bills"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(notifications.router, tags=["notifications"])
