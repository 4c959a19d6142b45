"""Database models."""

from restaurant_pos.models.customer import Customer
from restaurant_pos.models.ingredient import Ingredient, IngredientMovement, MovementReason
from restaurant_pos.models.menu import (
    Category,
    FoodItem,
    FoodItemPortion,
    FoodItemPortionIngredient,
    Portion,
)
from restaurant_pos.models.order import (
    ACTIVE_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    Payment,
    PaymentMode,
)
from restaurant_pos.models.settings import THEMES, RestaurantSettings
from restaurant_pos.models.staff import Admin, Staff, StaffRole

__all__ = [
    "ACTIVE_ORDER_STATUSES",
    "Admin",
    "Category",
    "Customer",
    "FoodItem",
    "FoodItemPortion",
    "FoodItemPortionIngredient",
    "Ingredient",
    "IngredientMovement",
    "MovementReason",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "Payment",
    "PaymentMode",
    "Portion",
    "RestaurantSettings",
    "Staff",
    "StaffRole",
    "THEMES",
]
