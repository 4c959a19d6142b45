"""Kitchen views: the order queue with recipes and ingredient availability."""

from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session, selectinload

from restaurant_pos.models.ingredient import Ingredient
from restaurant_pos.models.menu import FoodItem, FoodItemPortion, FoodItemPortionIngredient
from restaurant_pos.models.order import Order
from restaurant_pos.services.menu_service import food_item_query
from restaurant_pos.services.order_service import order_query
from restaurant_pos.services.order_status import KITCHEN_QUEUE

IN_STOCK = "IN_STOCK"
LOW_STOCK = "LOW_STOCK"
OUT_OF_STOCK = "OUT_OF_STOCK"


def stock_status(ingredient: Ingredient) -> str:
    stock = Decimal(ingredient.current_stock_quantity)
    if stock > ingredient.reorder_level:
        return IN_STOCK
    if stock > 0:
        return LOW_STOCK
    return OUT_OF_STOCK


def kitchen_queue(db: Session) -> List[Order]:
    """Pending, preparing and ready orders; by status, then oldest first."""
    orders = (
        order_query(db)
        .filter(Order.status.in_(KITCHEN_QUEUE))
        .order_by(Order.created_at, Order.id)
        .all()
    )
    rank = {s: i for i, s in enumerate(KITCHEN_QUEUE)}
    return sorted(orders, key=lambda o: rank[o.status])


def recipe_map(db: Session, orders: List[Order]) -> Dict[Tuple[int, int], List[dict]]:
    """Per-portion ingredient lists for every (food item, portion) in ``orders``."""
    pairs = {(item.food_item_id, item.portion_id) for order in orders for item in order.items}
    if not pairs:
        return {}
    food_item_ids = {food_item_id for food_item_id, _ in pairs}
    portions = (
        db.query(FoodItemPortion)
        .options(selectinload(FoodItemPortion.ingredients).joinedload(FoodItemPortionIngredient.ingredient))
        .filter(FoodItemPortion.food_item_id.in_(food_item_ids))
        .all()
    )
    recipes = {}
    for fip in portions:
        key = (fip.food_item_id, fip.portion_id)
        if key not in pairs:
            continue
        recipes[key] = [
            {
                "ingredient_id": usage.ingredient_id,
                "ingredient_name": usage.ingredient.name,
                "unit_of_measurement": usage.ingredient.unit_of_measurement,
                "quantity": float(usage.quantity),
            }
            for usage in fip.ingredients
        ]
    return recipes


def ingredient_availability(db: Session) -> List[dict]:
    """Active food items with each portion's ingredients and their stock state."""
    items = (
        food_item_query(db)
        .filter(FoodItem.is_active.is_(True))
        .order_by(FoodItem.name)
        .all()
    )
    results = []
    for item in items:
        portions = []
        for fip in item.portions:
            ingredients = [
                {
                    "ingredient_id": usage.ingredient.id,
                    "ingredient_name": usage.ingredient.name,
                    "unit_of_measurement": usage.ingredient.unit_of_measurement,
                    "quantity": float(usage.quantity),
                    "current_stock_quantity": float(usage.ingredient.current_stock_quantity),
                    "reorder_level": float(usage.ingredient.reorder_level),
                    "stock_status": stock_status(usage.ingredient),
                }
                for usage in fip.ingredients
            ]
            portions.append({
                "portion_id": fip.portion_id,
                "portion_name": fip.portion.name,
                "price": float(fip.price),
                "ingredients": ingredients,
            })
        results.append({
            "id": item.id,
            "name": item.name,
            "category": item.category.name,
            "portions": portions,
        })
    return results
