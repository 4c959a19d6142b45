"""ORM -> response dict conversion shared by the routers.

Money and quantities leave the API as JSON numbers, timestamps as ISO strings.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from restaurant_pos.models.customer import Customer
from restaurant_pos.models.ingredient import Ingredient, IngredientMovement
from restaurant_pos.models.menu import Category, FoodItem, FoodItemPortion, Portion
from restaurant_pos.models.order import Order, OrderItem, Payment
from restaurant_pos.models.settings import RestaurantSettings
from restaurant_pos.models.staff import Staff


def _num(value) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def category_to_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "is_active": category.is_active,
        "created_at": _iso(category.created_at),
        "updated_at": _iso(category.updated_at),
    }


def portion_to_dict(portion: Portion) -> dict:
    return {
        "id": portion.id,
        "name": portion.name,
        "description": portion.description,
        "is_active": portion.is_active,
        "created_at": _iso(portion.created_at),
        "updated_at": _iso(portion.updated_at),
    }


def ingredient_to_dict(ingredient: Ingredient) -> dict:
    return {
        "id": ingredient.id,
        "name": ingredient.name,
        "description": ingredient.description,
        "unit_of_measurement": ingredient.unit_of_measurement,
        "current_stock_quantity": _num(ingredient.current_stock_quantity),
        "reorder_level": _num(ingredient.reorder_level),
        "is_low_stock": ingredient.is_low_stock,
        "is_active": ingredient.is_active,
        "created_at": _iso(ingredient.created_at),
        "updated_at": _iso(ingredient.updated_at),
    }


def movement_to_dict(movement: IngredientMovement) -> dict:
    return {
        "id": movement.id,
        "ingredient_id": movement.ingredient_id,
        "qty_delta": _num(movement.qty_delta),
        "reason": movement.reason,
        "ref_type": movement.ref_type,
        "ref_id": movement.ref_id,
        "notes": movement.notes,
        "ts": _iso(movement.ts),
    }


def food_item_portion_to_dict(fip: FoodItemPortion) -> dict:
    return {
        "id": fip.id,
        "portion_id": fip.portion_id,
        "portion": {"id": fip.portion.id, "name": fip.portion.name, "is_active": fip.portion.is_active},
        "price": _num(fip.price),
        "ingredients": [
            {
                "id": usage.id,
                "ingredient_id": usage.ingredient_id,
                "ingredient_name": usage.ingredient.name,
                "unit_of_measurement": usage.ingredient.unit_of_measurement,
                "quantity": _num(usage.quantity),
            }
            for usage in fip.ingredients
        ],
    }


def food_item_to_dict(food_item: FoodItem, active_portions_only: bool = False) -> dict:
    portions = food_item.portions
    if active_portions_only:
        portions = [p for p in portions if p.portion.is_active]
    return {
        "id": food_item.id,
        "name": food_item.name,
        "description": food_item.description,
        "image_url": food_item.image_url,
        "category_id": food_item.category_id,
        "category": {"id": food_item.category.id, "name": food_item.category.name},
        "is_active": food_item.is_active,
        "portions": [food_item_portion_to_dict(p) for p in portions],
        "created_at": _iso(food_item.created_at),
        "updated_at": _iso(food_item.updated_at),
    }


def staff_to_dict(staff: Staff) -> dict:
    return {
        "id": staff.id,
        "name": staff.name,
        "email": staff.email,
        "phone": staff.phone,
        "role": staff.role.value,
        "is_active": staff.is_active,
        "last_login": _iso(staff.last_login),
        "created_at": _iso(staff.created_at),
    }


def customer_to_dict(customer: Customer, stats: Optional[Dict[str, Any]] = None) -> dict:
    data = {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "created_at": _iso(customer.created_at),
        "updated_at": _iso(customer.updated_at),
    }
    if stats is not None:
        data["order_count"] = stats["order_count"]
        data["total_spent"] = _num(stats["total_spent"])
        data["last_order_date"] = _iso(stats["last_order_date"])
    return data


def payment_to_dict(payment: Payment) -> dict:
    return {
        "id": payment.id,
        "order_id": payment.order_id,
        "customer_id": payment.customer_id,
        "amount": _num(payment.amount),
        "received_amount": _num(payment.received_amount),
        "balance": _num(payment.balance),
        "payment_mode": payment.payment_mode.value,
        "reference_number": payment.reference_number,
        "payment_date": _iso(payment.payment_date),
    }


def order_item_to_dict(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "food_item_id": item.food_item_id,
        "food_item": {"id": item.food_item.id, "name": item.food_item.name},
        "portion_id": item.portion_id,
        "portion": {"id": item.portion.id, "name": item.portion.name},
        "quantity": item.quantity,
        "unit_price": _num(item.unit_price),
        "total_price": _num(item.total_price),
        "special_requests": item.special_requests,
    }


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "table_number": order.table_number,
        "status": order.status.value,
        "order_type": order.order_type.value,
        "total_amount": _num(order.total_amount),
        "notes": order.notes,
        "bill_number": order.bill_number,
        "customer_id": order.customer_id,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "staff_id": order.staff_id,
        "staff": {"id": order.staff.id, "name": order.staff.name, "role": order.staff.role.value} if order.staff else None,
        "items": [order_item_to_dict(item) for item in order.items],
        "payments": [payment_to_dict(p) for p in order.payments],
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def kitchen_order_to_dict(order: Order, recipes: Dict[tuple, List[dict]]) -> dict:
    """Order with each line's ingredient breakdown (per portion and for the line)."""
    data = order_to_dict(order)
    for item_data, item in zip(data["items"], order.items):
        item_data["ingredients"] = [
            {
                **usage,
                "total_quantity": round(usage["quantity"] * item.quantity, 3),
            }
            for usage in recipes.get((item.food_item_id, item.portion_id), [])
        ]
    return data


def totals_to_dict(totals: Dict[str, Decimal]) -> dict:
    return {key: float(value) for key, value in totals.items()}


def settings_to_dict(row: RestaurantSettings) -> dict:
    return {
        "id": row.id,
        "service_charge_rate": _num(row.service_charge_rate),
        "theme": row.theme,
        "updated_at": _iso(row.updated_at),
    }
