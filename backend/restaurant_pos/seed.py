"""Seed a demo admin and a small sample menu.

Usage:
    cd backend
    python -m restaurant_pos.seed

Safe to run repeatedly: existing rows (matched by email or name) are left alone.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from restaurant_pos.core.security import get_password_hash
from restaurant_pos.db.base import Base
from restaurant_pos.db.session import SessionLocal, engine
from restaurant_pos.models import (
    Admin,
    Category,
    FoodItem,
    FoodItemPortion,
    FoodItemPortionIngredient,
    Ingredient,
    Portion,
    RestaurantSettings,
    Staff,
    StaffRole,
)

DEMO_ADMIN_EMAIL = "admin@restaurant.com"
DEMO_ADMIN_PASSWORD = "admin123"

INGREDIENTS = [
    # name, unit, stock, reorder level
    ("Beef Patty", "g", "5000", "1000"),
    ("Burger Bun", "pcs", "100", "20"),
    ("Cheddar", "g", "2000", "500"),
    ("Rice", "g", "10000", "2000"),
    ("Chicken", "g", "6000", "1500"),
    ("Coconut Milk", "ml", "4000", "1000"),
]

STAFF = [
    ("Nimal Perera", "nimal@restaurant.com", StaffRole.WAITER),
    ("Kamala Silva", "kamala@restaurant.com", StaffRole.KITCHEN),
    ("Ruwan Fernando", "ruwan@restaurant.com", StaffRole.CASHIER),
]

# food item -> (category, {portion: (price, {ingredient: quantity})})
MENU = {
    "Classic Burger": ("Burgers", {
        "Regular": ("1200.00", {"Beef Patty": "100", "Burger Bun": "1"}),
        "Large": ("1800.00", {"Beef Patty": "200", "Burger Bun": "1", "Cheddar": "30"}),
    }),
    "Chicken Curry": ("Rice & Curry", {
        "Regular": ("950.00", {"Rice": "250", "Chicken": "150", "Coconut Milk": "100"}),
        "Large": ("1400.00", {"Rice": "400", "Chicken": "250", "Coconut Milk": "150"}),
    }),
}


def _get_or_create(db: Session, model, defaults=None, **lookup):
    instance = db.query(model).filter_by(**lookup).first()
    if instance:
        return instance, False
    instance = model(**lookup, **(defaults or {}))
    db.add(instance)
    db.flush()
    return instance, True


def seed_admin(db: Session) -> Admin:
    admin, created = _get_or_create(
        db,
        Admin,
        email=DEMO_ADMIN_EMAIL,
        defaults={
            "password_hash": get_password_hash(DEMO_ADMIN_PASSWORD),
            "name": "Demo Administrator",
            "role": "admin",
            "is_active": True,
        },
    )
    if created:
        print(f"Demo admin user created: {admin.email}")
    return admin


def seed_menu(db: Session) -> None:
    ingredients = {}
    for name, unit, stock, reorder in INGREDIENTS:
        ingredients[name], _ = _get_or_create(
            db,
            Ingredient,
            name=name,
            defaults={
                "unit_of_measurement": unit,
                "current_stock_quantity": Decimal(stock),
                "reorder_level": Decimal(reorder),
            },
        )

    for name, email, role in STAFF:
        _get_or_create(db, Staff, email=email, defaults={"name": name, "role": role})

    portions = {}
    for food_name, (category_name, portion_specs) in MENU.items():
        category, _ = _get_or_create(db, Category, name=category_name)
        for portion_name in portion_specs:
            if portion_name not in portions:
                portions[portion_name], _ = _get_or_create(db, Portion, name=portion_name)

        if db.query(FoodItem).filter(FoodItem.name == food_name).first():
            continue
        food_item = FoodItem(name=food_name, category_id=category.id)
        for portion_name, (price, recipe) in portion_specs.items():
            food_item.portions.append(FoodItemPortion(
                portion_id=portions[portion_name].id,
                price=Decimal(price),
                ingredients=[
                    FoodItemPortionIngredient(ingredient_id=ingredients[i].id, quantity=Decimal(q))
                    for i, q in recipe.items()
                ],
            ))
        db.add(food_item)
        print(f"Food item created: {food_name}")

    if not db.query(RestaurantSettings).first():
        db.add(RestaurantSettings(service_charge_rate=Decimal("10"), theme="blue"))


def seed() -> None:
    """Create tables if needed and insert the demo data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin(db)
        seed_menu(db)
        db.commit()
        print("Seed data committed successfully.")
        print(f"Admin credentials: {DEMO_ADMIN_EMAIL} / {DEMO_ADMIN_PASSWORD}")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
