"""Menu administration: categories, portions and food items with their recipes."""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from restaurant_pos.core.errors import BadRequestError, ConflictError, NotFoundError
from restaurant_pos.models.ingredient import Ingredient
from restaurant_pos.models.menu import Category, FoodItem, FoodItemPortion, FoodItemPortionIngredient, Portion
from restaurant_pos.models.order import Order, OrderItem, OrderStatus
from restaurant_pos.schemas.menu import (
    CategoryCreate,
    CategoryUpdate,
    FoodItemCreate,
    FoodItemPortionIn,
    FoodItemUpdate,
    PortionCreate,
    PortionUpdate,
)

logger = logging.getLogger(__name__)

CLOSED_ORDER_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


def food_item_query(db: Session):
    """Food item query with category, portions and recipes eagerly loaded."""
    return db.query(FoodItem).options(
        joinedload(FoodItem.category),
        selectinload(FoodItem.portions).joinedload(FoodItemPortion.portion),
        selectinload(FoodItem.portions)
        .selectinload(FoodItemPortion.ingredients)
        .joinedload(FoodItemPortionIngredient.ingredient),
    )


class MenuService:
    """Service for the menu catalogue."""

    def __init__(self, db: Session):
        self.db = db

    # ===== CATEGORIES =====

    def get_category(self, category_id: int) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    def list_categories(self, active_only: bool = False) -> List[Category]:
        query = self.db.query(Category)
        if active_only:
            query = query.filter(Category.is_active.is_(True))
        return query.order_by(Category.name).all()

    def _category_name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Category.id).filter(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first() is not None

    def create_category(self, data: CategoryCreate) -> Category:
        if self._category_name_taken(data.name):
            raise ConflictError("A category with this name already exists")
        category = Category(name=data.name, description=data.description, is_active=data.is_active)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info(f"Category created: {category.name} (ID: {category.id})")
        return category

    def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        category = self.get_category(category_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name") and self._category_name_taken(changes["name"], exclude_id=category_id):
            raise ConflictError("A category with this name already exists")

        if changes.get("is_active") is False and category.is_active:
            active_items = (
                self.db.query(func.count(FoodItem.id))
                .filter(FoodItem.category_id == category_id, FoodItem.is_active.is_(True))
                .scalar()
            )
            if active_items:
                raise BadRequestError(
                    f"Cannot deactivate category with {active_items} active food item(s)",
                    extra={"active_food_items": active_items},
                )

        for field, value in changes.items():
            if value is not None or field == "description":
                setattr(category, field, value)
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: int) -> None:
        category = self.get_category(category_id)
        item_count = self.db.query(func.count(FoodItem.id)).filter(FoodItem.category_id == category_id).scalar()
        if item_count:
            raise BadRequestError(
                "Cannot delete category with existing food items",
                extra={"food_item_count": item_count},
            )
        self.db.delete(category)
        self.db.commit()
        logger.info(f"Category deleted: {category.name}")

    # ===== PORTIONS =====

    def get_portion(self, portion_id: int) -> Portion:
        portion = self.db.query(Portion).filter(Portion.id == portion_id).first()
        if not portion:
            raise NotFoundError("Portion not found")
        return portion

    def list_portions(self, active_only: bool = False) -> List[Portion]:
        query = self.db.query(Portion)
        if active_only:
            query = query.filter(Portion.is_active.is_(True))
        return query.order_by(Portion.name).all()

    def _portion_name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Portion.id).filter(func.lower(Portion.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Portion.id != exclude_id)
        return query.first() is not None

    def create_portion(self, data: PortionCreate) -> Portion:
        if self._portion_name_taken(data.name):
            raise ConflictError("A portion with this name already exists")
        portion = Portion(name=data.name, description=data.description, is_active=data.is_active)
        self.db.add(portion)
        self.db.commit()
        self.db.refresh(portion)
        logger.info(f"Portion created: {portion.name} (ID: {portion.id})")
        return portion

    def update_portion(self, portion_id: int, data: PortionUpdate) -> Portion:
        portion = self.get_portion(portion_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name") and self._portion_name_taken(changes["name"], exclude_id=portion_id):
            raise ConflictError("A portion with this name already exists")

        if changes.get("is_active") is False and portion.is_active:
            active_items = (
                self.db.query(func.count(func.distinct(FoodItem.id)))
                .join(FoodItemPortion, FoodItemPortion.food_item_id == FoodItem.id)
                .filter(FoodItemPortion.portion_id == portion_id, FoodItem.is_active.is_(True))
                .scalar()
            )
            if active_items:
                raise BadRequestError(
                    f"Cannot deactivate portion used by {active_items} active food item(s)",
                    extra={"active_food_items": active_items},
                )

        for field, value in changes.items():
            if value is not None or field == "description":
                setattr(portion, field, value)
        self.db.commit()
        self.db.refresh(portion)
        return portion

    def delete_portion(self, portion_id: int) -> None:
        portion = self.get_portion(portion_id)
        usage = (
            self.db.query(func.count(FoodItemPortion.id))
            .filter(FoodItemPortion.portion_id == portion_id)
            .scalar()
        )
        if usage:
            raise BadRequestError(
                "Cannot delete portion as it is used by food items",
                extra={"food_item_count": usage},
            )
        self.db.delete(portion)
        self.db.commit()
        logger.info(f"Portion deleted: {portion.name}")

    # ===== FOOD ITEMS =====

    def get_food_item(self, food_item_id: int) -> FoodItem:
        food_item = food_item_query(self.db).filter(FoodItem.id == food_item_id).first()
        if not food_item:
            raise NotFoundError("Food item not found")
        return food_item

    def list_food_items(self, category_id: Optional[int] = None, active_only: bool = False) -> List[FoodItem]:
        query = food_item_query(self.db)
        if category_id is not None:
            query = query.filter(FoodItem.category_id == category_id)
        if active_only:
            query = query.filter(FoodItem.is_active.is_(True))
        return query.order_by(FoodItem.name).all()

    def _build_portions(self, portions: List[FoodItemPortionIn]) -> List[FoodItemPortion]:
        """Validate referenced portions/ingredients and build the recipe rows."""
        portion_ids = {p.portion_id for p in portions}
        found = {p.id for p in self.db.query(Portion.id).filter(Portion.id.in_(portion_ids))}
        missing = sorted(portion_ids - found)
        if missing:
            raise BadRequestError(f"Portion not found: {missing[0]}", extra={"portion_ids": missing})

        ingredient_ids = {i.ingredient_id for p in portions for i in p.ingredients}
        if ingredient_ids:
            found = {i.id for i in self.db.query(Ingredient.id).filter(Ingredient.id.in_(ingredient_ids))}
            missing = sorted(ingredient_ids - found)
            if missing:
                raise BadRequestError(f"Ingredient not found: {missing[0]}", extra={"ingredient_ids": missing})

        rows = []
        for p in portions:
            rows.append(FoodItemPortion(
                portion_id=p.portion_id,
                price=p.price,
                ingredients=[
                    FoodItemPortionIngredient(ingredient_id=i.ingredient_id, quantity=i.quantity)
                    for i in p.ingredients
                ],
            ))
        return rows

    def create_food_item(self, data: FoodItemCreate) -> FoodItem:
        self.get_category(data.category_id)
        food_item = FoodItem(
            name=data.name,
            description=data.description,
            image_url=data.image_url,
            category_id=data.category_id,
            is_active=data.is_active,
            portions=self._build_portions(data.portions),
        )
        self.db.add(food_item)
        self.db.commit()
        logger.info(f"Food item created: {food_item.name} with {len(data.portions)} portion(s)")
        return self.get_food_item(food_item.id)

    def _open_order_count(self, food_item_id: int) -> int:
        return (
            self.db.query(func.count(func.distinct(Order.id)))
            .join(OrderItem, OrderItem.order_id == Order.id)
            .filter(OrderItem.food_item_id == food_item_id, Order.status.notin_(CLOSED_ORDER_STATUSES))
            .scalar()
        )

    def update_food_item(self, food_item_id: int, data: FoodItemUpdate) -> FoodItem:
        food_item = self.get_food_item(food_item_id)
        changes = data.model_dump(exclude_unset=True, exclude={"portions"})

        if changes.get("category_id") is not None:
            self.get_category(changes["category_id"])

        if changes.get("is_active") is False and food_item.is_active:
            open_orders = self._open_order_count(food_item_id)
            if open_orders:
                raise BadRequestError(
                    f"Cannot deactivate food item while it is part of {open_orders} open order(s)",
                    extra={"open_orders": open_orders},
                )

        for field, value in changes.items():
            if value is not None or field in ("description", "image_url"):
                setattr(food_item, field, value)

        if data.portions is not None:
            new_portions = self._build_portions(data.portions)
            food_item.portions.clear()
            # Unique (food_item_id, portion_id) rows must be gone before re-inserting
            self.db.flush()
            food_item.portions.extend(new_portions)

        self.db.commit()
        self.db.expire_all()
        return self.get_food_item(food_item_id)

    def delete_food_item(self, food_item_id: int) -> None:
        food_item = self.get_food_item(food_item_id)
        order_lines = (
            self.db.query(func.count(OrderItem.id)).filter(OrderItem.food_item_id == food_item_id).scalar()
        )
        if order_lines:
            raise BadRequestError(
                "Cannot delete food item that has been ordered. Deactivate it instead.",
                extra={"order_item_count": order_lines},
            )
        self.db.delete(food_item)
        self.db.commit()
        logger.info(f"Food item deleted: {food_item.name}")

    def waiter_menu(self) -> Dict[str, List[FoodItem]]:
        """Orderable items grouped by category name.

        Only active items in active categories, each with at least one active portion.
        """
        items = (
            food_item_query(self.db)
            .join(Category, FoodItem.category_id == Category.id)
            .filter(FoodItem.is_active.is_(True), Category.is_active.is_(True))
            .order_by(Category.name, FoodItem.name)
            .all()
        )
        grouped: Dict[str, List[FoodItem]] = OrderedDict()
        for item in items:
            if not any(p.portion.is_active for p in item.portions):
                continue
            grouped.setdefault(item.category.name, []).append(item)
        return grouped
