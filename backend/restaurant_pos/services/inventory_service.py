"""Ingredient inventory: catalogue maintenance, stock in/out and the movement ledger.

Every change to ``Ingredient.current_stock_quantity`` goes through this
service (or the order service's batch deduction) and leaves an
``IngredientMovement`` row behind.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from restaurant_pos.core.errors import BadRequestError, ConflictError, NotFoundError, format_qty
from restaurant_pos.models.ingredient import Ingredient, IngredientMovement, MovementReason
from restaurant_pos.models.menu import FoodItemPortion, FoodItemPortionIngredient
from restaurant_pos.schemas.ingredient import IngredientCreate, IngredientUpdate, StockChange
from restaurant_pos.services.units import convert

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for ingredient stock management."""

    def __init__(self, db: Session):
        self.db = db

    # ===== LOOKUPS =====

    def get(self, ingredient_id: int) -> Ingredient:
        ingredient = self.db.query(Ingredient).filter(Ingredient.id == ingredient_id).first()
        if not ingredient:
            raise NotFoundError("Ingredient not found")
        return ingredient

    def list_active(self) -> List[Ingredient]:
        return (
            self.db.query(Ingredient)
            .filter(Ingredient.is_active.is_(True))
            .order_by(Ingredient.name)
            .all()
        )

    def low_stock(self) -> List[Ingredient]:
        """Active ingredients at or below their reorder level, emptiest first."""
        return (
            self.db.query(Ingredient)
            .filter(
                Ingredient.is_active.is_(True),
                Ingredient.current_stock_quantity <= Ingredient.reorder_level,
            )
            .order_by(Ingredient.current_stock_quantity, Ingredient.name)
            .all()
        )

    def movements(self, ingredient_id: int, limit: int = 100) -> List[IngredientMovement]:
        self.get(ingredient_id)
        return (
            self.db.query(IngredientMovement)
            .filter(IngredientMovement.ingredient_id == ingredient_id)
            .order_by(IngredientMovement.ts.desc(), IngredientMovement.id.desc())
            .limit(limit)
            .all()
        )

    def _name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Ingredient.id).filter(func.lower(Ingredient.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Ingredient.id != exclude_id)
        return query.first() is not None

    # ===== CATALOGUE =====

    def create(self, data: IngredientCreate) -> Ingredient:
        if self._name_taken(data.name):
            raise ConflictError("An ingredient with this name already exists")

        ingredient = Ingredient(
            name=data.name,
            description=data.description,
            unit_of_measurement=data.unit_of_measurement,
            current_stock_quantity=data.current_stock_quantity,
            reorder_level=data.reorder_level,
            is_active=True,
        )
        self.db.add(ingredient)
        self.db.flush()
        if data.current_stock_quantity > 0:
            self.record_movement(
                ingredient.id, data.current_stock_quantity, MovementReason.PURCHASE,
                notes="Opening stock",
            )
        self.db.commit()
        self.db.refresh(ingredient)
        logger.info(f"Ingredient created: {ingredient.name} (ID: {ingredient.id})")
        return ingredient

    def update(self, ingredient_id: int, data: IngredientUpdate) -> Ingredient:
        ingredient = self.get(ingredient_id)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes and self._name_taken(changes["name"], exclude_id=ingredient_id):
            raise ConflictError("An ingredient with this name already exists")

        new_stock = changes.pop("current_stock_quantity", None)
        for field, value in changes.items():
            if value is not None or field == "description":
                setattr(ingredient, field, value)

        if new_stock is not None and new_stock != ingredient.current_stock_quantity:
            delta = new_stock - ingredient.current_stock_quantity
            ingredient.current_stock_quantity = new_stock
            self.record_movement(ingredient.id, delta, MovementReason.ADJUSTMENT, notes="Manual stock correction")

        self.db.commit()
        self.db.refresh(ingredient)
        return ingredient

    def usage(self, ingredient_id: int) -> List[str]:
        """Names of the food item portions that consume an ingredient."""
        rows = (
            self.db.query(FoodItemPortionIngredient)
            .options(
                joinedload(FoodItemPortionIngredient.food_item_portion).joinedload(FoodItemPortion.food_item),
                joinedload(FoodItemPortionIngredient.food_item_portion).joinedload(FoodItemPortion.portion),
            )
            .filter(FoodItemPortionIngredient.ingredient_id == ingredient_id)
            .all()
        )
        return sorted(
            f"{row.food_item_portion.food_item.name} ({row.food_item_portion.portion.name})"
            for row in rows
        )

    def delete(self, ingredient_id: int) -> None:
        ingredient = self.get(ingredient_id)
        affected_items = self.usage(ingredient_id)
        if affected_items:
            raise BadRequestError(
                "Cannot delete ingredient as it is used in food items",
                extra={"affected_items": affected_items},
            )
        self.db.delete(ingredient)
        self.db.commit()
        logger.info(f"Ingredient deleted: {ingredient.name} (ID: {ingredient_id})")

    # ===== STOCK =====

    def _to_base_unit(self, ingredient: Ingredient, change: StockChange) -> Decimal:
        if not change.unit:
            return change.quantity
        return convert(change.quantity, change.unit, ingredient.unit_of_measurement)

    def add_stock(self, ingredient_id: int, change: StockChange) -> Dict:
        ingredient = self.get(ingredient_id)
        quantity = self._to_base_unit(ingredient, change)
        previous = ingredient.current_stock_quantity

        self.db.execute(
            update(Ingredient)
            .where(Ingredient.id == ingredient_id)
            .values(current_stock_quantity=Ingredient.current_stock_quantity + quantity)
        )
        self.record_movement(ingredient_id, quantity, MovementReason.PURCHASE, notes=change.notes)
        self.db.commit()
        self.db.refresh(ingredient)

        logger.info(
            f"Stock added to {ingredient.name}: +{format_qty(quantity)} {ingredient.unit_of_measurement}"
        )
        return {"ingredient": ingredient, "quantity": quantity, "previous_stock": previous}

    def stock_out(self, ingredient_id: int, change: StockChange) -> Dict:
        ingredient = self.get(ingredient_id)
        quantity = self._to_base_unit(ingredient, change)
        previous = ingredient.current_stock_quantity
        unit = ingredient.unit_of_measurement

        result = self.db.execute(
            update(Ingredient)
            .where(Ingredient.id == ingredient_id, Ingredient.current_stock_quantity >= quantity)
            .values(current_stock_quantity=Ingredient.current_stock_quantity - quantity)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise BadRequestError(
                f"Insufficient stock. Available: {format_qty(previous)} {unit}, "
                f"Requested: {format_qty(quantity)} {unit}"
            )
        self.record_movement(ingredient_id, -quantity, MovementReason.STOCK_OUT, notes=change.notes)
        self.db.commit()
        self.db.refresh(ingredient)

        logger.info(f"Stock out from {ingredient.name}: -{format_qty(quantity)} {unit}")
        return {"ingredient": ingredient, "quantity": quantity, "previous_stock": previous}

    def record_movement(
        self,
        ingredient_id: int,
        qty_delta: Decimal,
        reason: MovementReason,
        ref_type: Optional[str] = None,
        ref_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> IngredientMovement:
        """Append a ledger row. Does not commit."""
        movement = IngredientMovement(
            ingredient_id=ingredient_id,
            qty_delta=qty_delta,
            reason=reason.value,
            ref_type=ref_type,
            ref_id=ref_id,
            notes=notes,
        )
        self.db.add(movement)
        return movement
