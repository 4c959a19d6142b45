"""Ingredient stock and the stock movement ledger."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from restaurant_pos.db.base import Base, TimestampMixin
from restaurant_pos.models.validators import non_negative


class MovementReason(str, Enum):
    """Reasons for ingredient stock movements."""

    PURCHASE = "purchase"  # Stock received (add-stock)
    STOCK_OUT = "stock_out"  # Manual removal (waste, spoilage)
    SALE = "sale"  # Consumed by an order
    CANCELLATION = "cancellation"  # Returned by a cancelled order
    ADJUSTMENT = "adjustment"  # Manual correction


class Ingredient(Base, TimestampMixin):
    """A stocked ingredient, measured in a single unit."""

    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_of_measurement: Mapped[str] = mapped_column(String(20), nullable=False)
    current_stock_quantity: Mapped[Decimal] = mapped_column(
        Numeric(12, 3), default=Decimal("0"), nullable=False
    )
    reorder_level: Mapped[Decimal] = mapped_column(
        Numeric(12, 3), default=Decimal("0"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    portion_usages: Mapped[List["FoodItemPortionIngredient"]] = relationship(
        "FoodItemPortionIngredient", back_populates="ingredient"
    )
    movements: Mapped[List["IngredientMovement"]] = relationship(
        "IngredientMovement", back_populates="ingredient", cascade="all, delete-orphan"
    )

    @validates("current_stock_quantity", "reorder_level")
    def _validate_non_negative(self, key, value):
        return non_negative(key, value)

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock_quantity <= self.reorder_level


class IngredientMovement(Base):
    """Ledger of every ingredient stock change."""

    __tablename__ = "ingredient_movements"

    id: Mapped[int] = mapped_column(primary_key=True)
    ts: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    ingredient_id: Mapped[int] = mapped_column(
        ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    qty_delta: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    ref_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ref_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="movements")
