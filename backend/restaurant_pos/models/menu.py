"""Menu models: categories, portions, food items and their recipes."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from restaurant_pos.db.base import Base, TimestampMixin
from restaurant_pos.models.validators import positive


class Category(Base, TimestampMixin):
    """Menu category (Mains, Drinks, ...)."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    food_items: Mapped[List["FoodItem"]] = relationship("FoodItem", back_populates="category")


class Portion(Base, TimestampMixin):
    """A size/variant that food items can be sold in (Regular, Large)."""

    __tablename__ = "portions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    food_item_portions: Mapped[List["FoodItemPortion"]] = relationship(
        "FoodItemPortion", back_populates="portion"
    )


class FoodItem(Base, TimestampMixin):
    """A dish on the menu."""

    __tablename__ = "food_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    category: Mapped["Category"] = relationship("Category", back_populates="food_items")
    portions: Mapped[List["FoodItemPortion"]] = relationship(
        "FoodItemPortion",
        back_populates="food_item",
        cascade="all, delete-orphan",
        order_by="FoodItemPortion.price",
    )


class FoodItemPortion(Base):
    """Price of a food item in a given portion, plus its ingredient recipe."""

    __tablename__ = "food_item_portions"
    __table_args__ = (
        UniqueConstraint("food_item_id", "portion_id", name="uq_food_item_portion"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    food_item_id: Mapped[int] = mapped_column(
        ForeignKey("food_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    portion_id: Mapped[int] = mapped_column(
        ForeignKey("portions.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    food_item: Mapped["FoodItem"] = relationship("FoodItem", back_populates="portions")
    portion: Mapped["Portion"] = relationship("Portion", back_populates="food_item_portions")
    ingredients: Mapped[List["FoodItemPortionIngredient"]] = relationship(
        "FoodItemPortionIngredient",
        back_populates="food_item_portion",
        cascade="all, delete-orphan",
    )

    @validates("price")
    def _validate_price(self, key, value):
        return positive(key, value)


class FoodItemPortionIngredient(Base):
    """Quantity of one ingredient consumed by one unit of a food item portion."""

    __tablename__ = "food_item_portion_ingredients"
    __table_args__ = (
        UniqueConstraint("food_item_portion_id", "ingredient_id", name="uq_portion_ingredient"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    food_item_portion_id: Mapped[int] = mapped_column(
        ForeignKey("food_item_portions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id: Mapped[int] = mapped_column(
        ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)

    food_item_portion: Mapped["FoodItemPortion"] = relationship(
        "FoodItemPortion", back_populates="ingredients"
    )
    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="portion_usages")

    @validates("quantity")
    def _validate_quantity(self, key, value):
        return positive(key, value)
