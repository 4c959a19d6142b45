"""Menu administration schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from restaurant_pos.core.sanitize import sanitize_text


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("name", "description", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class PortionCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("name", "description", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class PortionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class PortionIngredientIn(BaseModel):
    """Ingredient consumed by one unit of a portion."""

    ingredient_id: int
    quantity: Decimal = Field(..., gt=0)


class FoodItemPortionIn(BaseModel):
    """Price and recipe of a food item in one portion."""

    portion_id: int
    price: Decimal = Field(..., gt=0)
    ingredients: List[PortionIngredientIn] = []

    @model_validator(mode="after")
    def unique_ingredients(self):
        ids = [i.ingredient_id for i in self.ingredients]
        if len(ids) != len(set(ids)):
            raise ValueError("Each ingredient may appear only once per portion")
        return self


class FoodItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=500)
    category_id: int
    is_active: bool = True
    portions: List[FoodItemPortionIn] = Field(..., min_length=1)

    @field_validator("name", "description", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)

    @model_validator(mode="after")
    def unique_portions(self):
        ids = [p.portion_id for p in self.portions]
        if len(ids) != len(set(ids)):
            raise ValueError("Each portion may appear only once per food item")
        return self


class FoodItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = None
    is_active: Optional[bool] = None
    # When given, replaces every portion of the item
    portions: Optional[List[FoodItemPortionIn]] = Field(default=None, min_length=1)

    @field_validator("name", "description", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)

    @model_validator(mode="after")
    def unique_portions(self):
        if self.portions:
            ids = [p.portion_id for p in self.portions]
            if len(ids) != len(set(ids)):
                raise ValueError("Each portion may appear only once per food item")
        return self
