"""Ingredient and stock movement schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from restaurant_pos.core.sanitize import sanitize_text


class IngredientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    unit_of_measurement: str = Field(..., min_length=1, max_length=20)
    current_stock_quantity: Decimal = Field(default=Decimal("0"), ge=0)
    reorder_level: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("name", "description", "unit_of_measurement", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class IngredientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    unit_of_measurement: Optional[str] = Field(default=None, min_length=1, max_length=20)
    current_stock_quantity: Optional[Decimal] = Field(default=None, ge=0)
    reorder_level: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("name", "description", "unit_of_measurement", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class StockChange(BaseModel):
    """Quantity added to or removed from an ingredient.

    ``unit`` defaults to the ingredient's own unit; ``kg`` against a ``g``
    ingredient (or ``L`` against ``ml``) is converted.
    """

    quantity: Decimal = Field(..., gt=0)
    unit: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("notes", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)
