"""Unit conversion for ingredient quantities.

Ingredients are stocked in one base unit each. Stock adjustments may be
entered in a larger unit of the same family (kg for a g ingredient, L for
an ml ingredient) and are converted before touching stock.
"""

from decimal import Decimal
from typing import Optional, Tuple

from restaurant_pos.core.errors import BadRequestError, format_qty

# Conversion factors to the family's base unit
UNIT_CONVERSIONS = {
    # Weight: base unit = g
    "g": Decimal("1"),
    "kg": Decimal("1000"),
    # Volume: base unit = ml
    "ml": Decimal("1"),
    "l": Decimal("1000"),
}

WEIGHT_UNITS = {"g", "kg"}
VOLUME_UNITS = {"ml", "l"}


class UnitConversionError(BadRequestError):
    """Raised when converting between incompatible units."""

    def __init__(self, from_unit: str, to_unit: str):
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(f"Cannot convert '{from_unit}' to '{to_unit}'")


def normalize_unit(unit: str) -> str:
    return unit.strip().lower()


def _family(unit: str) -> Optional[str]:
    if unit in WEIGHT_UNITS:
        return "weight"
    if unit in VOLUME_UNITS:
        return "volume"
    return None


def convert(quantity: Decimal, from_unit: str, to_unit: str) -> Decimal:
    """Convert ``quantity`` expressed in ``from_unit`` into ``to_unit``.

    Identical units (case-insensitive) pass through untouched, which covers
    count units like ``pcs`` that have no conversion table entry.
    """
    src, dst = normalize_unit(from_unit), normalize_unit(to_unit)
    if src == dst:
        return quantity
    if _family(src) is None or _family(src) != _family(dst):
        raise UnitConversionError(from_unit, to_unit)
    return quantity * UNIT_CONVERSIONS[src] / UNIT_CONVERSIONS[dst]


def best_unit(quantity: Decimal, unit: str) -> Tuple[Decimal, str]:
    """Express a base-unit quantity in the largest sensible unit (1500 g -> 1.5 kg)."""
    u = normalize_unit(unit)
    if u == "g" and abs(quantity) >= 1000:
        return quantity / 1000, "kg"
    if u == "ml" and abs(quantity) >= 1000:
        return quantity / 1000, "L"
    return quantity, unit


def format_quantity(quantity: Decimal, unit: str) -> str:
    value, display_unit = best_unit(Decimal(str(quantity)), unit)
    return f"{format_qty(value)} {display_unit}"
