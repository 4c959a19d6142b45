"""Restaurant-wide settings (single row)."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from restaurant_pos.db.base import Base, TimestampMixin
from restaurant_pos.models.validators import percentage

THEMES = ("blue", "green", "purple", "red", "yellow", "indigo")


class RestaurantSettings(Base, TimestampMixin):
    """Service charge and UI theme."""

    __tablename__ = "restaurant_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    service_charge_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=Decimal("0"), nullable=False
    )
    theme: Mapped[str] = mapped_column(String(20), default="blue", nullable=False)

    @validates("service_charge_rate")
    def _validate_rate(self, key, value):
        return percentage(key, value)

    @validates("theme")
    def _validate_theme(self, key, value):
        if value not in THEMES:
            raise ValueError(f"theme must be one of {', '.join(THEMES)}, got {value}")
        return value
