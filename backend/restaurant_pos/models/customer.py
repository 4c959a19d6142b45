"""Customer model."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaurant_pos.db.base import Base, TimestampMixin


class Customer(Base, TimestampMixin):
    """A customer, identified by phone number."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    orders: Mapped[List["Order"]] = relationship("Order", back_populates="customer")
    payments: Mapped[List["Payment"]] = relationship("Payment", back_populates="customer")
