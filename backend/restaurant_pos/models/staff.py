"""Admin accounts and restaurant staff."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from restaurant_pos.db.base import Base, TimestampMixin


class StaffRole(str, Enum):
    """Roles a staff member can hold."""

    WAITER = "WAITER"
    KITCHEN = "KITCHEN"
    MANAGER = "MANAGER"
    CASHIER = "CASHIER"


class Admin(Base, TimestampMixin):
    """Back-office administrator."""

    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), default="admin", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value


class Staff(Base, TimestampMixin):
    """A staff member who takes, prepares or bills orders."""

    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    role: Mapped[StaffRole] = mapped_column(SQLEnum(StaffRole), nullable=False)
    # Links staff records created on behalf of an admin ("admin_<id>")
    external_id: Mapped[Optional[str]] = mapped_column(String(100), unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    orders: Mapped[List["Order"]] = relationship("Order", back_populates="staff")

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value
