"""Order, quick bill and payment schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from restaurant_pos.core.sanitize import sanitize_text
from restaurant_pos.models.order import OrderStatus, OrderType, PaymentMode


class OrderItemIn(BaseModel):
    food_item_id: int
    portion_id: int
    quantity: int = Field(..., gt=0)
    special_requests: Optional[str] = Field(default=None, max_length=500)

    @field_validator("special_requests", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class CustomerData(BaseModel):
    """Customer attached to an order.

    ``customer_id`` links an existing customer; otherwise the customer is
    looked up by phone and created when missing.
    """

    customer_id: Optional[int] = None
    name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[EmailStr] = None
    is_new_customer: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _strip_phone(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email(cls, v):
        return v or None


class PaymentData(BaseModel):
    received_amount: Decimal = Field(..., ge=0)
    balance: Decimal = Decimal("0")
    payment_mode: PaymentMode
    reference_number: Optional[str] = Field(default=None, max_length=100)


class WaiterOrderCreate(BaseModel):
    table_number: int = Field(..., gt=0)
    staff_id: int
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = Field(default=None, max_length=1000)
    order_type: OrderType = OrderType.DINE_IN
    customer_data: Optional[CustomerData] = None
    payment_data: Optional[PaymentData] = None

    @field_validator("notes", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class QuickBillCreate(BaseModel):
    """A takeaway/walk-in sale: no table, no kitchen workflow.

    Either ``staff_id`` or ``admin_id`` identifies who rings it up.
    """

    staff_id: Optional[int] = None
    admin_id: Optional[int] = None
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = Field(default=None, max_length=1000)
    order_type: OrderType = OrderType.TAKEAWAY
    customer_data: CustomerData
    payment_data: PaymentData

    @field_validator("notes", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class StatusUpdate(BaseModel):
    status: str

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator("reason", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)


class SendBillRequest(BaseModel):
    customer_name: Optional[str] = Field(default=None, max_length=255)
    customer_email: EmailStr
    customer_phone: Optional[str] = Field(default=None, max_length=50)

    @field_validator("customer_name", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)

    @field_validator("customer_phone", mode="before")
    @classmethod
    def _blank_phone(cls, v):
        return (v.strip() or None) if isinstance(v, str) else v


class PaymentCreate(BaseModel):
    order_id: int
    customer_id: int
    amount: Decimal = Field(..., gt=0)
    received_amount: Decimal = Field(..., ge=0)
    balance: Decimal = Decimal("0")
    payment_mode: PaymentMode
    reference_number: Optional[str] = Field(default=None, max_length=100)
