"""Customer schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from restaurant_pos.core.sanitize import sanitize_text


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=3, max_length=50)
    email: Optional[EmailStr] = None

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


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None

    @field_validator("name", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _strip_phone(cls, v):
        return v.strip() if isinstance(v, str) else v
