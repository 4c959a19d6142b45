"""Restaurant settings schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SettingsUpdate(BaseModel):
    service_charge_rate: Optional[Decimal] = None
    theme: Optional[str] = None


class SmsRequest(BaseModel):
    phone_number: str = Field(..., min_length=3, max_length=50)
    message: str = Field(..., min_length=1, max_length=1000)
