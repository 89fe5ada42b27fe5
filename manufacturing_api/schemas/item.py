# manufacturing_api/schemas/item.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ItemCreateIn(BaseModel):
    company_id: UUID

    item_code: str = Field(..., min_length=1, max_length=100)
    item_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

    stock_uom: Optional[str] = Field(default=None, max_length=50)
    valuation_rate: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    is_stock_item: bool = True


class ItemUpdateIn(BaseModel):
    item_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None

    stock_uom: Optional[str] = Field(default=None, max_length=50)
    valuation_rate: Optional[Decimal] = Field(default=None, ge=Decimal("0"))

    is_stock_item: Optional[bool] = None
    is_active: Optional[bool] = None


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID

    item_code: str
    item_name: str
    description: Optional[str] = None

    stock_uom: Optional[str] = None
    valuation_rate: Decimal

    is_stock_item: bool
    is_active: bool

    created_at: datetime
    updated_at: datetime
