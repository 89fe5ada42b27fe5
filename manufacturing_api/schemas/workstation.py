# manufacturing_api/schemas/workstation.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# "HH:MM" (24h)
_HHMM = r"^([01]?\d|2[0-3]):[0-5]\d$"


class WorkstationCreateIn(BaseModel):
    company_id: UUID

    workstation_name: str = Field(..., min_length=1, max_length=255)
    workstation_type: Optional[str] = Field(default=None, max_length=100)
    warehouse_id: Optional[UUID] = None
    description: Optional[str] = None

    hour_rate: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    hour_rate_electricity: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    hour_rate_consumable: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    hour_rate_rent: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    hour_rate_labour: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    production_capacity: Decimal = Field(default=Decimal("1"), gt=Decimal("0"))

    working_hours_start: Optional[str] = Field(default=None, pattern=_HHMM)
    working_hours_end: Optional[str] = Field(default=None, pattern=_HHMM)
    holiday_list: Optional[str] = Field(default=None, max_length=255)


class WorkstationUpdateIn(BaseModel):
    workstation_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    workstation_type: Optional[str] = Field(default=None, max_length=100)
    warehouse_id: Optional[UUID] = None
    description: Optional[str] = None

    hour_rate: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    hour_rate_electricity: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    hour_rate_consumable: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    hour_rate_rent: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    hour_rate_labour: Optional[Decimal] = Field(default=None, ge=Decimal("0"))

    production_capacity: Optional[Decimal] = Field(default=None, gt=Decimal("0"))

    working_hours_start: Optional[str] = Field(default=None, pattern=_HHMM)
    working_hours_end: Optional[str] = Field(default=None, pattern=_HHMM)
    holiday_list: Optional[str] = Field(default=None, max_length=255)

    is_active: Optional[bool] = None


class WorkstationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID

    workstation_name: str
    workstation_type: Optional[str] = None
    warehouse_id: Optional[UUID] = None
    description: Optional[str] = None

    hour_rate: Decimal
    hour_rate_electricity: Decimal
    hour_rate_consumable: Decimal
    hour_rate_rent: Decimal
    hour_rate_labour: Decimal

    production_capacity: Decimal

    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    holiday_list: Optional[str] = None

    is_active: bool

    created_at: datetime
    updated_at: datetime


class WorkstationCapacityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_capacity: Decimal
    available_capacity: Decimal
    utilization_percentage: Decimal
    working_hours_start: str
    working_hours_end: str
    daily_working_hours: Decimal


class WorkstationCostBreakdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour_rate: Decimal
    electricity_cost: Decimal
    consumable_cost: Decimal
    rent_cost: Decimal
    labour_cost: Decimal
    total_hourly_rate: Decimal
    currency: str
