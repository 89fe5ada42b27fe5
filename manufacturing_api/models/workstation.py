# manufacturing_api/models/workstation.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from manufacturing_api.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkstationORM(Base):
    """
    Workstation / work center

    - hour_rate_*: hourly cost components (electricity, consumables, rent, labour)
    - production_capacity: parallel jobs the station can run
    - working_hours_start / working_hours_end: "HH:MM"
    """

    __tablename__ = "workstations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    workstation_name = Column(String(255), nullable=False, index=True)
    workstation_type = Column(String(100), nullable=True)

    company_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    warehouse_id = Column(Uuid(as_uuid=True), nullable=True, index=True)

    description = Column(Text, nullable=True)

    hour_rate = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    hour_rate_electricity = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    hour_rate_consumable = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    hour_rate_rent = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    hour_rate_labour = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    production_capacity = Column(Numeric(15, 2), nullable=False, default=Decimal("1"))

    working_hours_start = Column(String(10), nullable=True)
    working_hours_end = Column(String(10), nullable=True)
    holiday_list = Column(String(255), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("company_id", "workstation_name", name="uq_workstations_company_name"),
    )
