from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from manufacturing_api.core.config import settings
from manufacturing_api.db.session import unit_of_work
from manufacturing_api.models.workstation import WorkstationORM
from manufacturing_api.schemas.workstation import WorkstationCreateIn, WorkstationUpdateIn
from manufacturing_api.services.errors import ConflictError, NotFoundError, is_unique_violation

logger = logging.getLogger(__name__)

DEFAULT_DAILY_HOURS = Decimal("8")
DEFAULT_HOURS_START = "08:00"
DEFAULT_HOURS_END = "17:00"

_RATE_FIELDS = (
    "hour_rate",
    "hour_rate_electricity",
    "hour_rate_consumable",
    "hour_rate_rent",
    "hour_rate_labour",
)

_NOT_NULL_FIELDS = frozenset(_RATE_FIELDS) | {"workstation_name", "production_capacity", "is_active"}


@dataclass(frozen=True)
class WorkstationCapacity:
    total_capacity: Decimal
    available_capacity: Decimal
    utilization_percentage: Decimal
    working_hours_start: str
    working_hours_end: str
    daily_working_hours: Decimal


@dataclass(frozen=True)
class WorkstationCostBreakdown:
    hour_rate: Decimal
    electricity_cost: Decimal
    consumable_cost: Decimal
    rent_cost: Decimal
    labour_cost: Decimal
    total_hourly_rate: Decimal
    currency: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dec(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _hours(hhmm: str) -> Decimal:
    """'HH:MM' -> decimal hours since midnight"""
    h, m = hhmm.split(":", 1)
    return Decimal(int(h)) + Decimal(int(m)) / Decimal("60")


def _name_taken(db: Session, company_id: UUID, name: str, exclude_id: Optional[UUID] = None) -> bool:
    stmt = select(WorkstationORM.id).where(
        WorkstationORM.company_id == company_id,
        WorkstationORM.workstation_name == name,
    )
    if exclude_id is not None:
        stmt = stmt.where(WorkstationORM.id != exclude_id)
    return db.execute(stmt.limit(1)).first() is not None


def get_workstation(db: Session, workstation_id: UUID) -> WorkstationORM:
    ws = db.get(WorkstationORM, workstation_id)
    if not ws:
        raise NotFoundError("Workstation", workstation_id)
    return ws


def list_workstations(
    db: Session,
    *,
    company_id: Optional[UUID] = None,
    warehouse_id: Optional[UUID] = None,
    workstation_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[WorkstationORM]:
    conditions = []
    if company_id:
        conditions.append(WorkstationORM.company_id == company_id)
    if warehouse_id:
        conditions.append(WorkstationORM.warehouse_id == warehouse_id)
    if workstation_type:
        conditions.append(WorkstationORM.workstation_type == workstation_type)
    if is_active is not None:
        conditions.append(WorkstationORM.is_active.is_(is_active))
    if search:
        conditions.append(
            or_(
                WorkstationORM.workstation_name.contains(search),
                WorkstationORM.workstation_type.contains(search),
                WorkstationORM.description.contains(search),
            )
        )

    stmt = select(WorkstationORM)
    if conditions:
        stmt = stmt.where(and_(*conditions))

    stmt = stmt.order_by(WorkstationORM.created_at.desc()).limit(limit).offset(offset)
    return list(db.execute(stmt).scalars().all())


def create_workstation(db: Session, body: WorkstationCreateIn) -> WorkstationORM:
    name = body.workstation_name.strip()
    if _name_taken(db, body.company_id, name):
        raise ConflictError(f"Workstation {name} already exists")

    now = _utcnow()
    ws = WorkstationORM(
        id=uuid4(),
        company_id=body.company_id,
        workstation_name=name,
        workstation_type=body.workstation_type or None,
        warehouse_id=body.warehouse_id,
        description=body.description or None,
        hour_rate=_dec(body.hour_rate),
        hour_rate_electricity=_dec(body.hour_rate_electricity),
        hour_rate_consumable=_dec(body.hour_rate_consumable),
        hour_rate_rent=_dec(body.hour_rate_rent),
        hour_rate_labour=_dec(body.hour_rate_labour),
        production_capacity=_dec(body.production_capacity or 1),
        working_hours_start=body.working_hours_start,
        working_hours_end=body.working_hours_end,
        holiday_list=body.holiday_list or None,
        is_active=True,
        created_at=now,
        updated_at=now,
    )

    try:
        with unit_of_work(db):
            db.add(ws)
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise ConflictError(f"Workstation {name} already exists") from e

    db.refresh(ws)
    logger.info("Created workstation %s (%s)", ws.workstation_name, ws.id)
    return ws


def update_workstation(db: Session, workstation_id: UUID, body: WorkstationUpdateIn) -> WorkstationORM:
    ws = get_workstation(db, workstation_id)

    data = body.model_dump(exclude_unset=True)

    name = data.get("workstation_name")
    if name is not None:
        name = name.strip()
        if name != ws.workstation_name and _name_taken(db, ws.company_id, name, exclude_id=ws.id):
            raise ConflictError(f"Workstation {name} already exists")
        data["workstation_name"] = name

    try:
        with unit_of_work(db):
            for key, value in data.items():
                if value is None and key in _NOT_NULL_FIELDS:
                    continue
                if key in _RATE_FIELDS or key == "production_capacity":
                    value = _dec(value)
                setattr(ws, key, value)
            ws.updated_at = _utcnow()
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise ConflictError(f"Workstation {name} already exists") from e

    db.refresh(ws)
    logger.info("Updated workstation %s (%s)", ws.workstation_name, ws.id)
    return ws


def delete_workstation(db: Session, workstation_id: UUID) -> None:
    ws = get_workstation(db, workstation_id)

    with unit_of_work(db):
        db.delete(ws)

    logger.info("Deleted workstation %s (%s)", ws.workstation_name, workstation_id)


def get_workstation_capacity_info(db: Session, workstation_id: UUID) -> WorkstationCapacity:
    """
    Daily capacity from the configured working hours.

    No scheduling data is consulted yet, so the whole capacity is reported
    as available.
    """
    ws = get_workstation(db, workstation_id)

    daily_hours = DEFAULT_DAILY_HOURS
    if ws.working_hours_start and ws.working_hours_end:
        daily_hours = _hours(ws.working_hours_end) - _hours(ws.working_hours_start)
        if daily_hours <= 0:
            # overnight shift, e.g. 22:00 -> 06:00
            daily_hours += Decimal("24")

    total = _dec(ws.production_capacity or 1) * daily_hours
    available = total
    utilization = Decimal("0") if not total else (total - available) / total * Decimal("100")

    return WorkstationCapacity(
        total_capacity=total,
        available_capacity=available,
        utilization_percentage=utilization,
        working_hours_start=ws.working_hours_start or DEFAULT_HOURS_START,
        working_hours_end=ws.working_hours_end or DEFAULT_HOURS_END,
        daily_working_hours=daily_hours,
    )


def get_workstation_cost_breakdown(db: Session, workstation_id: UUID) -> WorkstationCostBreakdown:
    ws = get_workstation(db, workstation_id)

    hour_rate = _dec(ws.hour_rate)
    electricity = _dec(ws.hour_rate_electricity)
    consumable = _dec(ws.hour_rate_consumable)
    rent = _dec(ws.hour_rate_rent)
    labour = _dec(ws.hour_rate_labour)

    return WorkstationCostBreakdown(
        hour_rate=hour_rate,
        electricity_cost=electricity,
        consumable_cost=consumable,
        rent_cost=rent,
        labour_cost=labour,
        total_hourly_rate=hour_rate + electricity + consumable + rent + labour,
        currency=settings.DEFAULT_CURRENCY,
    )
