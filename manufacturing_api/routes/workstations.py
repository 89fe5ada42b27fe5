# manufacturing_api/routes/workstations.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from manufacturing_api.core.pagination import LimitQuery, OffsetQuery
from manufacturing_api.db.session import get_db
from manufacturing_api.schemas.workstation import (
    WorkstationCapacityOut,
    WorkstationCostBreakdownOut,
    WorkstationCreateIn,
    WorkstationOut,
    WorkstationUpdateIn,
)
from manufacturing_api.services import workstation_service

router = APIRouter(tags=["workstations"])


@router.get("/workstations", response_model=List[WorkstationOut])
def list_workstations(
    company_id: Optional[UUID] = None,
    warehouse_id: Optional[UUID] = None,
    workstation_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = LimitQuery,
    offset: int = OffsetQuery,
    db: Session = Depends(get_db),
) -> List[WorkstationOut]:
    return workstation_service.list_workstations(
        db,
        company_id=company_id,
        warehouse_id=warehouse_id,
        workstation_type=workstation_type,
        is_active=is_active,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.post("/workstations", response_model=WorkstationOut, status_code=201)
def create_workstation(
    body: WorkstationCreateIn,
    db: Session = Depends(get_db),
) -> WorkstationOut:
    return workstation_service.create_workstation(db, body)


@router.get("/workstations/{workstation_id}", response_model=WorkstationOut)
def get_workstation(
    workstation_id: UUID,
    db: Session = Depends(get_db),
) -> WorkstationOut:
    return workstation_service.get_workstation(db, workstation_id)


@router.put("/workstations/{workstation_id}", response_model=WorkstationOut)
def update_workstation(
    workstation_id: UUID,
    body: WorkstationUpdateIn,
    db: Session = Depends(get_db),
) -> WorkstationOut:
    return workstation_service.update_workstation(db, workstation_id, body)


@router.delete("/workstations/{workstation_id}")
def delete_workstation(
    workstation_id: UUID,
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    workstation_service.delete_workstation(db, workstation_id)
    return {"deleted": True}


@router.get("/workstations/{workstation_id}/capacity", response_model=WorkstationCapacityOut)
def get_workstation_capacity(
    workstation_id: UUID,
    db: Session = Depends(get_db),
) -> WorkstationCapacityOut:
    return workstation_service.get_workstation_capacity_info(db, workstation_id)


@router.get("/workstations/{workstation_id}/cost-breakdown", response_model=WorkstationCostBreakdownOut)
def get_workstation_cost_breakdown(
    workstation_id: UUID,
    db: Session = Depends(get_db),
) -> WorkstationCostBreakdownOut:
    return workstation_service.get_workstation_cost_breakdown(db, workstation_id)
