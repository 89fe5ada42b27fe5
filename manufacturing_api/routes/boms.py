# manufacturing_api/routes/boms.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from manufacturing_api.core.pagination import LimitQuery, OffsetQuery
from manufacturing_api.db.session import get_db
from manufacturing_api.dependencies.actor import get_actor_id
from manufacturing_api.schemas.bom import (
    BOMAlternativeItemOut,
    BOMCostBreakdownOut,
    BOMCostIn,
    BOMCreateIn,
    BOMExplosionIn,
    BOMExplosionOut,
    BOMItemOut,
    BOMOperationOut,
    BOMOut,
    BOMScrapItemOut,
    BOMUpdateIn,
    BOMUpdateLogOut,
    BOMVersionCreateIn,
)
from manufacturing_api.services import bom_service

router = APIRouter(tags=["boms"])


# ============================================================
# BOM CRUD
# ============================================================

@router.get("/boms", response_model=List[BOMOut])
def list_boms(
    company_id: Optional[UUID] = None,
    item_id: Optional[UUID] = None,
    bom_no: Optional[str] = None,
    version: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_default: Optional[bool] = None,
    bom_type: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = LimitQuery,
    offset: int = OffsetQuery,
    db: Session = Depends(get_db),
) -> List[BOMOut]:
    return bom_service.list_boms(
        db,
        company_id=company_id,
        item_id=item_id,
        bom_no=bom_no,
        version=version,
        is_active=is_active,
        is_default=is_default,
        bom_type=bom_type,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.post("/boms", response_model=BOMOut, status_code=201)
def create_bom(
    body: BOMCreateIn,
    actor_id: UUID = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> BOMOut:
    return bom_service.create_bom(db, body, user_id=actor_id)


@router.get("/boms/{bom_id}", response_model=BOMOut)
def get_bom(
    bom_id: UUID,
    db: Session = Depends(get_db),
) -> BOMOut:
    return bom_service.get_bom(db, bom_id)


@router.put("/boms/{bom_id}", response_model=BOMOut)
def update_bom(
    bom_id: UUID,
    body: BOMUpdateIn,
    actor_id: UUID = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> BOMOut:
    return bom_service.update_bom(db, bom_id, body, user_id=actor_id)


@router.delete("/boms/{bom_id}")
def delete_bom(
    bom_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    bom_service.delete_bom(db, bom_id, user_id=actor_id)
    return {"deleted": True}


# ============================================================
# child collections
# ============================================================

@router.get("/boms/{bom_id}/items", response_model=List[BOMItemOut])
def list_bom_items(
    bom_id: UUID,
    db: Session = Depends(get_db),
) -> List[BOMItemOut]:
    bom_service.get_bom(db, bom_id)
    return bom_service.get_bom_items(db, bom_id)


@router.get("/boms/{bom_id}/operations", response_model=List[BOMOperationOut])
def list_bom_operations(
    bom_id: UUID,
    db: Session = Depends(get_db),
) -> List[BOMOperationOut]:
    bom_service.get_bom(db, bom_id)
    return bom_service.get_bom_operations(db, bom_id)


@router.get("/boms/{bom_id}/scrap-items", response_model=List[BOMScrapItemOut])
def list_bom_scrap_items(
    bom_id: UUID,
    db: Session = Depends(get_db),
) -> List[BOMScrapItemOut]:
    bom_service.get_bom(db, bom_id)
    return bom_service.get_bom_scrap_items(db, bom_id)


@router.get("/boms/items/{bom_item_id}/alternatives", response_model=List[BOMAlternativeItemOut])
def list_bom_alternative_items(
    bom_item_id: UUID,
    db: Session = Depends(get_db),
) -> List[BOMAlternativeItemOut]:
    return bom_service.get_bom_alternative_items(db, bom_item_id)


# audit entries survive deletion, so no existence check here
@router.get("/boms/{bom_id}/update-log", response_model=List[BOMUpdateLogOut])
def list_bom_update_log(
    bom_id: UUID,
    db: Session = Depends(get_db),
) -> List[BOMUpdateLogOut]:
    return bom_service.get_bom_update_log(db, bom_id)


# ============================================================
# versioning / cost / explosion
# ============================================================

@router.post("/boms/{bom_id}/versions", response_model=BOMOut, status_code=201)
def create_bom_version(
    bom_id: UUID,
    body: BOMVersionCreateIn,
    actor_id: UUID = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> BOMOut:
    return bom_service.create_bom_version(
        db,
        bom_id,
        new_version=body.new_version,
        change_description=body.change_description,
        make_default=body.make_default,
        user_id=actor_id,
    )


@router.post("/boms/{bom_id}/cost", response_model=BOMCostBreakdownOut)
def calculate_bom_cost(
    bom_id: UUID,
    body: BOMCostIn,
    db: Session = Depends(get_db),
) -> BOMCostBreakdownOut:
    return bom_service.calculate_bom_cost(
        db,
        bom_id,
        quantity=body.quantity,
        include_operations=body.include_operations,
        include_scrap=body.include_scrap,
    )


@router.post("/boms/{bom_id}/explode", response_model=BOMExplosionOut)
def explode_bom(
    bom_id: UUID,
    body: BOMExplosionIn,
    db: Session = Depends(get_db),
) -> BOMExplosionOut:
    return bom_service.explode_bom(
        db,
        bom_id,
        quantity=body.quantity,
        include_sub_assemblies=body.include_sub_assemblies,
        include_operations=body.include_operations,
        include_scrap=body.include_scrap,
    )
