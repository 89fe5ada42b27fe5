# manufacturing_api/routes/items.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from manufacturing_api.core.pagination import LimitQuery, OffsetQuery
from manufacturing_api.db.session import get_db
from manufacturing_api.schemas.item import ItemCreateIn, ItemOut, ItemUpdateIn
from manufacturing_api.services import item_service

router = APIRouter(tags=["items"])


@router.get("/items", response_model=List[ItemOut])
def list_items(
    company_id: Optional[UUID] = None,
    q: Optional[str] = None,
    is_active: Optional[bool] = None,
    limit: int = LimitQuery,
    offset: int = OffsetQuery,
    db: Session = Depends(get_db),
) -> List[ItemOut]:
    return item_service.list_items(
        db,
        company_id=company_id,
        q=q,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )


@router.post("/items", response_model=ItemOut, status_code=201)
def create_item(
    body: ItemCreateIn,
    db: Session = Depends(get_db),
) -> ItemOut:
    return item_service.create_item(db, body)


@router.get("/items/{item_id}", response_model=ItemOut)
def get_item(
    item_id: UUID,
    db: Session = Depends(get_db),
) -> ItemOut:
    return item_service.get_item(db, item_id)


@router.put("/items/{item_id}", response_model=ItemOut)
def update_item(
    item_id: UUID,
    body: ItemUpdateIn,
    db: Session = Depends(get_db),
) -> ItemOut:
    return item_service.update_item(db, item_id, body)
