from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from manufacturing_api.db.session import unit_of_work
from manufacturing_api.models.item import ItemORM
from manufacturing_api.schemas.item import ItemCreateIn, ItemUpdateIn
from manufacturing_api.services.errors import ConflictError, NotFoundError, is_unique_violation

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_item(db: Session, item_id: UUID) -> ItemORM:
    item = db.get(ItemORM, item_id)
    if not item:
        raise NotFoundError("Item", item_id)
    return item


def list_items(
    db: Session,
    *,
    company_id: Optional[UUID] = None,
    q: Optional[str] = None,
    is_active: Optional[bool] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[ItemORM]:
    conditions = []
    if company_id:
        conditions.append(ItemORM.company_id == company_id)
    if is_active is not None:
        conditions.append(ItemORM.is_active.is_(is_active))
    if q:
        conditions.append(or_(ItemORM.item_code.contains(q), ItemORM.item_name.contains(q)))

    stmt = select(ItemORM)
    if conditions:
        stmt = stmt.where(and_(*conditions))

    stmt = stmt.order_by(ItemORM.item_code.asc()).limit(limit).offset(offset)
    return list(db.execute(stmt).scalars().all())


def create_item(db: Session, body: ItemCreateIn) -> ItemORM:
    item_code = body.item_code.strip()

    existing = db.execute(
        select(ItemORM.id).where(
            ItemORM.company_id == body.company_id,
            ItemORM.item_code == item_code,
        ).limit(1)
    ).first()
    if existing is not None:
        raise ConflictError(f"Item code {item_code} already exists")

    now = _utcnow()
    item = ItemORM(
        id=uuid4(),
        company_id=body.company_id,
        item_code=item_code,
        item_name=body.item_name.strip(),
        description=body.description,
        stock_uom=(body.stock_uom.strip() if body.stock_uom else None),
        valuation_rate=Decimal(str(body.valuation_rate or 0)),
        is_stock_item=body.is_stock_item,
        is_active=True,
        created_at=now,
        updated_at=now,
    )

    try:
        with unit_of_work(db):
            db.add(item)
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise ConflictError(f"Item code {item_code} already exists") from e

    db.refresh(item)
    logger.info("Created item %s (%s)", item.item_code, item.id)
    return item


def update_item(db: Session, item_id: UUID, body: ItemUpdateIn) -> ItemORM:
    item = get_item(db, item_id)

    with unit_of_work(db):
        if body.item_name is not None:
            item.item_name = body.item_name.strip()
        if body.description is not None:
            item.description = body.description or None
        if body.stock_uom is not None:
            item.stock_uom = body.stock_uom.strip() if body.stock_uom else None
        if body.valuation_rate is not None:
            item.valuation_rate = Decimal(str(body.valuation_rate))
        if body.is_stock_item is not None:
            item.is_stock_item = body.is_stock_item
        if body.is_active is not None:
            item.is_active = body.is_active

        item.updated_at = _utcnow()

    db.refresh(item)
    return item
