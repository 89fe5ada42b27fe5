# manufacturing_api/models/item.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from manufacturing_api.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ItemORM(Base):
    """
    Item master (finished goods, sub-assemblies, raw materials)

    - company_id: items are scoped per company
    - item_code: business key, unique within the company
    - stock_uom: stock unit of measure (e.g. Nos / Kg)
    - valuation_rate: default rate suggested for BOM lines
    """

    __tablename__ = "items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    company_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    item_code = Column(String(100), nullable=False)
    item_name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    stock_uom = Column(String(50), nullable=True)
    valuation_rate = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    is_stock_item = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("company_id", "item_code", name="uq_items_company_code"),
        Index("ix_items_company_name", "company_id", "item_name"),
    )
