# manufacturing_api/models/bom.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from manufacturing_api.models.base import Base


# ============================================================
# utils
# ============================================================

def _utcnow() -> datetime:
    """UTC now (timezone aware)"""
    return datetime.now(timezone.utc)


# ============================================================
# boms
# ============================================================

class BOMORM(Base):
    """
    Bill of Materials header

    - (bom_no, company_id, version) is unique; several versions share a bom_no
    - only one version per (bom_no, company_id) is default (kept by the service layer)
    - raw_material_cost / operating_cost / total_cost are a stored rollup of the
      child lines, recomputed whenever the BOM is created or updated
    """

    __tablename__ = "boms"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # --------------------------------------------------------
    # identity
    # --------------------------------------------------------

    bom_no = Column(String(50), nullable=False, index=True)

    item_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("items.id"),
        nullable=False,
        index=True,
    )

    company_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    version = Column(String(20), nullable=False, default="1.0", index=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_default = Column(Boolean, nullable=False, default=False)

    description = Column(Text, nullable=True)

    # output quantity produced by one run of this BOM
    quantity = Column(Numeric(15, 6), nullable=False, default=Decimal("1"))
    uom = Column(String(50), nullable=False)

    # --------------------------------------------------------
    # cost rollup
    # --------------------------------------------------------

    raw_material_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    operating_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    total_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    currency = Column(String(3), nullable=False, default="USD")

    # --------------------------------------------------------
    # flags
    # --------------------------------------------------------

    bom_type = Column(String(50), nullable=False, default="Manufacturing")
    with_operations = Column(Boolean, nullable=False, default=False)
    transfer_material_against = Column(String(50), nullable=True, default="Work Order")
    allow_alternative_item = Column(Boolean, nullable=False, default=False)
    allow_same_item_multiple_times = Column(Boolean, nullable=False, default=False)
    set_rate_of_sub_assembly_item_based_on_bom = Column(Boolean, nullable=False, default=True)

    inspection_required = Column(Boolean, nullable=False, default=False)
    quality_inspection_template = Column(String(255), nullable=True)

    project_id = Column(Uuid(as_uuid=True), nullable=True)
    routing_id = Column(Uuid(as_uuid=True), nullable=True)

    created_by = Column(Uuid(as_uuid=True), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # --------------------------------------------------------
    # relationships
    # - child rows are attached through these collections (header rows
    #   flush before their lines)
    # --------------------------------------------------------

    item = relationship("ItemORM", lazy="selectin")

    items = relationship(
        "BOMItemORM",
        back_populates="bom",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BOMItemORM.idx",
        lazy="selectin",
    )

    operations = relationship(
        "BOMOperationORM",
        back_populates="bom",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BOMOperationORM.sequence_id",
        lazy="selectin",
    )

    scrap_items = relationship(
        "BOMScrapItemORM",
        back_populates="bom",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BOMScrapItemORM.idx",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("bom_no", "company_id", "version", name="uq_boms_no_company_version"),
        Index("ix_boms_no_company", "bom_no", "company_id"),
    )


# ============================================================
# bom_items
# ============================================================

class BOMItemORM(Base):
    """
    Component line consumed per BOM output

    bom_no: free-text reference to the sub-assembly BOM when the component is
    itself manufactured. Resolved only at explosion time (active + default).
    """

    __tablename__ = "bom_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    bom_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("boms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    item_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    item_code = Column(String(100), nullable=False)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    qty = Column(Numeric(15, 6), nullable=False, default=Decimal("0"))
    uom = Column(String(50), nullable=False)

    rate = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    # rate * qty
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    conversion_factor = Column(Numeric(15, 6), nullable=False, default=Decimal("1"))

    bom_no = Column(String(50), nullable=True)

    allow_alternative_item = Column(Boolean, nullable=False, default=False)
    include_item_in_manufacturing = Column(Boolean, nullable=False, default=True)
    sourced_by_supplier = Column(Boolean, nullable=False, default=False)

    operation_id = Column(Uuid(as_uuid=True), nullable=True)

    # input order (0-based), preserved on read
    idx = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # relationships
    bom = relationship("BOMORM", back_populates="items")

    alternatives = relationship(
        "BOMAlternativeItemORM",
        back_populates="bom_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BOMAlternativeItemORM.priority",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_bom_items_bom_idx", "bom_id", "idx"),
    )


# ============================================================
# bom_operations
# ============================================================

class BOMOperationORM(Base):
    """
    Routing step

    operating_cost = time_in_mins / 60 * hour_rate
    """

    __tablename__ = "bom_operations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    bom_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("boms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    operation_no = Column(String(50), nullable=False, index=True)
    operation_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    workstation_id = Column(Uuid(as_uuid=True), nullable=True)
    workstation_type = Column(String(100), nullable=True)

    time_in_mins = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    hour_rate = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    operating_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    batch_size = Column(Integer, nullable=False, default=1)
    fixed_time_in_mins = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    set_up_time = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    tear_down_time = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    sequence_id = Column(Integer, nullable=False, default=0, index=True)
    idx = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # relationships
    bom = relationship("BOMORM", back_populates="operations")


# ============================================================
# bom_scrap_items
# ============================================================

class BOMScrapItemORM(Base):
    """Expected scrap / by-product per BOM output."""

    __tablename__ = "bom_scrap_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    bom_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("boms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    item_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    item_code = Column(String(100), nullable=False)
    item_name = Column(String(255), nullable=False)

    stock_qty = Column(Numeric(15, 6), nullable=False, default=Decimal("0"))
    rate = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    stock_uom = Column(String(50), nullable=True)

    idx = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # relationships
    bom = relationship("BOMORM", back_populates="scrap_items")


# ============================================================
# bom_alternative_items
# ============================================================

class BOMAlternativeItemORM(Base):
    """Substitute items for a component line, tried in ascending priority."""

    __tablename__ = "bom_alternative_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    bom_item_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bom_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    alternative_item_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    alternative_item_code = Column(String(100), nullable=False)
    alternative_item_name = Column(String(255), nullable=False)

    conversion_factor = Column(Numeric(15, 6), nullable=False, default=Decimal("1"))
    priority = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # relationships
    bom_item = relationship("BOMItemORM", back_populates="alternatives")


# ============================================================
# bom_update_log
# ============================================================

class BOMUpdateLogORM(Base):
    """
    Append-only audit trail

    update_type: created / updated / version_created / deleted

    bom_id is not a FK: entries outlive the BOM they describe.
    """

    __tablename__ = "bom_update_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)

    bom_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    update_type = Column(String(50), nullable=False, index=True)
    change_description = Column(Text, nullable=True)

    previous_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)

    updated_by = Column(Uuid(as_uuid=True), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
