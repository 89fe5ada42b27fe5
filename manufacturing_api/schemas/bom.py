# manufacturing_api/schemas/bom.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# child lines (input)
# ============================================================

class BOMAlternativeItemIn(BaseModel):
    alternative_item_id: UUID
    alternative_item_code: str = Field(..., max_length=100)
    alternative_item_name: str = Field(..., max_length=255)

    conversion_factor: Decimal = Field(default=Decimal("1"), gt=Decimal("0"))
    priority: int = Field(default=1, ge=1)
    is_active: bool = True


class BOMItemIn(BaseModel):
    item_id: UUID
    item_code: str = Field(..., max_length=100)
    item_name: str = Field(..., max_length=255)
    description: Optional[str] = None

    qty: Decimal = Field(..., ge=Decimal("0"))
    uom: str = Field(..., max_length=50)
    rate: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    conversion_factor: Decimal = Field(default=Decimal("1"), gt=Decimal("0"))

    # bom_no of the sub-assembly when this component is manufactured
    bom_no: Optional[str] = Field(default=None, max_length=50)

    allow_alternative_item: bool = False
    include_item_in_manufacturing: bool = True
    sourced_by_supplier: bool = False
    operation_id: Optional[UUID] = None

    alternatives: List[BOMAlternativeItemIn] = Field(default_factory=list)


class BOMOperationIn(BaseModel):
    operation_no: str = Field(..., max_length=50)
    operation_name: str = Field(..., max_length=255)
    description: Optional[str] = None

    workstation_id: Optional[UUID] = None
    workstation_type: Optional[str] = Field(default=None, max_length=100)

    time_in_mins: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    hour_rate: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    batch_size: int = Field(default=1, ge=1)
    fixed_time_in_mins: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    set_up_time: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    tear_down_time: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    # falls back to the list position when omitted or 0
    sequence_id: Optional[int] = Field(default=None, ge=0)


class BOMScrapItemIn(BaseModel):
    item_id: UUID
    item_code: str = Field(..., max_length=100)
    item_name: str = Field(..., max_length=255)

    stock_qty: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    rate: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    stock_uom: Optional[str] = Field(default=None, max_length=50)


# ============================================================
# BOM header (input)
# ============================================================

class BOMCreateIn(BaseModel):
    bom_no: str = Field(..., min_length=1, max_length=50)
    item_id: UUID
    company_id: UUID

    version: str = Field(default="1.0", min_length=1, max_length=20)
    description: Optional[str] = None

    quantity: Decimal = Field(default=Decimal("1"), gt=Decimal("0"))
    uom: str = Field(..., max_length=50)

    bom_type: str = Field(default="Manufacturing", max_length=50)
    is_default: bool = False
    with_operations: bool = False
    transfer_material_against: str = Field(default="Work Order", max_length=50)
    allow_alternative_item: bool = False
    allow_same_item_multiple_times: bool = False
    set_rate_of_sub_assembly_item_based_on_bom: bool = True

    # None -> settings.DEFAULT_CURRENCY
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)

    inspection_required: bool = False
    quality_inspection_template: Optional[str] = Field(default=None, max_length=255)

    project_id: Optional[UUID] = None
    routing_id: Optional[UUID] = None

    items: List[BOMItemIn] = Field(default_factory=list)
    operations: List[BOMOperationIn] = Field(default_factory=list)
    scrap_items: List[BOMScrapItemIn] = Field(default_factory=list)


class BOMUpdateIn(BaseModel):
    """
    Header fields are patched only when present.
    items / operations / scrap_items, when present, replace the whole collection.
    """

    description: Optional[str] = None

    quantity: Optional[Decimal] = Field(default=None, gt=Decimal("0"))
    uom: Optional[str] = Field(default=None, max_length=50)

    is_active: Optional[bool] = None
    is_default: Optional[bool] = None
    with_operations: Optional[bool] = None
    transfer_material_against: Optional[str] = Field(default=None, max_length=50)
    allow_alternative_item: Optional[bool] = None
    allow_same_item_multiple_times: Optional[bool] = None
    set_rate_of_sub_assembly_item_based_on_bom: Optional[bool] = None

    inspection_required: Optional[bool] = None
    quality_inspection_template: Optional[str] = Field(default=None, max_length=255)

    items: Optional[List[BOMItemIn]] = None
    operations: Optional[List[BOMOperationIn]] = None
    scrap_items: Optional[List[BOMScrapItemIn]] = None


class BOMVersionCreateIn(BaseModel):
    new_version: str = Field(..., min_length=1, max_length=20)
    change_description: Optional[str] = None
    make_default: bool = False


class BOMCostIn(BaseModel):
    # None -> the BOM's own quantity
    quantity: Optional[Decimal] = Field(default=None, gt=Decimal("0"))
    include_operations: bool = False
    include_scrap: bool = False


class BOMExplosionIn(BaseModel):
    quantity: Decimal = Field(..., gt=Decimal("0"))
    include_sub_assemblies: bool = False
    include_operations: bool = False
    include_scrap: bool = False


# ============================================================
# output
# ============================================================

class BOMOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bom_no: str
    item_id: UUID
    company_id: UUID
    version: str

    is_active: bool
    is_default: bool

    description: Optional[str] = None

    quantity: Decimal
    uom: str

    raw_material_cost: Decimal
    operating_cost: Decimal
    total_cost: Decimal
    currency: str

    bom_type: str
    with_operations: bool
    transfer_material_against: Optional[str] = None
    allow_alternative_item: bool
    allow_same_item_multiple_times: bool
    set_rate_of_sub_assembly_item_based_on_bom: bool

    inspection_required: bool
    quality_inspection_template: Optional[str] = None

    project_id: Optional[UUID] = None
    routing_id: Optional[UUID] = None

    created_by: UUID
    created_at: datetime
    updated_at: datetime


class BOMItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bom_id: UUID

    item_id: UUID
    item_code: str
    item_name: str
    description: Optional[str] = None

    qty: Decimal
    uom: str
    rate: Decimal
    amount: Decimal
    conversion_factor: Decimal

    bom_no: Optional[str] = None

    allow_alternative_item: bool
    include_item_in_manufacturing: bool
    sourced_by_supplier: bool
    operation_id: Optional[UUID] = None

    idx: int


class BOMOperationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bom_id: UUID

    operation_no: str
    operation_name: str
    description: Optional[str] = None

    workstation_id: Optional[UUID] = None
    workstation_type: Optional[str] = None

    time_in_mins: Decimal
    hour_rate: Decimal
    operating_cost: Decimal

    batch_size: int
    fixed_time_in_mins: Decimal
    set_up_time: Decimal
    tear_down_time: Decimal

    sequence_id: int
    idx: int


class BOMScrapItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bom_id: UUID

    item_id: UUID
    item_code: str
    item_name: str

    stock_qty: Decimal
    rate: Decimal
    amount: Decimal
    stock_uom: Optional[str] = None

    idx: int


class BOMAlternativeItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bom_item_id: UUID

    alternative_item_id: UUID
    alternative_item_code: str
    alternative_item_name: str

    conversion_factor: Decimal
    priority: int
    is_active: bool


class BOMUpdateLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bom_id: UUID

    update_type: str
    change_description: Optional[str] = None

    previous_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None

    updated_by: UUID
    created_at: datetime


class BOMCostBreakdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    material_cost: Decimal
    operating_cost: Decimal
    scrap_cost: Decimal
    total_cost: Decimal
    currency: str


class BOMExplosionLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: UUID
    item_code: str
    item_name: str

    required_qty: Decimal
    uom: str
    rate: Decimal
    amount: Decimal

    level: int
    parent_bom_id: UUID
    bom_no: Optional[str] = None


class BOMExplosionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: List[BOMExplosionLineOut]
    cost_breakdown: BOMCostBreakdownOut
    total_quantity: Decimal

    # true when a sub-assembly was reached again (cycle or shared component)
    # and its lines were not repeated
    truncated: bool = False
    # each skipped BOM once, in the order first reached
    truncated_bom_ids: List[UUID] = Field(default_factory=list)
