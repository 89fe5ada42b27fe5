"""
BOM service.

CRUD, cost calculation, multi-level explosion and versioning for Bills of
Materials. Every mutation writes its rows, the header cost rollup and one
bom_update_log entry inside a single unit of work.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple
from uuid import UUID, uuid4

from sqlalchemy import and_, func, inspect, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from manufacturing_api.core.config import settings
from manufacturing_api.db.session import unit_of_work
from manufacturing_api.models.bom import (
    BOMAlternativeItemORM,
    BOMItemORM,
    BOMOperationORM,
    BOMORM,
    BOMScrapItemORM,
    BOMUpdateLogORM,
)
from manufacturing_api.models.item import ItemORM
from manufacturing_api.schemas.bom import (
    BOMCreateIn,
    BOMItemIn,
    BOMOperationIn,
    BOMScrapItemIn,
    BOMUpdateIn,
)
from manufacturing_api.services.errors import ConflictError, NotFoundError, is_unique_violation

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_MINUTES_PER_HOUR = Decimal("60")

# header columns a BOMUpdateIn may patch
_PATCHABLE_FIELDS = (
    "description",
    "quantity",
    "uom",
    "is_active",
    "is_default",
    "with_operations",
    "transfer_material_against",
    "allow_alternative_item",
    "allow_same_item_multiple_times",
    "set_rate_of_sub_assembly_item_based_on_bom",
    "inspection_required",
    "quality_inspection_template",
)

_COPY_EXCLUDE = frozenset({"id", "created_at", "updated_at"})


# ============================================================
# result types
# ============================================================

@dataclass(frozen=True)
class CostBreakdown:
    material_cost: Decimal
    operating_cost: Decimal
    scrap_cost: Decimal
    total_cost: Decimal
    currency: str


@dataclass(frozen=True)
class ExplosionLine:
    item_id: UUID
    item_code: str
    item_name: str
    required_qty: Decimal
    uom: str
    rate: Decimal
    amount: Decimal
    level: int
    parent_bom_id: UUID
    bom_no: Optional[str]


@dataclass(frozen=True)
class ExplosionResult:
    items: List[ExplosionLine]
    cost_breakdown: CostBreakdown
    total_quantity: Decimal
    truncated: bool = False
    truncated_bom_ids: List[UUID] = field(default_factory=list)


# ============================================================
# utils
# ============================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dec(value: Any) -> Decimal:
    # missing / blank -> 0
    if value is None or value == "":
        return _ZERO
    return Decimal(str(value))


def _jsonb_safe(v: Any) -> Any:
    # JSON serializable (UUID / Decimal / datetime -> str)
    return json.loads(json.dumps(v, default=str))


def _columns(row: Any, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    skip = set(exclude)
    return {
        attr.key: getattr(row, attr.key)
        for attr in inspect(row).mapper.column_attrs
        if attr.key not in skip
    }


def _snapshot(row: Any) -> Dict[str, Any]:
    return _jsonb_safe(_columns(row))


def _append_log(
    db: Session,
    *,
    bom_id: UUID,
    update_type: str,
    change_description: str,
    user_id: UUID,
    previous_data: Optional[Dict[str, Any]] = None,
    new_data: Optional[Dict[str, Any]] = None,
) -> None:
    db.add(
        BOMUpdateLogORM(
            id=uuid4(),
            bom_id=bom_id,
            update_type=update_type,
            change_description=change_description,
            previous_data=_jsonb_safe(previous_data) if previous_data is not None else None,
            new_data=_jsonb_safe(new_data) if new_data is not None else None,
            updated_by=user_id,
            created_at=_utcnow(),
        )
    )


# ============================================================
# child rows
# - built detached and attached through the BOMORM / BOMItemORM
#   collections; the relationships order the inserts
# ============================================================

def _build_items(lines: Sequence[BOMItemIn], now: datetime) -> List[BOMItemORM]:
    rows: List[BOMItemORM] = []
    for idx, ln in enumerate(lines):
        qty = _dec(ln.qty)
        rate = _dec(ln.rate)

        row = BOMItemORM(
            id=uuid4(),
            item_id=ln.item_id,
            item_code=ln.item_code.strip(),
            item_name=ln.item_name.strip(),
            description=ln.description or None,
            qty=qty,
            uom=ln.uom,
            rate=rate,
            amount=rate * qty,
            conversion_factor=_dec(ln.conversion_factor or 1),
            bom_no=(ln.bom_no.strip() if ln.bom_no else None),
            allow_alternative_item=ln.allow_alternative_item,
            include_item_in_manufacturing=ln.include_item_in_manufacturing,
            sourced_by_supplier=ln.sourced_by_supplier,
            operation_id=ln.operation_id,
            idx=idx,
            created_at=now,
            updated_at=now,
        )
        row.alternatives = [
            BOMAlternativeItemORM(
                id=uuid4(),
                alternative_item_id=alt.alternative_item_id,
                alternative_item_code=alt.alternative_item_code,
                alternative_item_name=alt.alternative_item_name,
                conversion_factor=_dec(alt.conversion_factor),
                priority=alt.priority,
                is_active=alt.is_active,
                created_at=now,
                updated_at=now,
            )
            for alt in ln.alternatives
        ]
        rows.append(row)
    return rows


def _build_operations(operations: Sequence[BOMOperationIn], now: datetime) -> List[BOMOperationORM]:
    rows: List[BOMOperationORM] = []
    for idx, op in enumerate(operations):
        time_in_mins = _dec(op.time_in_mins)
        hour_rate = _dec(op.hour_rate)

        rows.append(
            BOMOperationORM(
                id=uuid4(),
                operation_no=op.operation_no,
                operation_name=op.operation_name,
                description=op.description or None,
                workstation_id=op.workstation_id,
                workstation_type=op.workstation_type or None,
                time_in_mins=time_in_mins,
                hour_rate=hour_rate,
                operating_cost=time_in_mins / _MINUTES_PER_HOUR * hour_rate,
                batch_size=op.batch_size or 1,
                fixed_time_in_mins=_dec(op.fixed_time_in_mins),
                set_up_time=_dec(op.set_up_time),
                tear_down_time=_dec(op.tear_down_time),
                # 0 / missing -> list position
                sequence_id=op.sequence_id or idx,
                idx=idx,
                created_at=now,
                updated_at=now,
            )
        )
    return rows


def _build_scrap_items(scrap_items: Sequence[BOMScrapItemIn], now: datetime) -> List[BOMScrapItemORM]:
    rows: List[BOMScrapItemORM] = []
    for idx, sc in enumerate(scrap_items):
        stock_qty = _dec(sc.stock_qty)
        rate = _dec(sc.rate)

        rows.append(
            BOMScrapItemORM(
                id=uuid4(),
                item_id=sc.item_id,
                item_code=sc.item_code,
                item_name=sc.item_name,
                stock_qty=stock_qty,
                rate=rate,
                amount=rate * stock_qty,
                stock_uom=sc.stock_uom or None,
                idx=idx,
                created_at=now,
                updated_at=now,
            )
        )
    return rows



def _rollup_costs(db: Session, bom: BOMORM) -> None:
    """Stored header totals: sum of line amounts and operation costs."""
    db.flush()

    material = db.execute(
        select(func.coalesce(func.sum(BOMItemORM.amount), 0)).where(BOMItemORM.bom_id == bom.id)
    ).scalar_one()
    operating = db.execute(
        select(func.coalesce(func.sum(BOMOperationORM.operating_cost), 0)).where(
            BOMOperationORM.bom_id == bom.id
        )
    ).scalar_one()

    bom.raw_material_cost = _dec(material)
    bom.operating_cost = _dec(operating)
    bom.total_cost = bom.raw_material_cost + bom.operating_cost


# ============================================================
# read
# ============================================================

def get_bom(db: Session, bom_id: UUID) -> BOMORM:
    bom = db.get(BOMORM, bom_id)
    if not bom:
        raise NotFoundError("BOM", bom_id)
    return bom


def list_boms(
    db: Session,
    *,
    company_id: Optional[UUID] = None,
    item_id: Optional[UUID] = None,
    bom_no: Optional[str] = None,
    version: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_default: Optional[bool] = None,
    bom_type: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[BOMORM]:
    conditions = []

    if company_id:
        conditions.append(BOMORM.company_id == company_id)
    if item_id:
        conditions.append(BOMORM.item_id == item_id)
    if bom_no:
        conditions.append(BOMORM.bom_no.contains(bom_no))
    if version:
        conditions.append(BOMORM.version == version)
    if is_active is not None:
        conditions.append(BOMORM.is_active.is_(is_active))
    if is_default is not None:
        conditions.append(BOMORM.is_default.is_(is_default))
    if bom_type:
        conditions.append(BOMORM.bom_type == bom_type)
    if search:
        conditions.append(or_(BOMORM.bom_no.contains(search), BOMORM.description.contains(search)))

    stmt = select(BOMORM)
    if conditions:
        stmt = stmt.where(and_(*conditions))

    stmt = stmt.order_by(BOMORM.created_at.desc()).limit(limit).offset(offset)
    return list(db.execute(stmt).scalars().all())


def get_bom_items(db: Session, bom_id: UUID) -> List[BOMItemORM]:
    stmt = select(BOMItemORM).where(BOMItemORM.bom_id == bom_id).order_by(BOMItemORM.idx.asc())
    return list(db.execute(stmt).scalars().all())


def get_bom_operations(db: Session, bom_id: UUID) -> List[BOMOperationORM]:
    stmt = (
        select(BOMOperationORM)
        .where(BOMOperationORM.bom_id == bom_id)
        .order_by(BOMOperationORM.sequence_id.asc(), BOMOperationORM.idx.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_bom_scrap_items(db: Session, bom_id: UUID) -> List[BOMScrapItemORM]:
    stmt = select(BOMScrapItemORM).where(BOMScrapItemORM.bom_id == bom_id).order_by(BOMScrapItemORM.idx.asc())
    return list(db.execute(stmt).scalars().all())


def get_bom_alternative_items(db: Session, bom_item_id: UUID) -> List[BOMAlternativeItemORM]:
    stmt = (
        select(BOMAlternativeItemORM)
        .where(BOMAlternativeItemORM.bom_item_id == bom_item_id)
        .order_by(BOMAlternativeItemORM.priority.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_bom_update_log(db: Session, bom_id: UUID) -> List[BOMUpdateLogORM]:
    stmt = (
        select(BOMUpdateLogORM)
        .where(BOMUpdateLogORM.bom_id == bom_id)
        .order_by(BOMUpdateLogORM.created_at.asc())
    )
    return list(db.execute(stmt).scalars().all())


# ============================================================
# create / update / delete
# ============================================================

def create_bom(db: Session, body: BOMCreateIn, *, user_id: UUID) -> BOMORM:
    bom_no = body.bom_no.strip()

    existing = db.execute(
        select(BOMORM.id).where(
            BOMORM.bom_no == bom_no,
            BOMORM.company_id == body.company_id,
        ).limit(1)
    ).first()
    if existing is not None:
        raise ConflictError(f"BOM number {bom_no} already exists")

    if db.get(ItemORM, body.item_id) is None:
        raise NotFoundError("Item", body.item_id)

    now = _utcnow()

    header = dict(
        bom_no=bom_no,
        item_id=body.item_id,
        company_id=body.company_id,
        version=body.version or "1.0",
        is_active=True,
        is_default=body.is_default,
        description=body.description or None,
        quantity=_dec(body.quantity or 1),
        uom=body.uom,
        bom_type=body.bom_type or "Manufacturing",
        with_operations=body.with_operations,
        transfer_material_against=body.transfer_material_against or "Work Order",
        allow_alternative_item=body.allow_alternative_item,
        allow_same_item_multiple_times=body.allow_same_item_multiple_times,
        set_rate_of_sub_assembly_item_based_on_bom=body.set_rate_of_sub_assembly_item_based_on_bom,
        currency=(body.currency or settings.DEFAULT_CURRENCY).upper(),
        inspection_required=body.inspection_required,
        quality_inspection_template=body.quality_inspection_template or None,
        project_id=body.project_id,
        routing_id=body.routing_id,
        created_by=user_id,
    )

    bom = BOMORM(id=uuid4(), created_at=now, updated_at=now, **header)
    bom.items = _build_items(body.items, now)
    bom.operations = _build_operations(body.operations, now)
    bom.scrap_items = _build_scrap_items(body.scrap_items, now)

    try:
        with unit_of_work(db):
            db.add(bom)

            _append_log(
                db,
                bom_id=bom.id,
                update_type="created",
                change_description="BOM created",
                new_data=header,
                user_id=user_id,
            )

            _rollup_costs(db, bom)
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise ConflictError(f"BOM number {bom_no} already exists") from e

    db.refresh(bom)
    logger.info("Created BOM %s v%s (%s)", bom.bom_no, bom.version, bom.id)
    return bom


def update_bom(db: Session, bom_id: UUID, body: BOMUpdateIn, *, user_id: UUID) -> BOMORM:
    bom = get_bom(db, bom_id)
    previous_data = _snapshot(bom)

    patch: Dict[str, Any] = {}
    for name in _PATCHABLE_FIELDS:
        value = getattr(body, name)
        if value is None:
            continue
        if name in ("description", "quality_inspection_template"):
            value = value or None
        patch[name] = value

    now = _utcnow()

    with unit_of_work(db):
        if patch.get("is_default"):
            # keep a single default per (bom_no, company_id)
            db.execute(
                update(BOMORM)
                .where(
                    BOMORM.bom_no == bom.bom_no,
                    BOMORM.company_id == bom.company_id,
                    BOMORM.id != bom.id,
                )
                .values(is_default=False, updated_at=now)
            )

        for name, value in patch.items():
            setattr(bom, name, value)
        bom.updated_at = now

        # collections are replaced wholesale; old rows go as orphans
        if body.items is not None:
            bom.items = _build_items(body.items, now)
        if body.operations is not None:
            bom.operations = _build_operations(body.operations, now)
        if body.scrap_items is not None:
            bom.scrap_items = _build_scrap_items(body.scrap_items, now)

        _append_log(
            db,
            bom_id=bom.id,
            update_type="updated",
            change_description="BOM updated",
            previous_data=previous_data,
            new_data=patch,
            user_id=user_id,
        )

        _rollup_costs(db, bom)

    db.refresh(bom)
    logger.info("Updated BOM %s v%s (%s)", bom.bom_no, bom.version, bom.id)
    return bom


def delete_bom(db: Session, bom_id: UUID, *, user_id: UUID) -> None:
    bom = get_bom(db, bom_id)

    with unit_of_work(db):
        _append_log(
            db,
            bom_id=bom.id,
            update_type="deleted",
            change_description="BOM deleted",
            previous_data=_snapshot(bom),
            user_id=user_id,
        )

        # items / operations / scrap (and item alternatives) cascade
        db.delete(bom)

    logger.info("Deleted BOM %s v%s (%s)", bom.bom_no, bom.version, bom_id)


# ============================================================
# versioning
# ============================================================

def _copy_row(model, src: Any, now: datetime, *, parent_key: str) -> Any:
    data = _columns(src, exclude=_COPY_EXCLUDE | {parent_key})
    return model(id=uuid4(), created_at=now, updated_at=now, **data)


def create_bom_version(
    db: Session,
    bom_id: UUID,
    *,
    new_version: str,
    user_id: UUID,
    change_description: Optional[str] = None,
    make_default: bool = False,
) -> BOMORM:
    """
    Copy a BOM (header, items with alternatives, operations, scrap items)
    under a new version string of the same bom_no + company.

    With make_default every other version loses its default flag in the
    same transaction.
    """
    original = get_bom(db, bom_id)
    new_version = new_version.strip()

    existing = db.execute(
        select(BOMORM.id).where(
            BOMORM.bom_no == original.bom_no,
            BOMORM.company_id == original.company_id,
            BOMORM.version == new_version,
        ).limit(1)
    ).first()
    if existing is not None:
        raise ConflictError(f"Version {new_version} already exists for BOM {original.bom_no}")

    now = _utcnow()

    data = _columns(original, exclude=_COPY_EXCLUDE)
    data.update(
        version=new_version,
        is_default=bool(make_default),
        created_by=user_id,
    )
    new_bom = BOMORM(id=uuid4(), created_at=now, updated_at=now, **data)

    for src in get_bom_items(db, original.id):
        copy = _copy_row(BOMItemORM, src, now, parent_key="bom_id")
        copy.alternatives = [
            _copy_row(BOMAlternativeItemORM, alt, now, parent_key="bom_item_id")
            for alt in get_bom_alternative_items(db, src.id)
        ]
        new_bom.items.append(copy)

    new_bom.operations = [
        _copy_row(BOMOperationORM, src, now, parent_key="bom_id")
        for src in get_bom_operations(db, original.id)
    ]
    new_bom.scrap_items = [
        _copy_row(BOMScrapItemORM, src, now, parent_key="bom_id")
        for src in get_bom_scrap_items(db, original.id)
    ]

    try:
        with unit_of_work(db):
            if make_default:
                db.execute(
                    update(BOMORM)
                    .where(
                        BOMORM.bom_no == original.bom_no,
                        BOMORM.company_id == original.company_id,
                    )
                    .values(is_default=False, updated_at=now)
                )

            db.add(new_bom)

            _append_log(
                db,
                bom_id=new_bom.id,
                update_type="version_created",
                change_description=change_description or f"Version {new_version} created",
                new_data={"version": new_version, "original_bom_id": original.id},
                user_id=user_id,
            )
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise ConflictError(f"Version {new_version} already exists for BOM {original.bom_no}") from e

    db.refresh(new_bom)
    logger.info(
        "Created BOM %s version %s from %s (default=%s)",
        new_bom.bom_no,
        new_version,
        original.id,
        new_bom.is_default,
    )
    return new_bom


# ============================================================
# cost / explosion
# ============================================================

def calculate_bom_cost(
    db: Session,
    bom_id: UUID,
    *,
    quantity: Optional[Decimal] = None,
    include_operations: bool = False,
    include_scrap: bool = False,
) -> CostBreakdown:
    """
    Cost of producing `quantity` (default: the BOM's own quantity).

    material  = sum(rate * qty) * quantity
    operating = sum(time_in_mins / 60 * hour_rate) * quantity
    scrap     = sum(rate * stock_qty) * quantity

    No rounding is applied; callers round at presentation time.
    """
    bom = get_bom(db, bom_id)
    qty = _dec(quantity) if quantity is not None else _dec(bom.quantity)

    material_per_unit = sum(
        (_dec(ln.rate) * _dec(ln.qty) for ln in get_bom_items(db, bom.id)),
        _ZERO,
    )
    material_cost = material_per_unit * qty

    operating_cost = _ZERO
    if include_operations:
        operating_per_unit = sum(
            (
                _dec(op.time_in_mins) / _MINUTES_PER_HOUR * _dec(op.hour_rate)
                for op in get_bom_operations(db, bom.id)
            ),
            _ZERO,
        )
        operating_cost = operating_per_unit * qty

    scrap_cost = _ZERO
    if include_scrap:
        scrap_per_unit = sum(
            (_dec(sc.rate) * _dec(sc.stock_qty) for sc in get_bom_scrap_items(db, bom.id)),
            _ZERO,
        )
        scrap_cost = scrap_per_unit * qty

    return CostBreakdown(
        material_cost=material_cost,
        operating_cost=operating_cost,
        scrap_cost=scrap_cost,
        total_cost=material_cost + operating_cost + scrap_cost,
        currency=bom.currency,
    )


def _find_default_bom(db: Session, bom_no: str) -> Optional[BOMORM]:
    # first active default version; bom_no is a free-text reference
    stmt = (
        select(BOMORM)
        .where(
            BOMORM.bom_no == bom_no,
            BOMORM.is_active.is_(True),
            BOMORM.is_default.is_(True),
        )
        .order_by(BOMORM.created_at.asc())
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def explode_bom(
    db: Session,
    bom_id: UUID,
    *,
    quantity: Decimal,
    include_sub_assemblies: bool = False,
    include_operations: bool = False,
    include_scrap: bool = False,
) -> ExplosionResult:
    """
    Flatten a BOM into one line per component occurrence.

    Depth-first and pre-order: a line is followed by the lines of its
    sub-assembly before the next sibling. Each BOM is expanded at most once
    per call; reaching it again (cycle, or a sub-assembly shared by two
    parents) emits nothing and is reported once in truncated_bom_ids, in
    first-hit order.

    cost_breakdown covers the root BOM only.
    """
    root = get_bom(db, bom_id)
    quantity = _dec(quantity)

    lines: List[ExplosionLine] = []
    visited: Set[UUID] = set()
    truncated: List[UUID] = []

    # (bom_id, multiplier, level, remaining lines)
    stack: List[Tuple[UUID, Decimal, int, List[BOMItemORM]]] = []

    def _enter(target_id: UUID, multiplier: Decimal, level: int) -> None:
        if target_id in visited:
            if target_id not in truncated:
                truncated.append(target_id)
            return
        visited.add(target_id)
        # reversed so that pop() yields ascending idx
        stack.append((target_id, multiplier, level, list(reversed(get_bom_items(db, target_id)))))

    _enter(root.id, quantity, 0)

    while stack:
        current_id, multiplier, level, pending = stack[-1]
        if not pending:
            stack.pop()
            continue

        ln = pending.pop()
        rate = _dec(ln.rate)
        required_qty = _dec(ln.qty) * multiplier

        lines.append(
            ExplosionLine(
                item_id=ln.item_id,
                item_code=ln.item_code,
                item_name=ln.item_name,
                required_qty=required_qty,
                uom=ln.uom,
                rate=rate,
                amount=rate * required_qty,
                level=level,
                parent_bom_id=current_id,
                bom_no=ln.bom_no,
            )
        )

        if include_sub_assemblies and ln.bom_no:
            sub_bom = _find_default_bom(db, ln.bom_no)
            if sub_bom is not None:
                _enter(sub_bom.id, required_qty, level + 1)

    if truncated:
        logger.warning("BOM %s explosion skipped repeated sub-assemblies: %s", root.id, truncated)

    cost_breakdown = calculate_bom_cost(
        db,
        root.id,
        quantity=quantity,
        include_operations=include_operations,
        include_scrap=include_scrap,
    )

    return ExplosionResult(
        items=lines,
        cost_breakdown=cost_breakdown,
        total_quantity=quantity,
        truncated=bool(truncated),
        truncated_bom_ids=truncated,
    )
