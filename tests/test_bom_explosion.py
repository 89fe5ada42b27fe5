import uuid
from decimal import Decimal

import pytest

from manufacturing_api.schemas.bom import BOMCreateIn, BOMItemIn
from manufacturing_api.services import bom_service
from manufacturing_api.services.errors import NotFoundError


def _line(item, qty, rate="1", bom_no=None):
    return BOMItemIn(
        item_id=item.id,
        item_code=item.item_code,
        item_name=item.item_name,
        qty=Decimal(str(qty)),
        uom="Nos",
        rate=Decimal(str(rate)),
        bom_no=bom_no,
    )


@pytest.fixture()
def create(db_session, company_id, user_id):
    def _create(item, bom_no, items, is_default=True):
        return bom_service.create_bom(
            db_session,
            BOMCreateIn(
                bom_no=bom_no,
                item_id=item.id,
                company_id=company_id,
                uom="Nos",
                is_default=is_default,
                items=items,
            ),
            user_id=user_id,
        )

    return _create


def _summary(result):
    return [(ln.item_code, ln.required_qty, ln.level) for ln in result.items]


def test_single_level(db_session, make_item, create):
    fg = make_item("FG-CHAIR")
    leg = make_item("RM-LEG")
    bom = create(fg, "BOM-CHAIR", [_line(leg, 2, 25)])

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("2"))

    assert len(result.items) == 1
    line = result.items[0]
    assert line.required_qty == Decimal("4")
    assert line.amount == Decimal("100")
    assert line.level == 0
    assert line.parent_bom_id == bom.id
    assert result.total_quantity == Decimal("2")
    assert result.truncated is False
    assert result.truncated_bom_ids == []
    assert result.cost_breakdown.material_cost == Decimal("100")


def test_without_sub_assemblies_stays_flat(db_session, make_item, create):
    fg = make_item("FG-TABLE")
    top = make_item("SA-TOP")
    leg = make_item("RM-LEG")
    wood = make_item("RM-WOOD")

    create(top, "BOM-TOP", [_line(wood, 3)])
    bom = create(fg, "BOM-TABLE", [_line(top, 1, bom_no="BOM-TOP"), _line(leg, 4)])

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("1"))

    assert _summary(result) == [
        ("SA-TOP", Decimal("1"), 0),
        ("RM-LEG", Decimal("4"), 0),
    ]


def test_multi_level_depth_first(db_session, make_item, create):
    fg = make_item("FG-TABLE")
    top = make_item("SA-TOP")
    leg = make_item("RM-LEG")
    wood = make_item("RM-WOOD")
    glue = make_item("RM-GLUE")

    sub = create(top, "BOM-TOP", [_line(wood, 3), _line(glue, "0.5")])
    bom = create(fg, "BOM-TABLE", [_line(top, 2, bom_no="BOM-TOP"), _line(leg, 4)])

    result = bom_service.explode_bom(
        db_session, bom.id, quantity=Decimal("5"), include_sub_assemblies=True
    )

    assert _summary(result) == [
        ("SA-TOP", Decimal("10"), 0),
        ("RM-WOOD", Decimal("30"), 1),
        ("RM-GLUE", Decimal("5"), 1),
        ("RM-LEG", Decimal("20"), 0),
    ]
    assert result.items[1].parent_bom_id == sub.id
    assert result.items[3].parent_bom_id == bom.id
    assert result.truncated is False


def test_sub_assembly_without_default_is_a_leaf(db_session, make_item, create):
    fg = make_item("FG-TABLE")
    top = make_item("SA-TOP")
    wood = make_item("RM-WOOD")

    create(top, "BOM-TOP", [_line(wood, 3)], is_default=False)
    bom = create(fg, "BOM-TABLE", [_line(top, 1, bom_no="BOM-TOP")])

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert _summary(result) == [("SA-TOP", Decimal("1"), 0)]


def test_unknown_sub_assembly_is_a_leaf(db_session, make_item, create):
    fg = make_item("FG-TABLE")
    top = make_item("SA-TOP")
    bom = create(fg, "BOM-TABLE", [_line(top, 1, bom_no="BOM-NOWHERE")])

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert len(result.items) == 1


def test_cycle_terminates(db_session, make_item, create):
    a = make_item("SA-A")
    b = make_item("SA-B")

    bom_a = create(a, "BOM-A", [_line(b, 2, bom_no="BOM-B")])
    bom_b = create(b, "BOM-B", [_line(a, 3, bom_no="BOM-A")])

    result = bom_service.explode_bom(db_session, bom_a.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert _summary(result) == [
        ("SA-B", Decimal("2"), 0),
        ("SA-A", Decimal("6"), 1),
    ]
    assert result.items[1].parent_bom_id == bom_b.id
    assert result.truncated is True
    assert result.truncated_bom_ids == [bom_a.id]


def test_self_reference_terminates(db_session, make_item, create):
    a = make_item("SA-A")
    bom = create(a, "BOM-A", [_line(a, 1, bom_no="BOM-A")])

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert len(result.items) == 1
    assert result.truncated_bom_ids == [bom.id]


def test_shared_sub_assembly_expanded_once(db_session, make_item, create):
    fg = make_item("FG-CART")
    axle = make_item("SA-AXLE")
    rod = make_item("RM-ROD")

    sub = create(axle, "BOM-AXLE", [_line(rod, 1)])
    bom = create(
        fg,
        "BOM-CART",
        [_line(axle, 1, bom_no="BOM-AXLE"), _line(axle, 1, bom_no="BOM-AXLE")],
    )

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert _summary(result) == [
        ("SA-AXLE", Decimal("1"), 0),
        ("RM-ROD", Decimal("1"), 1),
        ("SA-AXLE", Decimal("1"), 0),
    ]
    assert result.truncated_bom_ids == [sub.id]


def test_diamond_expands_shared_sub_assembly_under_first_parent(db_session, make_item, create):
    fg = make_item("FG-TABLE")
    left = make_item("SA-LEFT")
    right = make_item("SA-RIGHT")
    leg = make_item("SA-LEG")
    wood = make_item("RM-WOOD")

    bom_leg = create(leg, "BOM-LEG", [_line(wood, 3)])
    bom_left = create(left, "BOM-LEFT", [_line(leg, 2, bom_no="BOM-LEG")])
    bom_right = create(right, "BOM-RIGHT", [_line(leg, 2, bom_no="BOM-LEG")])
    bom = create(
        fg,
        "BOM-TABLE",
        [_line(left, 1, bom_no="BOM-LEFT"), _line(right, 1, bom_no="BOM-RIGHT")],
    )

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert _summary(result) == [
        ("SA-LEFT", Decimal("1"), 0),
        ("SA-LEG", Decimal("2"), 1),
        ("RM-WOOD", Decimal("6"), 2),
        ("SA-RIGHT", Decimal("1"), 0),
        ("SA-LEG", Decimal("2"), 1),
    ]

    wood_lines = [ln for ln in result.items if ln.item_code == "RM-WOOD"]
    assert [ln.parent_bom_id for ln in wood_lines] == [bom_leg.id]
    leg_parents = [ln.parent_bom_id for ln in result.items if ln.item_code == "SA-LEG"]
    assert leg_parents == [bom_left.id, bom_right.id]

    assert result.truncated is True
    assert result.truncated_bom_ids == [bom_leg.id]


def test_repeated_cycle_reported_once(db_session, make_item, create):
    a = make_item("SA-A")
    b = make_item("SA-B")

    bom_a = create(a, "BOM-A", [_line(b, 1, bom_no="BOM-B")])
    create(b, "BOM-B", [_line(a, 1, bom_no="BOM-A"), _line(a, 2, bom_no="BOM-A")])

    result = bom_service.explode_bom(db_session, bom_a.id, quantity=Decimal("1"), include_sub_assemblies=True)

    assert _summary(result) == [
        ("SA-B", Decimal("1"), 0),
        ("SA-A", Decimal("1"), 1),
        ("SA-A", Decimal("2"), 1),
    ]
    assert result.truncated_bom_ids == [bom_a.id]


def test_cost_breakdown_covers_root_only(db_session, make_item, create):
    fg = make_item("FG-TABLE")
    top = make_item("SA-TOP")
    wood = make_item("RM-WOOD")

    create(top, "BOM-TOP", [_line(wood, 3, 100)])
    bom = create(fg, "BOM-TABLE", [_line(top, 1, 10, bom_no="BOM-TOP")])

    result = bom_service.explode_bom(db_session, bom.id, quantity=Decimal("2"), include_sub_assemblies=True)

    assert result.cost_breakdown.material_cost == Decimal("20")
    assert result.cost_breakdown.total_cost == Decimal("20")


def test_missing_root(db_session):
    with pytest.raises(NotFoundError):
        bom_service.explode_bom(db_session, uuid.uuid4(), quantity=Decimal("1"))
