import uuid
from decimal import Decimal

from manufacturing_api.models.bom import BOMItemORM
from manufacturing_api.services import bom_service

BASE = "/api/v1"


def _headers(user_id=None):
    return {"X-User-Id": str(user_id or uuid.uuid4())}


def _item(client, company_id, code):
    r = client.post(
        f"{BASE}/items",
        json={"company_id": str(company_id), "item_code": code, "item_name": code.title(), "stock_uom": "Nos"},
    )
    assert r.status_code == 201, r.text
    return r.json()


def _bom_payload(company_id, fg, rm, bom_no="BOM-WIDGET"):
    return {
        "bom_no": bom_no,
        "item_id": fg["id"],
        "company_id": str(company_id),
        "quantity": "2",
        "uom": "Nos",
        "is_default": True,
        "items": [
            {
                "item_id": rm["id"],
                "item_code": rm["item_code"],
                "item_name": rm["item_name"],
                "qty": "2",
                "uom": "Nos",
                "rate": "25",
            }
        ],
        "operations": [
            {"operation_no": "OP-10", "operation_name": "Cutting", "time_in_mins": "60", "hour_rate": "50"}
        ],
        "scrap_items": [
            {
                "item_id": rm["id"],
                "item_code": rm["item_code"],
                "item_name": rm["item_name"],
                "stock_qty": "1",
                "rate": "5",
            }
        ],
    }


def _create_bom(client, company_id):
    fg = _item(client, company_id, "FG-WIDGET")
    rm = _item(client, company_id, "RM-STEEL")
    r = client.post(f"{BASE}/boms", json=_bom_payload(company_id, fg, rm), headers=_headers())
    assert r.status_code == 201, r.text
    return r.json()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "connected"


def test_create_and_read_bom(client, company_id):
    bom = _create_bom(client, company_id)

    assert bom["version"] == "1.0"
    assert Decimal(bom["total_cost"]) == Decimal("100")

    r = client.get(f"{BASE}/boms/{bom['id']}")
    assert r.status_code == 200
    assert r.json()["bom_no"] == "BOM-WIDGET"

    r = client.get(f"{BASE}/boms/{bom['id']}/items")
    assert [ln["item_code"] for ln in r.json()] == ["RM-STEEL"]

    r = client.get(f"{BASE}/boms/{bom['id']}/operations")
    assert r.json()[0]["sequence_id"] == 0

    r = client.get(f"{BASE}/boms/{bom['id']}/scrap-items")
    assert Decimal(r.json()[0]["amount"]) == Decimal("5")

    r = client.get(f"{BASE}/boms", params={"company_id": str(company_id)})
    assert [b["id"] for b in r.json()] == [bom["id"]]


def test_create_bom_requires_actor(client, company_id):
    fg = _item(client, company_id, "FG-WIDGET")
    rm = _item(client, company_id, "RM-STEEL")

    r = client.post(f"{BASE}/boms", json=_bom_payload(company_id, fg, rm))
    assert r.status_code == 400


def test_duplicate_bom_number_is_409(client, company_id):
    bom = _create_bom(client, company_id)
    rm = {"id": bom["item_id"], "item_code": "FG-WIDGET", "item_name": "Fg-Widget"}

    r = client.post(
        f"{BASE}/boms",
        json=_bom_payload(company_id, {"id": bom["item_id"]}, rm),
        headers=_headers(),
    )
    assert r.status_code == 409
    assert r.json()["code"] == "CONFLICT"


def test_foreign_key_failure_is_not_409(client, company_id, monkeypatch):
    fg = _item(client, company_id, "FG-WIDGET")
    rm = _item(client, company_id, "RM-STEEL")

    def _dangling_line(db, bom):
        db.add(
            BOMItemORM(
                bom_id=uuid.uuid4(),
                item_id=uuid.UUID(rm["id"]),
                item_code=rm["item_code"],
                item_name=rm["item_name"],
                uom="Nos",
            )
        )
        db.flush()

    monkeypatch.setattr(bom_service, "_rollup_costs", _dangling_line)

    r = client.post(f"{BASE}/boms", json=_bom_payload(company_id, fg, rm), headers=_headers())
    assert r.status_code == 500, r.text
    assert r.json()["code"] == "INTEGRITY_ERROR"

    assert client.get(f"{BASE}/boms", params={"company_id": str(company_id)}).json() == []


def test_missing_bom_is_404(client):
    r = client.get(f"{BASE}/boms/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"


def test_validation_error_is_422(client, company_id):
    r = client.post(f"{BASE}/boms", json={"bom_no": "X"}, headers=_headers())
    assert r.status_code == 422


def test_cost_endpoint(client, company_id):
    bom = _create_bom(client, company_id)

    r = client.post(
        f"{BASE}/boms/{bom['id']}/cost",
        json={"include_operations": True, "include_scrap": True},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert Decimal(body["material_cost"]) == Decimal("100")
    assert Decimal(body["operating_cost"]) == Decimal("100")
    assert Decimal(body["scrap_cost"]) == Decimal("10")
    assert Decimal(body["total_cost"]) == Decimal("210")
    assert body["currency"] == "USD"


def test_explode_endpoint(client, company_id):
    bom = _create_bom(client, company_id)

    r = client.post(f"{BASE}/boms/{bom['id']}/explode", json={"quantity": "2"})
    assert r.status_code == 200, r.text
    body = r.json()

    assert len(body["items"]) == 1
    assert Decimal(body["items"][0]["required_qty"]) == Decimal("4")
    assert body["items"][0]["level"] == 0
    assert Decimal(body["total_quantity"]) == Decimal("2")
    assert body["truncated"] is False
    assert Decimal(body["cost_breakdown"]["total_cost"]) == Decimal("100")


def test_explode_requires_positive_quantity(client, company_id):
    bom = _create_bom(client, company_id)

    r = client.post(f"{BASE}/boms/{bom['id']}/explode", json={"quantity": "0"})
    assert r.status_code == 422


def test_version_endpoint(client, company_id):
    bom = _create_bom(client, company_id)

    r = client.post(
        f"{BASE}/boms/{bom['id']}/versions",
        json={"new_version": "2.0", "make_default": True},
        headers=_headers(),
    )
    assert r.status_code == 201, r.text
    v2 = r.json()
    assert v2["is_default"] is True

    r = client.get(f"{BASE}/boms", params={"bom_no": "BOM-WIDGET", "is_default": True})
    assert [b["id"] for b in r.json()] == [v2["id"]]

    r = client.post(
        f"{BASE}/boms/{bom['id']}/versions",
        json={"new_version": "2.0"},
        headers=_headers(),
    )
    assert r.status_code == 409


def test_update_and_delete_endpoints(client, company_id):
    bom = _create_bom(client, company_id)
    actor = uuid.uuid4()

    r = client.put(
        f"{BASE}/boms/{bom['id']}",
        json={"description": "revised", "operations": []},
        headers=_headers(actor),
    )
    assert r.status_code == 200, r.text
    assert r.json()["description"] == "revised"
    assert Decimal(r.json()["operating_cost"]) == 0

    r = client.delete(f"{BASE}/boms/{bom['id']}", headers=_headers(actor))
    assert r.status_code == 200
    assert r.json() == {"deleted": True}

    assert client.get(f"{BASE}/boms/{bom['id']}").status_code == 404

    r = client.get(f"{BASE}/boms/{bom['id']}/update-log")
    log = r.json()
    assert {e["update_type"] for e in log} == {"created", "updated", "deleted"}
    assert {e["updated_by"] for e in log if e["update_type"] != "created"} == {str(actor)}


def test_workstation_endpoints(client, company_id):
    r = client.post(
        f"{BASE}/workstations",
        json={
            "company_id": str(company_id),
            "workstation_name": "Lathe 1",
            "hour_rate": "10",
            "hour_rate_labour": "15",
            "working_hours_start": "09:00",
            "working_hours_end": "17:00",
        },
    )
    assert r.status_code == 201, r.text
    ws = r.json()

    r = client.get(f"{BASE}/workstations/{ws['id']}/capacity")
    assert Decimal(r.json()["daily_working_hours"]) == Decimal("8")

    r = client.get(f"{BASE}/workstations/{ws['id']}/cost-breakdown")
    assert Decimal(r.json()["total_hourly_rate"]) == Decimal("25")

    r = client.post(
        f"{BASE}/workstations",
        json={"company_id": str(company_id), "workstation_name": "Lathe 1"},
    )
    assert r.status_code == 409

    r = client.post(
        f"{BASE}/workstations",
        json={"company_id": str(company_id), "workstation_name": "Bad", "working_hours_start": "25:00"},
    )
    assert r.status_code == 422

    assert client.delete(f"{BASE}/workstations/{ws['id']}").json() == {"deleted": True}
    assert client.get(f"{BASE}/workstations/{ws['id']}").status_code == 404
