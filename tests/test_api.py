from unittest.mock import MagicMock

from herbcey.core import fde_client as fde_module
from herbcey.core.auth import parse_bearer

from conftest import AUTH, order_row

CSV = "Waybill ID,Order ID,Amount\nLK100,A1,2650\nLK200,A2,1300"


def _order_payload(**overrides):
    payload = {
        "name": "Ruwan",
        "address_line1": "3 Station Road",
        "contact": "0705555555",
        "products": [{"name": "Oil", "quantity": 1}],
    }
    payload.update(overrides)
    return payload


def test_root(api):
    assert api.get("/").json() == {"status": "ok", "service": "backend"}


def test_parse_bearer():
    assert parse_bearer("Bearer abc") == "abc"
    assert parse_bearer("bearer  abc ") == "abc"
    assert parse_bearer("Basic abc") is None
    assert parse_bearer("Bearer ") is None
    assert parse_bearer(None) is None


def test_list_orders_with_filters(api, spreadsheet):
    spreadsheet.tabs["Orders"] += [
        order_row("LK1", paid="Yes"),
        order_row("LK2", paid="No"),
    ]
    body = api.get("/orders", params={"payment": "COD Unpaid"}).json()
    assert body["total"] == 2
    assert [o["tracking_id"] for o in body["data"]] == ["LK2"]
    assert body["data"][0]["name"] == "Nimal Perera"
    assert body["data"][0]["address"] == "12 Temple Road, Kandy"


def test_create_order_needs_token(api, spreadsheet):
    response = api.post("/orders", json=_order_payload())
    assert response.status_code == 401
    assert len(spreadsheet.tabs["Orders"]) == 1


def test_create_update_delete_order(api, spreadsheet):
    created = api.post("/orders", json=_order_payload(tracking="LK77"), headers=AUTH)
    assert created.status_code == 200
    assert created.json()["data"]["tracking_id"] == "LK77"

    updated = api.put("/orders/LK77", json=_order_payload(status="Delivered"), headers=AUTH)
    assert updated.status_code == 200
    assert spreadsheet.tabs["Orders"][1][6] == "Delivered"

    assert api.delete("/orders/LK77", headers=AUTH).status_code == 200
    assert api.delete("/orders/LK77", headers=AUTH).status_code == 404


def test_invalid_order_payload(api):
    assert api.post("/orders", json={"name": "x"}, headers=AUTH).status_code == 422


def test_fde_waybill_endpoint(api, spreadsheet):
    spreadsheet.tabs["Orders"].append(order_row("LK1"))
    response = api.put("/orders/LK1/fde-waybill", json={"waybill": "FDE1"}, headers=AUTH)
    assert response.status_code == 200
    assert spreadsheet.tabs["Orders"][1][17] == "FDE1"


def test_payment_csv_upload(api, spreadsheet, monkeypatch):
    monkeypatch.setattr("herbcey.services.payments.API_DELAY_SECONDS", 0)
    spreadsheet.tabs["Orders"].append(order_row("LK100"))

    body = api.post("/payments/csv", json={"filename": "pay.csv", "content": CSV}, headers=AUTH).json()

    assert body["processed"] == 2
    assert body["updated"] == 1
    assert [d["status"] for d in body["details"]] == ["updated", "not_found"]
    ledger = api.get("/failed-trackings").json()["data"]
    assert [r["tracking_id"] for r in ledger] == ["LK200"]


def test_payment_csv_rejects_bad_headers(api):
    response = api.post("/payments/csv", json={"filename": "pay.csv", "content": "Waybill ID,Amount\nx,1"}, headers=AUTH)
    assert response.status_code == 400


def test_validate_endpoint(api):
    body = api.post("/payments/validate", json={"filename": "a.csv", "content": "Waybill ID,Order ID\n"}).json()
    assert body == {"valid": True}


def test_retry_not_found_is_business_failure(api, spreadsheet):
    spreadsheet.tabs["FailTrackings"].append(["FT_1_abcdefghi", "LK9", "Order not found in system", 1, "t", "t", "Failed", ""])
    response = api.post("/failed-trackings/FT_1_abcdefghi/retry", headers=AUTH)
    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error"] == "Order not found in system"


def test_stock_fill_overdraw_is_400(api):
    response = api.post("/stock/Oil/fill", json={"quantity": 50}, headers=AUTH)
    assert response.status_code == 400
    assert "empty bottle" in response.json()["detail"]


def test_sheet_rejection_maps_to_502(api, spreadsheet):
    spreadsheet.fail_writes["Stock"] = 500
    response = api.post("/stock/Oil/restock", json={"quantity": 5}, headers=AUTH)
    assert response.status_code == 502


def test_analytics_endpoint(api, spreadsheet):
    spreadsheet.tabs["Orders"].append(order_row("LK1", paid="Yes", oil=2))
    body = api.get("/analytics/sales", params={"period": "daily"}).json()
    assert body["sales"]["total_revenue"] == 1900
    assert body["profit"]["net_profit"] == 1900
    assert body["sales"]["time_series"][0]["date"] == "2025-01-10"


def test_branches_endpoint(api, spreadsheet):
    spreadsheet.tabs["BranchNumbers"].append(["1", "Kandy", "0812222222"])
    body = api.get("/branches", params={"q": "kandy"}).json()
    assert body["data"][0]["numbers"] == ["0812222222"]


def test_fde_lookup_failure_is_502(api, monkeypatch):
    response = MagicMock(status_code=200)
    response.json.return_value = {"status": 404, "message": "Invalid waybill"}
    monkeypatch.setattr(fde_module.requests, "post", MagicMock(return_value=response))
    assert api.get("/fde/waybill/CCP1").status_code == 502
