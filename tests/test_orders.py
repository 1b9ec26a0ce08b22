from herbcey.core.models import Order, ProductLine
from herbcey.processing.filters import filter_orders
from herbcey.services import orders as order_service
from herbcey.services.stock import read_stock

from conftest import order_row


def _filled(client, product):
    return next(i.filled_stock for i in read_stock(client) if i.product_name == product)


def _new_order(**overrides):
    fields = dict(
        name="Sunil Fernando",
        address_line1="7 Hill Street",
        contact="0779999999",
        products=[ProductLine("Oil", 2), ProductLine("Shampoo", 1)],
    )
    fields.update(overrides)
    return Order(**fields)


def test_add_order_generates_tracking_and_takes_stock(client, spreadsheet):
    response = order_service.add_order(client, _new_order())

    assert response.success
    tracking_id = response.data["tracking_id"]
    assert tracking_id.startswith("LK")
    row = spreadsheet.tabs["Orders"][1]
    assert row[0] == tracking_id
    assert row[6] == "Preparing"
    assert row[10]
    assert _filled(client, "Oil") == 3
    assert _filled(client, "Shampoo") == 4


def test_add_order_reports_clamped_stock(client):
    response = order_service.add_order(client, _new_order(products=[ProductLine("Oil", 9)]))
    assert response.success
    assert response.data["stock_warnings"] == ["Filled stock for Oil would go below zero; set to 0"]
    assert _filled(client, "Oil") == 0


def test_add_order_requires_token(read_only_client, spreadsheet):
    response = order_service.add_order(read_only_client, _new_order())
    assert response.status_code == 401
    assert len(spreadsheet.tabs["Orders"]) == 1


def test_update_order_leaves_fde_column(client, spreadsheet):
    spreadsheet.tabs["Orders"].append(order_row("LK1", oil=1, fde="FDE55"))

    order = _new_order(products=[ProductLine("Oil", 3)], tracking="LK1", status="Shipped")
    response = order_service.update_order(client, "LK1", order)

    assert response.success
    row = spreadsheet.tabs["Orders"][1]
    assert row[6] == "Shipped"
    assert row[17] == "FDE55"
    assert ("update", "Orders!A2:Q2", [order.to_row(row[11])]) in spreadsheet.writes
    assert _filled(client, "Oil") == 3


def test_update_keeps_order_date_when_omitted(client, spreadsheet):
    spreadsheet.tabs["Orders"].append(order_row("LK1", date="2025-01-10 10:00:00"))

    order_service.update_order(client, "LK1", _new_order(tracking="LK1"))

    assert spreadsheet.tabs["Orders"][1][10] == "2025-01-10 10:00:00"


def test_wide_row_is_rejected_in_strict_mode(client, spreadsheet, monkeypatch):
    spreadsheet.tabs["Orders"].append(order_row("LK1") + ["extra", "cells"])

    assert order_service.get_all_orders(client).success

    monkeypatch.setattr("herbcey.utils.config.STRICT_ROWS", True)
    response = order_service.get_all_orders(client)
    assert response.status_code == 400


def test_update_missing_order(client):
    response = order_service.update_order(client, "LK404", _new_order())
    assert response.status_code == 404
    assert response.error == "Order not found"


def test_delete_order_restores_stock(client, spreadsheet):
    spreadsheet.tabs["Orders"] += [order_row("LK1", oil=2), order_row("LK2", oil=1)]

    response = order_service.delete_order(client, "LK1")

    assert response.success
    assert [r[0] for r in spreadsheet.tabs["Orders"][1:]] == ["LK2"]
    assert _filled(client, "Oil") == 7


def test_set_fde_waybill_writes_column_r_only(client, spreadsheet):
    spreadsheet.tabs["Orders"].append(order_row("LK1"))

    order_service.set_fde_waybill(client, "LK1", "FDE900")

    assert spreadsheet.writes == [("update", "Orders!R2", [["FDE900"]])]


def test_tracking_ids_skip_blank_rows(client, spreadsheet):
    spreadsheet.tabs["Orders"] += [order_row("LK1"), [""] * 18, order_row("LK2")]
    assert order_service.get_tracking_ids(client).data == ["LK1", "LK2"]


def test_reads_work_without_token(read_only_client, spreadsheet):
    spreadsheet.tabs["Orders"].append(order_row("LK1"))
    orders = order_service.get_all_orders(read_only_client).data
    assert [o.tracking_id for o in orders] == ["LK1"]


class TestFilters:
    def _orders(self, client, spreadsheet):
        spreadsheet.tabs["Orders"] += [
            order_row("LK1", name="Amara", paid="Yes", date="2025-01-05 10:00:00", city="Kandy"),
            order_row("LK2", name="Bandara", paid="No", date="2025-01-20 10:00:00", status="Delivered"),
            order_row("LK3", name="Chathu", method="Bank Transfer", date="2025-02-02"),
        ]
        return order_service.get_all_orders(client).data

    def test_payment_filters(self, client, spreadsheet):
        orders = self._orders(client, spreadsheet)
        ids = lambda p: [o.tracking_id for o in filter_orders(orders, payment=p)]
        assert ids("All") == ["LK1", "LK2", "LK3"]
        assert ids("COD Paid") == ["LK1"]
        assert ids("COD Unpaid") == ["LK2"]
        assert ids("Bank Transfer") == ["LK3"]

    def test_status_date_and_search(self, client, spreadsheet):
        orders = self._orders(client, spreadsheet)
        assert [o.tracking_id for o in filter_orders(orders, status="Delivered")] == ["LK2"]
        in_january = filter_orders(orders, start_date="2025-01-01", end_date="2025-01-31")
        assert [o.tracking_id for o in in_january] == ["LK1", "LK2"]
        assert [o.tracking_id for o in filter_orders(orders, search="AMARA")] == ["LK1"]
