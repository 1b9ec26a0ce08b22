import json
import re

import gspread
import pytest
import requests
from fastapi import Depends
from fastapi.testclient import TestClient

from herbcey.core.auth import SheetSession
from herbcey.core.fde_client import FdeClient, WaybillCache
from herbcey.core.sheets_client import SheetsClient
from herbcey.utils.constants import (
    ORDER_FIELDNAMES,
    STOCK_FIELDNAMES,
    FAILED_TRACKING_FIELDNAMES,
    PRODUCT_FIELDNAMES,
    EXPENSE_FIELDNAMES,
    BRANCH_FIELDNAMES,
)

_CELL = re.compile(r"^([A-Z]+)(\d*)$")


def api_error(status):
    """A gspread APIError as raised for an HTTP error from the Sheets API."""
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(
        {"error": {"code": status, "message": "rejected", "status": "FAILED_PRECONDITION"}}
    ).encode()
    return gspread.exceptions.APIError(response)


def _col_index(letters):
    index = 0
    for ch in letters:
        index = index * 26 + (ord(ch) - 64)
    return index - 1


def _parse_range(a1_range):
    """'Orders!A5:Q5' -> ('Orders', col0, row0, col1, row1); rows None when open."""
    sheet, _, cells = a1_range.partition("!")
    if not cells:
        return sheet, 0, None, 10 ** 4, None
    start, _, end = cells.partition(":")
    c0, r0 = _CELL.match(start).groups()
    if end:
        c1, r1 = _CELL.match(end).groups()
    else:
        c1, r1 = c0, r0
    return (
        sheet,
        _col_index(c0),
        int(r0) - 1 if r0 else None,
        _col_index(c1),
        int(r1) - 1 if r1 else None,
    )


class FakeSpreadsheet:
    """
    In-memory stand-in for a gspread Spreadsheet, covering the values and
    batchUpdate calls SheetsClient makes. Every write is recorded in `writes`.
    """

    def __init__(self, **tabs):
        self.tabs = {name: [list(r) for r in rows] for name, rows in tabs.items()}
        self.writes = []
        self.fail_writes = {}

    def _check_write(self, a1_range):
        for prefix, status in self.fail_writes.items():
            if a1_range.startswith(prefix):
                raise api_error(status)

    def _rows(self, sheet):
        if sheet not in self.tabs:
            raise api_error(400)
        return self.tabs[sheet]

    def values_get(self, a1_range):
        sheet, c0, r0, c1, r1 = _parse_range(a1_range)
        rows = self._rows(sheet)
        selected = rows[r0:r1 + 1] if r0 is not None else rows
        values = []
        for row in selected:
            cells = [str(v) for v in row[c0:c1 + 1]]
            while cells and cells[-1] == "":
                cells.pop()
            values.append(cells)
        while values and not values[-1]:
            values.pop()
        return {"range": a1_range, "values": values}

    def values_update(self, a1_range, params=None, body=None):
        self._check_write(a1_range)
        sheet, c0, r0, _, _ = _parse_range(a1_range)
        rows = self._rows(sheet)
        r0 = r0 or 0
        for offset, new_values in enumerate(body["values"]):
            while len(rows) <= r0 + offset:
                rows.append([])
            row = rows[r0 + offset]
            while len(row) < c0 + len(new_values):
                row.append("")
            row[c0:c0 + len(new_values)] = list(new_values)
        self.writes.append(("update", a1_range, body["values"]))
        return {"updatedRange": a1_range}

    def values_append(self, a1_range, params=None, body=None):
        self._check_write(a1_range)
        sheet = a1_range.partition("!")[0]
        rows = self._rows(sheet)
        while rows and not any(str(v) for v in rows[-1]):
            rows.pop()
        rows.extend(list(r) for r in body["values"])
        self.writes.append(("append", a1_range, body["values"]))
        return {"updates": {"updatedRows": len(body["values"])}}

    def fetch_sheet_metadata(self):
        return {
            "sheets": [
                {"properties": {"title": name, "sheetId": i}}
                for i, name in enumerate(self.tabs)
            ]
        }

    def batch_update(self, body):
        for request in body["requests"]:
            if "addSheet" in request:
                self.tabs[request["addSheet"]["properties"]["title"]] = []
            elif "deleteDimension" in request:
                rng = request["deleteDimension"]["range"]
                name = list(self.tabs)[rng["sheetId"]]
                del self.tabs[name][rng["startIndex"]:rng["endIndex"]]
        self.writes.append(("batch", None, body))
        return {}

    def update_count(self, prefix):
        return sum(1 for kind, rng, _ in self.writes if kind == "update" and rng.startswith(prefix))


def order_row(tracking, name="Nimal Perera", paid="No", status="Preparing", method="COD",
              date="2025-01-10 10:00:00", oil=1, shampoo=0, conditioner=0, free="No",
              city="", fde=""):
    total = oil * 950 + shampoo * 1350 + conditioner * 1350 + (0 if free == "Yes" else 350)
    return [
        tracking, f"{name}\n12 Temple Road, Kandy\n0771234567", oil, shampoo, conditioner,
        total, status, method, paid, free, date, date, 0, 0, 0, 0, city, fde,
    ]


def stock_row(product, empty=10, filled=5, stock_id=None):
    return [stock_id or f"STK_{product}", product, empty, filled, "2025-01-01", "2025-01-01", "", 0]


@pytest.fixture
def spreadsheet():
    return FakeSpreadsheet(
        Orders=[ORDER_FIELDNAMES],
        Stock=[
            STOCK_FIELDNAMES,
            stock_row("Oil"),
            stock_row("Shampoo"),
            stock_row("Conditioner"),
        ],
        FailTrackings=[FAILED_TRACKING_FIELDNAMES],
        Products=[PRODUCT_FIELDNAMES],
        Expenses=[EXPENSE_FIELDNAMES],
        BranchNumbers=[BRANCH_FIELDNAMES],
    )


@pytest.fixture
def session():
    return SheetSession(spreadsheet_id="sheet-123", access_token="test-token")


@pytest.fixture
def client(session, spreadsheet):
    return SheetsClient(session, spreadsheet=spreadsheet)


@pytest.fixture
def read_only_client(spreadsheet):
    return SheetsClient(SheetSession(spreadsheet_id="sheet-123", api_key="key"), spreadsheet=spreadsheet)


@pytest.fixture
def no_sleep():
    calls = []
    return calls.append, calls


@pytest.fixture
def fde_client(tmp_path):
    return FdeClient(
        url="https://fde.example/api",
        client_id="client",
        api_key="secret",
        cache=WaybillCache(path=str(tmp_path / "cache.json"), ttl_minutes=10),
        request_delay=0,
        sleep=lambda _: None,
    )


@pytest.fixture
def api(spreadsheet, fde_client):
    """TestClient whose SheetsClient follows the request's bearer header but uses the fake spreadsheet."""
    from app.main import app
    from herbcey.core.auth import get_session
    from herbcey.routers.deps import get_client, get_fde_client

    def _client(session: SheetSession = Depends(get_session)):
        return SheetsClient(session, spreadsheet=spreadsheet)

    app.dependency_overrides[get_client] = _client
    app.dependency_overrides[get_fde_client] = lambda: fde_client
    yield TestClient(app)
    app.dependency_overrides.clear()


AUTH = {"Authorization": "Bearer test-token"}
