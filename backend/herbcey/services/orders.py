"""
Order CRUD over the Orders sheet.

Tracking id (column A) is the only lookup key. Creating, updating and
deleting orders also moves filled stock for the products involved.
"""
import logging
from typing import Dict, List

from herbcey.core.codec import YES
from herbcey.core.errors import HerbceyError, NetworkError, NotFoundError
from herbcey.core.models import Order, SheetOrder
from herbcey.core.sheets_client import SheetsClient, SheetTable
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.services.stock import adjust_filled_stock
from herbcey.utils.config import ORDERS_SHEET
from herbcey.utils.constants import (
    ORDER_FIELDNAMES,
    ORDER_FDE_COL,
    ORDER_MAIN_CITY_COL,
    ORDER_PAYMENT_RECEIVED_COL,
    ORDER_TRACKING_COL,
    ORDER_EDITABLE_WIDTH,
)
from herbcey.utils.dates import current_iso_datetime, epoch_millis

logger = logging.getLogger(__name__)


def orders_table(client: SheetsClient) -> SheetTable:
    return client.table(ORDERS_SHEET, ORDER_FIELDNAMES)


def new_tracking_id() -> str:
    return f"LK{epoch_millis()}"


def _locate(table: SheetTable, tracking_id: str):
    rows = table.list()
    index = table.find_row_index(tracking_id, ORDER_TRACKING_COL, rows=rows)
    if index is None:
        raise NotFoundError("Order not found")
    return rows, index


def _move_stock(client: SheetsClient, deltas: Dict[str, int]) -> List[str]:
    """Adjust filled stock; a stock failure is reported, not raised, once the order write succeeded."""
    try:
        return adjust_filled_stock(client, deltas)
    except HerbceyError as e:
        logger.warning(f"Order saved but stock was not adjusted: {e}")
        return [f"Stock not adjusted: {e}"]


@service_call("fetching orders")
def get_all_orders(client: SheetsClient) -> ApiResponse:
    rows = orders_table(client).records()
    return ApiResponse(success=True, data=[SheetOrder.from_row(row) for row in rows])


@service_call("adding order")
def add_order(client: SheetsClient, order: Order) -> ApiResponse:
    client.session.require_token()
    table = orders_table(client)

    order.tracking = order.tracking or new_tracking_id()
    order.order_date = order.order_date or current_iso_datetime()
    row = order.to_row()
    table.append(row)
    logger.info(f"Added order {order.tracking}")

    warnings = _move_stock(client, {name: -qty for name, qty in order.quantities().items()})
    return ApiResponse(
        success=True,
        data={"tracking_id": order.tracking, "row": row, "stock_warnings": warnings},
    )


@service_call("updating order")
def update_order(client: SheetsClient, tracking_id: str, order: Order) -> ApiResponse:
    """Rewrite columns A-Q of the order row; column R is left untouched."""
    client.session.require_token()
    table = orders_table(client)
    rows, index = _locate(table, tracking_id)
    existing = SheetOrder.from_row(rows[index])
    previous = existing.quantities()

    order.tracking = order.tracking or tracking_id
    order.order_date = order.order_date or existing.order_date
    table.update_row(index + 1, order.to_row()[:ORDER_EDITABLE_WIDTH])
    logger.info(f"Updated order {tracking_id}")

    current = order.quantities()
    deltas = {name: previous.get(name, 0) - current.get(name, 0) for name in current}
    warnings = _move_stock(client, deltas)
    return ApiResponse(success=True, data={"tracking_id": order.tracking, "stock_warnings": warnings})


@service_call("deleting order")
def delete_order(client: SheetsClient, tracking_id: str) -> ApiResponse:
    client.session.require_token()
    table = orders_table(client)
    rows, index = _locate(table, tracking_id)
    restored = SheetOrder.from_row(rows[index]).quantities()

    table.delete_row(index)
    logger.info(f"Deleted order {tracking_id}")

    warnings = _move_stock(client, restored)
    return ApiResponse(success=True, data={"tracking_id": tracking_id, "stock_warnings": warnings})


@service_call("setting FDE waybill")
def set_fde_waybill(client: SheetsClient, tracking_id: str, waybill: str) -> ApiResponse:
    """Record the FDE dispatch waybill in column R only."""
    table = orders_table(client)
    _, index = _locate(table, tracking_id)
    table.update_cell(ORDER_FDE_COL, index + 1, waybill)
    return ApiResponse(success=True, data={"tracking_id": tracking_id, "fde_waybill": waybill})


def set_main_city(client: SheetsClient, rows: List[List], tracking_id: str, city: str) -> bool:
    """Write column Q for an order found in an earlier read. Returns False when absent."""
    table = orders_table(client)
    index = table.find_row_index(tracking_id, ORDER_TRACKING_COL, rows=rows)
    if index is None:
        return False
    table.update_cell(ORDER_MAIN_CITY_COL, index + 1, city)
    return True


def write_payment_received(client: SheetsClient, index: int):
    """Set column I of the order at 0-based index to "Yes"."""
    orders_table(client).update_cell(ORDER_PAYMENT_RECEIVED_COL, index + 1, YES)


def mark_payment_received(client: SheetsClient, index: int) -> bool:
    """
    Like write_payment_received, but an HTTP rejection returns False.

    Transport failures (no HTTP status) still raise NetworkError.
    """
    try:
        write_payment_received(client, index)
    except NetworkError as e:
        if e.status_code is None:
            raise
        logger.error(f"Failed to update payment status for row {index + 1}: {e.status_code}")
        return False
    return True


def read_tracking_ids(client: SheetsClient) -> List[str]:
    values = client.get_values(f"{ORDERS_SHEET}!A:A")
    ids = []
    for row in values[1:]:
        if row and str(row[0]).strip():
            ids.append(str(row[0]).strip())
    return ids


@service_call("fetching tracking ids")
def get_tracking_ids(client: SheetsClient) -> ApiResponse:
    return ApiResponse(success=True, data=read_tracking_ids(client))
