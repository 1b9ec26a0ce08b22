"""
Two-stage stock service.

Empty stock counts raw bottles; filled stock counts sellable units. Every
mutation re-reads the Stock sheet and writes it back whole.
"""
import logging
from typing import Dict, List, Tuple

from herbcey.core.errors import FormatError, NotFoundError, StockError
from herbcey.core.models import StockItem
from herbcey.core.sheets_client import SheetsClient, SheetTable
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.utils.config import STOCK_SHEET
from herbcey.utils.constants import STOCK_FIELDNAMES
from herbcey.utils.dates import current_iso_datetime, epoch_millis

logger = logging.getLogger(__name__)


def stock_table(client: SheetsClient) -> SheetTable:
    return client.table(STOCK_SHEET, STOCK_FIELDNAMES)


def read_stock(client: SheetsClient) -> List[StockItem]:
    rows = stock_table(client).records()
    return [StockItem.from_row(row, index) for index, row in enumerate(rows)]


def write_stock(client: SheetsClient, items: List[StockItem]):
    stock_table(client).overwrite_all([item.to_row() for item in items])


def _find_by_product(items: List[StockItem], product_name: str) -> StockItem:
    for item in items:
        if item.product_name.strip().lower() == product_name.strip().lower():
            return item
    raise NotFoundError(f"No stock item for product {product_name}")


@service_call("fetching stock")
def get_all_stock(client: SheetsClient) -> ApiResponse:
    return ApiResponse(success=True, data=read_stock(client))


@service_call("adding stock")
def add_stock(client: SheetsClient, item: StockItem) -> ApiResponse:
    now = current_iso_datetime()
    item.id = item.id or f"STK_{epoch_millis()}"
    item.created_at = item.created_at or now
    item.last_updated = now
    stock_table(client).append(item.to_row())
    logger.info(f"Added stock item {item.id} for {item.product_name}")
    return ApiResponse(success=True, data=item)


@service_call("updating stock")
def update_stock(client: SheetsClient, stock_id: str, item: StockItem) -> ApiResponse:
    table = stock_table(client)
    rows = table.list()
    index = table.find_row_index(stock_id, rows=rows)
    if index is None:
        raise NotFoundError("Stock item not found")
    item.id = stock_id
    item.last_updated = current_iso_datetime()
    table.update_row(index + 1, item.to_row())
    return ApiResponse(success=True, data=item)


@service_call("syncing stock")
def sync_all_stock(client: SheetsClient, items: List[StockItem]) -> ApiResponse:
    write_stock(client, items)
    logger.info(f"Synced {len(items)} stock item(s)")
    return ApiResponse(success=True)


@service_call("filling bottles")
def fill_bottles(client: SheetsClient, product_name: str, quantity: int) -> ApiResponse:
    """Move quantity units of product_name from empty to filled stock."""
    if quantity <= 0:
        raise FormatError("Quantity must be greater than zero")
    items = read_stock(client)
    item = _find_by_product(items, product_name)
    if quantity > item.empty_stock:
        raise StockError(
            f"Cannot fill {quantity} {product_name}: only {item.empty_stock} empty bottle(s) in stock"
        )
    item.empty_stock -= quantity
    item.filled_stock += quantity
    item.last_updated = current_iso_datetime()
    write_stock(client, items)
    logger.info(f"Filled {quantity} {product_name} bottle(s)")
    return ApiResponse(success=True, data=item)


@service_call("restocking")
def restock_empty(client: SheetsClient, product_name: str, quantity: int) -> ApiResponse:
    """Receive quantity raw bottles into empty stock."""
    if quantity <= 0:
        raise FormatError("Quantity must be greater than zero")
    items = read_stock(client)
    item = _find_by_product(items, product_name)
    now = current_iso_datetime()
    item.empty_stock += quantity
    item.last_restocked = now
    item.restock_quantity = quantity
    item.last_updated = now
    write_stock(client, items)
    return ApiResponse(success=True, data=item)


def adjust_filled_stock(client: SheetsClient, deltas: Dict[str, int]) -> List[str]:
    """
    Apply per-product changes to filled stock (negative = units sold).

    Counts are clamped at zero. Products without a stock row are skipped.

    Returns:
        warnings describing clamped or missing products
    """
    deltas = {name: delta for name, delta in deltas.items() if delta}
    if not deltas:
        return []

    items = read_stock(client)
    by_name = {item.product_name.strip().lower(): item for item in items}
    warnings = []
    now = current_iso_datetime()
    for name, delta in deltas.items():
        item = by_name.get(name.lower())
        if item is None:
            warnings.append(f"No stock row for {name}")
            continue
        new_count, clamped = _clamp(item.filled_stock + delta)
        if clamped:
            warnings.append(f"Filled stock for {name} would go below zero; set to 0")
        item.filled_stock = new_count
        item.last_updated = now

    write_stock(client, items)
    for warning in warnings:
        logger.warning(warning)
    return warnings


def _clamp(value: int) -> Tuple[int, bool]:
    return (0, True) if value < 0 else (value, False)
