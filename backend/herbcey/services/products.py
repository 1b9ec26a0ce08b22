"""
Product catalogue (cost and selling price) stored in the Products sheet.
"""
import logging
from typing import List

from herbcey.core.errors import NotFoundError
from herbcey.core.models import ProductCost
from herbcey.core.sheets_client import SheetsClient, SheetTable
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.utils.config import PRODUCTS_SHEET
from herbcey.utils.constants import PRODUCT_FIELDNAMES
from herbcey.utils.dates import current_iso_date, epoch_millis

logger = logging.getLogger(__name__)


def products_table(client: SheetsClient) -> SheetTable:
    return client.table(PRODUCTS_SHEET, PRODUCT_FIELDNAMES)


def read_products(client: SheetsClient) -> List[ProductCost]:
    return [ProductCost.from_row(row) for row in products_table(client).records()]


@service_call("fetching products")
def get_all_products(client: SheetsClient) -> ApiResponse:
    return ApiResponse(success=True, data=read_products(client))


@service_call("adding product")
def add_product(client: SheetsClient, product: ProductCost) -> ApiResponse:
    product.id = product.id or f"PRD_{epoch_millis()}"
    product.last_updated = current_iso_date()
    products_table(client).append(product.to_row())
    logger.info(f"Added product {product.name}")
    return ApiResponse(success=True, data=product)


@service_call("updating product")
def update_product(client: SheetsClient, product_id: str, product: ProductCost) -> ApiResponse:
    table = products_table(client)
    index = table.find_row_index(product_id)
    if index is None:
        raise NotFoundError("Product not found")
    product.id = product_id
    product.last_updated = current_iso_date()
    table.update_row(index + 1, product.to_row())
    return ApiResponse(success=True, data=product)


@service_call("deleting product")
def delete_product(client: SheetsClient, product_id: str) -> ApiResponse:
    client.session.require_token()
    table = products_table(client)
    index = table.find_row_index(product_id)
    if index is None:
        raise NotFoundError("Product not found")
    table.delete_row(index)
    return ApiResponse(success=True)


@service_call("syncing products")
def sync_all_products(client: SheetsClient, products: List[ProductCost]) -> ApiResponse:
    now = current_iso_date()
    for i, product in enumerate(products):
        product.id = product.id or f"PRD_{epoch_millis()}_{i}"
        product.last_updated = product.last_updated or now
    products_table(client).overwrite_all([p.to_row() for p in products])
    logger.info(f"Synced {len(products)} product(s)")
    return ApiResponse(success=True)
