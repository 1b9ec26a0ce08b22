from fastapi import APIRouter, HTTPException, Query, Depends
from typing import List, Optional
import logging

from herbcey.core.sheets_client import SheetsClient
from herbcey.routers.deps import get_client, respond
from herbcey.schemas import ApiResponse, ProductIn, StockIn, QuantityRequest, ExpenseIn
from herbcey.services import products as product_service
from herbcey.services import stock as stock_service
from herbcey.services import expenses as expense_service
from herbcey.services.branches import get_branches

router = APIRouter()
logger = logging.getLogger(__name__)


def _run(action: str, call) -> ApiResponse:
    try:
        return respond(call())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error {action}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


# Products

@router.get("/products")
def get_products(client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("fetching products", lambda: product_service.get_all_products(client))


@router.post("/products")
def add_product(product: ProductIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("adding product", lambda: product_service.add_product(client, product.to_model()))


@router.put("/products/sync")
def sync_products(products: List[ProductIn], client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run(
        "syncing products",
        lambda: product_service.sync_all_products(client, [p.to_model() for p in products]),
    )


@router.put("/products/{product_id}")
def update_product(product_id: str, product: ProductIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("updating product", lambda: product_service.update_product(client, product_id, product.to_model()))


@router.delete("/products/{product_id}")
def delete_product(product_id: str, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("deleting product", lambda: product_service.delete_product(client, product_id))


# Stock

@router.get("/stock")
def get_stock(client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("fetching stock", lambda: stock_service.get_all_stock(client))


@router.post("/stock")
def add_stock(item: StockIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("adding stock", lambda: stock_service.add_stock(client, item.to_model()))


@router.put("/stock/sync")
def sync_stock(items: List[StockIn], client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("syncing stock", lambda: stock_service.sync_all_stock(client, [i.to_model() for i in items]))


@router.put("/stock/{stock_id}")
def update_stock(stock_id: str, item: StockIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("updating stock", lambda: stock_service.update_stock(client, stock_id, item.to_model()))


@router.post("/stock/{product_name}/fill")
def fill_bottles(product_name: str, request: QuantityRequest, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("filling bottles", lambda: stock_service.fill_bottles(client, product_name, request.quantity))


@router.post("/stock/{product_name}/restock")
def restock(product_name: str, request: QuantityRequest, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("restocking", lambda: stock_service.restock_empty(client, product_name, request.quantity))


# Expenses

@router.get("/expenses")
def get_expenses(client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("fetching expenses", lambda: expense_service.get_all_expenses(client))


@router.get("/expenses/summary")
def get_expense_summary(
    start_date: Optional[str] = Query(None, description="Start date", example="2025-01-01"),
    end_date: Optional[str] = Query(None, description="End date", example="2025-01-31"),
    client: SheetsClient = Depends(get_client),
) -> ApiResponse:
    return _run("summarizing expenses", lambda: expense_service.get_expense_summary(client, start_date, end_date))


@router.post("/expenses")
def add_expense(expense: ExpenseIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("adding expense", lambda: expense_service.add_expense(client, expense.to_model()))


@router.put("/expenses/{expense_id}")
def update_expense(expense_id: str, expense: ExpenseIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("updating expense", lambda: expense_service.update_expense(client, expense_id, expense.to_model()))


@router.delete("/expenses/{expense_id}")
def delete_expense(expense_id: str, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    return _run("deleting expense", lambda: expense_service.delete_expense(client, expense_id))


# Branch contacts

@router.get("/branches")
def branches(
    q: Optional[str] = Query(None, description="Search query"),
    client: SheetsClient = Depends(get_client),
) -> ApiResponse:
    return _run("fetching branches", lambda: get_branches(client, q))
