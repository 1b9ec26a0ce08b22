from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional
import logging

from herbcey.core.sheets_client import SheetsClient
from herbcey.core.fde_client import FdeClient
from herbcey.processing.analytics import compute_sales_analytics, compute_profit, summarize_expenses
from herbcey.routers.deps import get_client, get_fde_client, respond
from herbcey.schemas import WaybillLookup
from herbcey.services.orders import get_all_orders
from herbcey.services.expenses import get_all_expenses
from herbcey.services.products import get_all_products

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/analytics/sales")
def sales_analytics(
    start_date: Optional[str] = Query(None, description="Start date", example="2025-01-01"),
    end_date: Optional[str] = Query(None, description="End date", example="2025-01-31"),
    product: Optional[str] = Query("all", description="Product name or 'all'"),
    period: str = Query("monthly", description="daily, monthly or yearly"),
    client: SheetsClient = Depends(get_client),
):
    try:
        orders = respond(get_all_orders(client)).data
        sales = compute_sales_analytics(orders, start_date, end_date, product, period)
        expenses = respond(get_all_expenses(client)).data
        expense_summary = summarize_expenses(expenses, start_date, end_date)
        products = respond(get_all_products(client)).data
        return {
            "sales": sales,
            "expenses": expense_summary,
            "profit": compute_profit(sales, expense_summary, products),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing analytics: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/fde/waybill/{waybill_id}")
def waybill_info(waybill_id: str, fde: FdeClient = Depends(get_fde_client)):
    result = fde.get_waybill_info(waybill_id)
    if not result["success"]:
        raise HTTPException(status_code=502, detail=result.get("error"))
    return result


@router.post("/fde/waybills")
def bulk_waybill_info(lookup: WaybillLookup, fde: FdeClient = Depends(get_fde_client)):
    return fde.get_bulk_waybill_info(lookup.waybill_ids)


@router.post("/fde/cities")
def bulk_cities(lookup: WaybillLookup, fde: FdeClient = Depends(get_fde_client)):
    return fde.get_bulk_cities(lookup.waybill_ids)


@router.get("/fde/cache")
def cache_stats(fde: FdeClient = Depends(get_fde_client)):
    return fde.cache_stats()


@router.delete("/fde/cache")
def clear_cache(fde: FdeClient = Depends(get_fde_client)):
    fde.clear_cache()
    return {"success": True}
