from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional
import logging

from herbcey.core.sheets_client import SheetsClient
from herbcey.core.fde_client import FdeClient
from herbcey.processing.filters import filter_orders
from herbcey.routers.deps import get_client, get_fde_client, respond
from herbcey.schemas import ApiResponse, OrderIn, FdeWaybillUpdate, CityJobRequest
from herbcey.services import orders as order_service
from herbcey.services.tracking_city import get_cities_for_all_tracking_ids

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/orders")
def get_orders(
    status: Optional[str] = Query(None, description="Order status or 'All'"),
    payment: Optional[str] = Query(None, description="All, COD Paid, COD Unpaid or Bank Transfer"),
    start_date: Optional[str] = Query(None, description="Start date", example="2025-01-01"),
    end_date: Optional[str] = Query(None, description="End date", example="2025-01-31"),
    search: Optional[str] = Query(None, description="Free text search"),
    client: SheetsClient = Depends(get_client),
):
    try:
        response = respond(order_service.get_all_orders(client))
        orders = filter_orders(response.data, status, payment, start_date, end_date, search)
        return {
            "success": True,
            "total": len(response.data),
            "data": [order.to_dict() for order in orders],
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching orders: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/orders/tracking-ids")
def get_tracking_ids(client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(order_service.get_tracking_ids(client))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching tracking ids: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/orders")
def create_order(order: OrderIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(order_service.add_order(client, order.to_model()))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding order: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/orders/{tracking_id}")
def update_order(tracking_id: str, order: OrderIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(order_service.update_order(client, tracking_id, order.to_model()))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating order {tracking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/orders/{tracking_id}")
def delete_order(tracking_id: str, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(order_service.delete_order(client, tracking_id))
    except HTTPException as e:
        if e.status_code == 404:
            logger.warning(f"Order {tracking_id} not found")
        raise e
    except Exception as e:
        logger.error(f"Error deleting order {tracking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/orders/{tracking_id}/fde-waybill")
def set_fde_waybill(
    tracking_id: str,
    update: FdeWaybillUpdate,
    client: SheetsClient = Depends(get_client),
) -> ApiResponse:
    try:
        return respond(order_service.set_fde_waybill(client, tracking_id, update.waybill))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error setting FDE waybill for {tracking_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/orders/cities")
def fetch_order_cities(
    request: CityJobRequest,
    client: SheetsClient = Depends(get_client),
    fde: FdeClient = Depends(get_fde_client),
) -> ApiResponse:
    try:
        return respond(get_cities_for_all_tracking_ids(client, fde, write_back=request.write_back))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching order cities: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
