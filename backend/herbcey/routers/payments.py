from fastapi import APIRouter, HTTPException, Depends
import logging

from herbcey.core.errors import FormatError
from herbcey.core.sheets_client import SheetsClient
from herbcey.processing.csv_parser import validate_csv_format
from herbcey.routers.deps import get_client, respond
from herbcey.schemas import ApiResponse, PaymentCsvUpload, FailedTrackingIn, FailedTrackingUpdate
from herbcey.services import failed_tracking as ledger
from herbcey.services.payments import check_upload, update_payments_from_csv

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/payments/validate")
def validate_payment_csv(upload: PaymentCsvUpload):
    return {"valid": validate_csv_format(upload.filename, upload.content)}


@router.post("/payments/csv")
def upload_payment_csv(upload: PaymentCsvUpload, client: SheetsClient = Depends(get_client)):
    try:
        check_upload(upload.filename, upload.content)
        result = update_payments_from_csv(client, upload.content)
        return result.to_dict()
    except FormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing payment CSV: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/failed-trackings")
def get_failed_trackings(client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(ledger.get_failed_trackings(client))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching failed trackings: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/failed-trackings")
def add_failed_tracking(record: FailedTrackingIn, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(ledger.add_failed_tracking(client, record.tracking_id, record.reason, record.error_details))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding failed tracking: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/failed-trackings/initialize")
def initialize_failed_trackings(client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(ledger.initialize_sheet(client))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error initializing failed trackings sheet: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/failed-trackings/{record_id}")
def update_failed_tracking(
    record_id: str,
    record: FailedTrackingUpdate,
    client: SheetsClient = Depends(get_client),
) -> ApiResponse:
    try:
        return respond(ledger.update_failed_tracking(client, record_id, record.to_model(record_id)))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating failed tracking {record_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/failed-trackings/{record_id}")
def delete_failed_tracking(record_id: str, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    try:
        return respond(ledger.delete_failed_tracking(client, record_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting failed tracking {record_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/failed-trackings/{record_id}/retry")
def retry_failed_tracking(record_id: str, client: SheetsClient = Depends(get_client)) -> ApiResponse:
    """Retry outcomes (still missing, write rejected) come back as success=False with HTTP 200."""
    try:
        return respond(ledger.retry_failed_tracking(client, record_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error retrying failed tracking {record_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
