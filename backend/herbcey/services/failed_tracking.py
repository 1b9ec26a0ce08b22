"""
Failed-tracking ledger.

Payment records that could not be matched to an order, or whose write
failed, are kept in the FailTrackings sheet so the operator can retry them
later. An open record (status other than Resolved) for the same tracking id
is reused rather than duplicated.
"""
import random
import string
import logging
from typing import Optional

from herbcey.core.errors import FormatError, NetworkError, NotFoundError
from herbcey.core.models import FailedTracking
from herbcey.core.sheets_client import SheetsClient, SheetTable
from herbcey.processing.reconciliation import find_order_row, is_paid
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.services.orders import orders_table, write_payment_received
from herbcey.utils.config import FAIL_TRACKINGS_SHEET
from herbcey.utils.constants import FAILED_TRACKING_FIELDNAMES, FAILED_TRACKING_STATUSES
from herbcey.utils.dates import epoch_millis, utc_timestamp

logger = logging.getLogger(__name__)

RESOLVED = "Resolved"
RETRY = "Retry"
FAILED = "Failed"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def ledger_table(client: SheetsClient) -> SheetTable:
    return client.table(FAIL_TRACKINGS_SHEET, FAILED_TRACKING_FIELDNAMES)


def new_record_id() -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"FT_{epoch_millis()}_{suffix}"


def _read(client: SheetsClient):
    return [
        FailedTracking.from_row(row)
        for row in ledger_table(client).records()
        if row and str(row[0]).strip()
    ]


def _write(client: SheetsClient, record: FailedTracking):
    table = ledger_table(client)
    index = table.find_row_index(record.id)
    if index is None:
        raise NotFoundError("Failed tracking not found")
    table.update_row(index + 1, record.to_row())


@service_call("fetching failed trackings")
def get_failed_trackings(client: SheetsClient) -> ApiResponse:
    return ApiResponse(success=True, data=_read(client))


@service_call("adding failed tracking")
def add_failed_tracking(
    client: SheetsClient,
    tracking_id: str,
    reason: str,
    error_details: Optional[str] = None,
) -> ApiResponse:
    client.session.require_token()
    now = utc_timestamp()

    existing = next(
        (r for r in _read(client) if r.tracking_id == tracking_id and r.is_open),
        None,
    )
    if existing is not None:
        existing.attempt_count += 1
        existing.last_attempt = now
        existing.error_details = error_details or existing.error_details
        _write(client, existing)
        logger.info(f"Failed tracking {tracking_id} seen again (attempt {existing.attempt_count})")
        return ApiResponse(success=True, data=existing)

    record = FailedTracking(
        id=new_record_id(),
        tracking_id=tracking_id,
        reason=reason,
        attempt_count=1,
        first_failed=now,
        last_attempt=now,
        status=FAILED,
        error_details=error_details or "",
    )
    ledger_table(client).append(record.to_row())
    logger.info(f"Recorded failed tracking {tracking_id}: {reason}")
    return ApiResponse(success=True, data=record)


@service_call("updating failed tracking")
def update_failed_tracking(client: SheetsClient, record_id: str, record: FailedTracking) -> ApiResponse:
    if record.status not in FAILED_TRACKING_STATUSES:
        raise FormatError(f"Unknown failed tracking status: {record.status}")
    record.id = record_id
    _write(client, record)
    return ApiResponse(success=True, data=record)


@service_call("deleting failed tracking")
def delete_failed_tracking(client: SheetsClient, record_id: str) -> ApiResponse:
    client.session.require_token()
    table = ledger_table(client)
    index = table.find_row_index(record_id)
    if index is None:
        raise NotFoundError("Failed tracking not found")
    table.delete_row(index)
    return ApiResponse(success=True)


@service_call("retrying failed tracking")
def retry_failed_tracking(client: SheetsClient, record_id: str) -> ApiResponse:
    """
    Try to mark the order for a ledger record as paid again.

    The ledger record always gets attempt_count + 1 and a fresh last_attempt;
    its status becomes Resolved (written or already paid), Retry (the write
    was rejected) or Failed (order still missing).
    """
    client.session.require_token()
    record = next((r for r in _read(client) if r.id == record_id), None)
    if record is None:
        raise NotFoundError("Failed tracking not found")

    order_rows = orders_table(client).list()
    record.attempt_count += 1
    record.last_attempt = utc_timestamp()

    index = find_order_row(order_rows, record.tracking_id)
    if index is None:
        record.status = FAILED
        record.error_details = "Order still not found in system"
        _write(client, record)
        return ApiResponse(success=False, error="Order not found in system", data=record)

    if is_paid(order_rows[index]):
        record.status = RESOLVED
        record.error_details = "Payment already marked as received"
        _write(client, record)
        return ApiResponse(success=True, data=record.error_details)

    try:
        write_payment_received(client, index)
    except NetworkError as e:
        if e.status_code is None:
            raise
        record.status = RETRY
        record.error_details = f"Failed to update payment status: {e.status_code}"
        _write(client, record)
        return ApiResponse(success=False, error=record.error_details, data=record)

    record.status = RESOLVED
    record.error_details = "Payment status updated successfully"
    _write(client, record)
    logger.info(f"Retried and resolved tracking {record.tracking_id}")
    return ApiResponse(success=True, data=record.error_details)


@service_call("initializing failed trackings sheet")
def initialize_sheet(client: SheetsClient) -> ApiResponse:
    client.session.require_token()
    if ledger_table(client).ensure_exists():
        return ApiResponse(success=True, data="Sheet created and initialized")
    return ApiResponse(success=True, data="Sheet already exists")
