"""
CSV payment import: parse the courier export, mark matching orders as paid
and record every unmatched or failed record in the failed-tracking ledger.
"""
import time
import logging
from typing import Callable

from herbcey.core.errors import FormatError, HerbceyError
from herbcey.core.sheets_client import SheetsClient
from herbcey.processing.csv_parser import parse_csv_text, to_payment_records, validate_csv_format
from herbcey.processing.reconciliation import ERROR, NOT_FOUND, ReconcileResult, reconcile
from herbcey.services.failed_tracking import add_failed_tracking
from herbcey.services.orders import mark_payment_received, orders_table
from herbcey.utils.config import API_DELAY_SECONDS

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "Order not found in system"
REASON_UPDATE_FAILED = "Update failed"


def update_payments_from_csv(
    client: SheetsClient,
    text: str,
    sleep: Callable[[float], None] = time.sleep,
) -> ReconcileResult:
    """
    Reconcile a courier payment CSV against the Orders sheet.

    Failures never raise; they end up in result.errors. Not-found and error
    details are added to the failed-tracking ledger after reconciliation.
    """
    result = ReconcileResult()
    try:
        client.session.require_token()
        records = to_payment_records(parse_csv_text(text))
        result.processed = len(records)
        if not records:
            result.errors.append("No records found in CSV file")
            return result

        sheet_rows = orders_table(client).list()
        if len(sheet_rows) < 2:
            result.errors.append("No orders found in Google Sheets")
            return result

        result = reconcile(
            records,
            sheet_rows,
            lambda index: mark_payment_received(client, index),
            delay=API_DELAY_SECONDS,
            sleep=sleep,
        )
    except HerbceyError as e:
        logger.error(f"Error in update_payments_from_csv: {e}")
        result.errors.append(str(e))
        return result

    record_failures(client, result)
    return result


def record_failures(client: SheetsClient, result: ReconcileResult) -> int:
    """Add a ledger entry for every not_found or error detail. Returns how many were recorded."""
    recorded = 0
    for detail in result.details:
        if detail.status == NOT_FOUND:
            response = add_failed_tracking(client, detail.waybill_id, REASON_NOT_FOUND)
        elif detail.status == ERROR:
            response = add_failed_tracking(client, detail.waybill_id, REASON_UPDATE_FAILED, detail.message)
        else:
            continue
        if response.success:
            recorded += 1
        else:
            logger.warning(f"Could not record failed tracking {detail.waybill_id}: {response.error}")
    return recorded


def check_upload(filename: str, content: str):
    """Raise FormatError unless the upload looks like a courier payment CSV."""
    if not validate_csv_format(filename, content):
        raise FormatError("Invalid CSV format. Expected a .csv file with 'Waybill ID' and 'Order ID' columns.")
