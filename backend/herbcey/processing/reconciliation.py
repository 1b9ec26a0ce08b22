"""
Payment reconciliation: mark orders as paid from a courier payment export.

For every CSV record the Orders sheet is searched by tracking id (column A).
A matching order with Payment Received (column I) not yet "Yes" gets that one
cell written. Records are independent; a failure on one never rolls back the
others.
"""
import time
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional

from herbcey.core.codec import cell_yes
from herbcey.core.sheets_client import locate_row
from herbcey.processing.csv_parser import PaymentRecord
from herbcey.utils.config import API_DELAY_SECONDS
from herbcey.utils.constants import ORDER_PAYMENT_RECEIVED_COL, ORDER_TRACKING_COL

logger = logging.getLogger(__name__)

UPDATED = "updated"
NOT_FOUND = "not_found"
ERROR = "error"

MSG_MISSING_WAYBILL = "Missing Waybill ID in CSV record"
MSG_NOT_FOUND = "Order not found in Google Sheets"
MSG_ALREADY_PAID = "Payment already marked as received"
MSG_UPDATED = "Payment status updated successfully"
MSG_WRITE_FAILED = "Failed to update payment status"


@dataclass
class PaymentDetail:
    waybill_id: str
    status: str
    message: str = ""


@dataclass
class ReconcileResult:
    success: bool = False
    processed: int = 0
    updated: int = 0
    errors: List[str] = field(default_factory=list)
    details: List[PaymentDetail] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def find_order_row(sheet_rows: List[List[Any]], waybill_id: str) -> Optional[int]:
    """0-based index of the first order row whose trimmed tracking id equals waybill_id."""
    return locate_row(sheet_rows, waybill_id, ORDER_TRACKING_COL, sheet_name="Orders")


def is_paid(row: List[Any]) -> bool:
    return len(row) > ORDER_PAYMENT_RECEIVED_COL and cell_yes(row[ORDER_PAYMENT_RECEIVED_COL])


def reconcile(
    records: List[PaymentRecord],
    sheet_rows: List[List[Any]],
    mark_paid: Callable[[int], bool],
    delay: float = API_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> ReconcileResult:
    """
    Reconcile payment records against the Orders sheet rows.

    Args:
        records: parsed CSV payment records
        sheet_rows: Orders sheet values, header row first
        mark_paid: writes "Yes" into column I for the given 0-based row index;
            returns False when the write was rejected by the API
        delay: pause after every record that issued a write
        sleep: injectable sleep function

    Returns:
        ReconcileResult with one detail per record
    """
    result = ReconcileResult(processed=len(records))

    for record in records:
        waybill_id = (record.waybill_id or "").strip()
        if not waybill_id:
            result.details.append(PaymentDetail("Unknown", ERROR, MSG_MISSING_WAYBILL))
            continue

        try:
            index = find_order_row(sheet_rows, waybill_id)
            if index is None:
                result.details.append(PaymentDetail(waybill_id, NOT_FOUND, MSG_NOT_FOUND))
                continue

            # Already paid is reported under "updated" without a write
            if is_paid(sheet_rows[index]):
                result.details.append(PaymentDetail(waybill_id, UPDATED, MSG_ALREADY_PAID))
                continue

            if mark_paid(index):
                result.updated += 1
                result.details.append(PaymentDetail(waybill_id, UPDATED, MSG_UPDATED))
            else:
                result.details.append(PaymentDetail(waybill_id, ERROR, MSG_WRITE_FAILED))

            sleep(delay)
        except Exception as e:
            logger.error(f"Error processing {waybill_id}: {e}")
            result.details.append(PaymentDetail(waybill_id, ERROR, str(e)))
            result.errors.append(f"Error processing {waybill_id}: {e}")

    result.success = result.updated > 0 or not result.errors
    logger.info(f"Payment update completed. Updated: {result.updated}/{result.processed}")
    return result
