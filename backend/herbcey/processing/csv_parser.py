"""
Courier payment CSV parsing.

The courier export is a plain comma-separated file without quoted commas, so
lines are split naively. Parsing, header validation and the conversion into
PaymentRecord objects are separate steps.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Union

from herbcey.core.errors import FormatError
from herbcey.utils.constants import PAYMENT_CSV_REQUIRED

logger = logging.getLogger(__name__)

_MAPPED = {"Waybill ID", "Order ID", "Amount", "Delivery Status"}


@dataclass
class PaymentRecord:
    """One line of the courier payment export."""
    waybill_id: str
    order_id: str = ""
    amount: str = ""
    delivery_status: str = ""
    extra: Dict[str, str] = field(default_factory=dict)


def _split(line: str) -> List[str]:
    return [value.strip().replace('"', "") for value in line.split(",")]


def parse_csv_text(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into one dict per data line, keyed by the header cells.

    Blank lines are skipped and missing trailing values become "".

    Raises:
        FormatError: fewer than two lines (no header plus data row)
    """
    lines = (text or "").split("\n")
    if len(lines) < 2:
        raise FormatError("CSV file must have at least a header row and one data row")

    headers = _split(lines[0])
    records = []
    for raw in lines[1:]:
        line = raw.strip()
        if not line:
            continue
        values = _split(line)
        records.append({
            header: values[i] if i < len(values) else ""
            for i, header in enumerate(headers)
        })
    logger.debug(f"Parsed {len(records)} CSV record(s) with headers {headers}")
    return records


def validate_csv_format(filename: str, content: Union[str, bytes]) -> bool:
    """True when the file is named *.csv and its first line carries the required headers."""
    if not filename or not filename.lower().endswith(".csv"):
        return False
    try:
        text = content.decode("utf-8") if isinstance(content, bytes) else content
        first_line = text.split("\n")[0]
    except (UnicodeDecodeError, AttributeError):
        return False
    return all(header in first_line for header in PAYMENT_CSV_REQUIRED)


def to_payment_records(records: List[Dict[str, str]]) -> List[PaymentRecord]:
    """
    Turn parsed rows into PaymentRecord objects.

    A row with an empty Waybill ID is kept (with waybill_id "") so the
    reconciler can report it.
    """
    payments = []
    for record in records:
        payments.append(PaymentRecord(
            waybill_id=(record.get("Waybill ID") or "").strip(),
            order_id=record.get("Order ID", ""),
            amount=record.get("Amount", ""),
            delivery_status=record.get("Delivery Status", ""),
            extra={k: v for k, v in record.items() if k not in _MAPPED},
        ))
    return payments
