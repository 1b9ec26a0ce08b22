"""
Date helpers. All business timestamps are written in Colombo local time.
"""
from datetime import datetime, date
from typing import Optional
import time

import pytz

from herbcey.utils.config import TIMEZONE

ISO_DATE = "%Y-%m-%d"
ISO_DATETIME = "%Y-%m-%d %H:%M:%S"


def now_local() -> datetime:
    return datetime.now(pytz.timezone(TIMEZONE))


def current_iso_date() -> str:
    """Current date as YYYY-MM-DD in local time."""
    return now_local().strftime(ISO_DATE)


def current_iso_datetime() -> str:
    """
    Current date and time as YYYY-MM-DD HH:MM:SS in local time.
    This is the format used for new order dates.
    """
    return now_local().strftime(ISO_DATETIME)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp, used by the failed-tracking ledger."""
    return datetime.now(pytz.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def parse_iso(value: str) -> Optional[datetime]:
    """
    Parse "YYYY-MM-DD", "YYYY-MM-DD HH:MM:SS" or "YYYY-MM-DDTHH:MM:SS[.fff][Z]".

    Naive values are treated as local time. Returns None when unparseable.
    """
    if not value:
        return None
    text = str(value).strip().replace("T", " ").rstrip("Z")
    if "." in text:
        text = text.split(".", 1)[0]
    tz = pytz.timezone(TIMEZONE)
    for fmt in (ISO_DATETIME, "%Y-%m-%d %H:%M", ISO_DATE):
        try:
            return tz.localize(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def to_date(value: str) -> Optional[date]:
    parsed = parse_iso(value)
    return parsed.date() if parsed else None


def is_in_range(value: str, start_date: Optional[str], end_date: Optional[str]) -> bool:
    """
    Check whether a date/datetime string falls inside an inclusive date range.

    Missing bounds are open. Unparseable values are outside any bounded range.
    """
    if not start_date and not end_date:
        return True
    day = to_date(value)
    if day is None:
        return False
    start = to_date(start_date) if start_date else None
    end = to_date(end_date) if end_date else None
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


def month_key(value: str) -> str:
    """YYYY-MM bucket for a date string."""
    return str(value or "")[:7]
