"""
Cell-level helpers for turning positional sheet rows into typed values.

Sheets returns every row as a list of strings, trimmed of trailing empty
cells. The helpers below never raise on malformed values; they substitute
the column default instead.
"""
import logging
from typing import Any, List, Sequence

from herbcey.core.errors import FormatError
from herbcey.utils import config

logger = logging.getLogger(__name__)

YES = "Yes"
NO = "No"


def pad_row(row: Sequence[Any], columns: Sequence[str], strict: bool = None) -> List[Any]:
    """
    Return a copy of row padded with "" to the schema width.

    In strict mode a row wider than the schema raises FormatError; otherwise
    the extra cells are logged and dropped.
    """
    if strict is None:
        strict = config.STRICT_ROWS
    values = list(row or [])
    if len(values) > len(columns):
        if strict:
            raise FormatError(
                f"Row has {len(values)} cells, schema {columns[0]}..{columns[-1]} allows {len(columns)}"
            )
        logger.debug(f"Dropping {len(values) - len(columns)} extra cell(s) from row {values[:1]}")
        values = values[:len(columns)]
    return values + [""] * (len(columns) - len(values))


def cell_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def cell_int(value: Any) -> int:
    """Leading-integer parse with 0 fallback ("12abc" -> 12, "x" -> 0)."""
    text = cell_str(value).strip()
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return 0


def cell_float(value: Any) -> float:
    text = cell_str(value).strip().replace(",", "")
    try:
        return float(text)
    except ValueError:
        return 0.0


def cell_yes(value: Any) -> bool:
    """Case-sensitive comparison with the literal "Yes"."""
    return value == YES


def yes_no(flag: bool) -> str:
    return YES if flag else NO


def column_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA."""
    letter = ""
    while index >= 0:
        letter = chr(65 + index % 26) + letter
        index = index // 26 - 1
    return letter
