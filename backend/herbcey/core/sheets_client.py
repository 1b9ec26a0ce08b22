"""
Google Sheets access layer.

SheetsClient wraps a gspread Spreadsheet handle and turns gspread/requests
failures into NetworkError. SheetTable binds the client to one tab and its
column schema, and owns the row locator used by every update and delete.
"""
import logging
from contextlib import contextmanager
from typing import Any, List, Optional, Sequence

import gspread
import requests

from herbcey.core.auth import SheetSession
from herbcey.core.codec import column_letter
from herbcey.core.errors import NetworkError, NotFoundError

# Configure logger
logger = logging.getLogger(__name__)

RAW = {"valueInputOption": "RAW"}


@contextmanager
def sheets_errors(action: str):
    """Re-raise gspread and transport failures as NetworkError."""
    try:
        yield
    except gspread.exceptions.APIError as e:
        status = getattr(e.response, "status_code", None) or getattr(e, "code", None)
        logger.error(f"Sheets API error during {action}: {status} {e}")
        raise NetworkError(f"HTTP error! status: {status}", status_code=status) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Network failure during {action}: {e}")
        raise NetworkError(f"Network error during {action}: {e}") from e


class SheetsClient:
    """Thin wrapper over the Sheets values and batchUpdate endpoints."""

    def __init__(self, session: SheetSession, spreadsheet: Optional[Any] = None):
        """
        Args:
            session: operator session (spreadsheet id, bearer token, API key)
            spreadsheet: pre-opened gspread Spreadsheet; opened lazily when omitted
        """
        self.session = session
        self._spreadsheet = spreadsheet

    @property
    def spreadsheet(self):
        if self._spreadsheet is None:
            with sheets_errors("open spreadsheet"):
                self._spreadsheet = self.session.open_spreadsheet()
        return self._spreadsheet

    def get_values(self, a1_range: str) -> List[List[Any]]:
        with sheets_errors(f"read {a1_range}"):
            data = self.spreadsheet.values_get(a1_range)
        return data.get("values", []) or []

    def append_values(self, a1_range: str, rows: List[List[Any]]):
        self.session.require_token()
        with sheets_errors(f"append to {a1_range}"):
            return self.spreadsheet.values_append(a1_range, params=RAW, body={"values": rows})

    def update_values(self, a1_range: str, rows: List[List[Any]]):
        self.session.require_token()
        with sheets_errors(f"update {a1_range}"):
            return self.spreadsheet.values_update(a1_range, params=RAW, body={"values": rows})

    def sheet_titles(self) -> dict:
        """Map of tab title -> internal sheet id."""
        with sheets_errors("fetch metadata"):
            metadata = self.spreadsheet.fetch_sheet_metadata()
        return {
            sheet["properties"]["title"]: sheet["properties"]["sheetId"]
            for sheet in metadata.get("sheets", [])
        }

    def sheet_id(self, title: str) -> Optional[int]:
        return self.sheet_titles().get(title)

    def add_sheet(self, title: str):
        self.session.require_token()
        body = {"requests": [{"addSheet": {"properties": {"title": title}}}]}
        with sheets_errors(f"add sheet {title}"):
            return self.spreadsheet.batch_update(body)

    def delete_rows(self, sheet_id: int, start_index: int, end_index: int):
        self.session.require_token()
        body = {
            "requests": [{
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": start_index,
                        "endIndex": end_index,
                    }
                }
            }]
        }
        with sheets_errors("delete rows"):
            return self.spreadsheet.batch_update(body)

    def table(self, name: str, columns: Sequence[str]) -> "SheetTable":
        return SheetTable(self, name, columns)


class SheetTable:
    """One tab of the spreadsheet with a fixed column schema. Row 1 is the header."""

    def __init__(self, client: SheetsClient, name: str, columns: Sequence[str]):
        self.client = client
        self.name = name
        self.columns = list(columns)

    @property
    def last_column(self) -> str:
        return column_letter(len(self.columns) - 1)

    @property
    def full_range(self) -> str:
        return f"{self.name}!A:{self.last_column}"

    @property
    def open_range(self) -> str:
        """The whole tab, every column."""
        return self.name

    def row_range(self, row_number: int, width: Optional[int] = None) -> str:
        last = column_letter((width or len(self.columns)) - 1)
        return f"{self.name}!A{row_number}:{last}{row_number}"

    def cell(self, column_index: int, row_number: int) -> str:
        return f"{self.name}!{column_letter(column_index)}{row_number}"

    def list(self) -> List[List[Any]]:
        """All rows, header included. Empty sheet -> []."""
        return self.client.get_values(self.open_range)

    def records(self) -> List[List[Any]]:
        """Data rows only."""
        return self.list()[1:]

    def append(self, row: List[Any]):
        logger.debug(f"Appending row to {self.name}: {row[:1]}")
        return self.client.append_values(self.full_range, [row])

    def update_row(self, row_number: int, row: List[Any]):
        """Overwrite one row; row_number is the 1-based sheet row."""
        return self.client.update_values(self.row_range(row_number, len(row)), [row])

    def update_range(self, a1_range: str, values: List[List[Any]]):
        if "!" not in a1_range:
            a1_range = f"{self.name}!{a1_range}"
        return self.client.update_values(a1_range, values)

    def update_cell(self, column_index: int, row_number: int, value: Any):
        return self.client.update_values(self.cell(column_index, row_number), [[value]])

    def delete_row(self, index0: int):
        """Remove the row at 0-based index (header is index 0)."""
        sheet_id = self.client.sheet_id(self.name)
        if sheet_id is None:
            raise NotFoundError(f"Sheet {self.name} not found")
        return self.client.delete_rows(sheet_id, index0, index0 + 1)

    def overwrite_all(self, rows: List[List[Any]]):
        """Write the header followed by rows starting at A1."""
        return self.client.update_values(f"{self.name}!A1", [self.columns] + list(rows))

    def exists(self) -> bool:
        return self.client.sheet_id(self.name) is not None

    def ensure_exists(self) -> bool:
        """Create the tab with its header row if missing. Returns True when created."""
        if self.exists():
            return False
        self.client.add_sheet(self.name)
        self.update_range(f"A1:{self.last_column}1", [self.columns])
        logger.info(f"Created sheet {self.name}")
        return True

    def find_row_index(
        self,
        key: str,
        column: int = 0,
        rows: Optional[List[List[Any]]] = None,
    ) -> Optional[int]:
        """
        Locate the first data row whose trimmed cell in `column` equals `key`.

        Returns the 0-based index into `rows` (header at 0), or None. The sheet
        row number is index + 1. Pass `rows` to reuse an earlier read.
        """
        if rows is None:
            rows = self.list()
        return locate_row(rows, key, column, sheet_name=self.name)


def locate_row(
    rows: List[List[Any]],
    key: str,
    column: int = 0,
    sheet_name: str = "sheet",
) -> Optional[int]:
    """First data row (header skipped) whose trimmed cell equals key; None if absent."""
    wanted = str(key).strip()
    found = None
    for index, row in enumerate(rows):
        if index == 0:
            continue
        if len(row) > column and str(row[column]).strip() == wanted:
            if found is None:
                found = index
            else:
                logger.warning(
                    f"Duplicate key {wanted!r} in {sheet_name} rows {found + 1} and {index + 1}; using the first"
                )
                break
    return found
