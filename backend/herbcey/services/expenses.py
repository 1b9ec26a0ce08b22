"""
Expense tracking over the Expenses sheet.
"""
import logging
from typing import List, Optional

from herbcey.core.errors import NotFoundError
from herbcey.core.models import Expense
from herbcey.core.sheets_client import SheetsClient, SheetTable
from herbcey.processing.analytics import summarize_expenses
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.utils.config import EXPENSES_SHEET
from herbcey.utils.constants import EXPENSE_FIELDNAMES
from herbcey.utils.dates import epoch_millis

logger = logging.getLogger(__name__)


def expenses_table(client: SheetsClient) -> SheetTable:
    return client.table(EXPENSES_SHEET, EXPENSE_FIELDNAMES)


def read_expenses(client: SheetsClient) -> List[Expense]:
    return [Expense.from_row(row) for row in expenses_table(client).records()]


@service_call("fetching expenses")
def get_all_expenses(client: SheetsClient) -> ApiResponse:
    return ApiResponse(success=True, data=read_expenses(client))


@service_call("adding expense")
def add_expense(client: SheetsClient, expense: Expense) -> ApiResponse:
    expense.id = expense.id or f"EXP_{epoch_millis()}"
    row = expense.to_row()
    expenses_table(client).append(row)
    expense.timestamp = row[-1]
    logger.info(f"Added {expense.type} expense of {expense.amount}")
    return ApiResponse(success=True, data=expense)


@service_call("updating expense")
def update_expense(client: SheetsClient, expense_id: str, expense: Expense) -> ApiResponse:
    table = expenses_table(client)
    index = table.find_row_index(expense_id)
    if index is None:
        raise NotFoundError("Expense not found")
    expense.id = expense_id
    table.update_row(index + 1, expense.to_row())
    return ApiResponse(success=True, data=expense)


@service_call("deleting expense")
def delete_expense(client: SheetsClient, expense_id: str) -> ApiResponse:
    client.session.require_token()
    table = expenses_table(client)
    index = table.find_row_index(expense_id)
    if index is None:
        raise NotFoundError("Expense not found")
    table.delete_row(index)
    return ApiResponse(success=True)


@service_call("summarizing expenses")
def get_expense_summary(
    client: SheetsClient,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> ApiResponse:
    """Total, per-type and per-month (YYYY-MM) expense sums, optionally within a date range."""
    return ApiResponse(success=True, data=summarize_expenses(read_expenses(client), start_date, end_date))
