"""
Courier branch phone book (read-only).
"""
from typing import List, Optional

from herbcey.core.models import BranchContact
from herbcey.core.sheets_client import SheetsClient
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.utils.config import BRANCHES_SHEET
from herbcey.utils.constants import BRANCH_FIELDNAMES


def read_branches(client: SheetsClient) -> List[BranchContact]:
    rows = client.table(BRANCHES_SHEET, BRANCH_FIELDNAMES).records()
    return [
        BranchContact.from_row(row, index)
        for index, row in enumerate(rows)
        if any(str(cell).strip() for cell in row)
    ]


def search_branches(branches: List[BranchContact], query: Optional[str]) -> List[BranchContact]:
    """Case-insensitive match on branch name, phone numbers or notes."""
    if not query or not query.strip():
        return branches
    needle = query.strip().lower()
    matches = []
    for branch in branches:
        haystack = " ".join([branch.branch, branch.additional_info] + branch.numbers).lower()
        if needle in haystack:
            matches.append(branch)
    return matches


@service_call("fetching branches")
def get_branches(client: SheetsClient, query: Optional[str] = None) -> ApiResponse:
    return ApiResponse(success=True, data=search_branches(read_branches(client), query))
