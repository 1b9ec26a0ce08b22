"""
Shared FastAPI dependencies and response handling for the routers.
"""
import logging

from fastapi import Depends, HTTPException

from herbcey.core.auth import SheetSession, get_session
from herbcey.core.fde_client import FdeClient
from herbcey.core.sheets_client import SheetsClient
from herbcey.schemas import ApiResponse

logger = logging.getLogger(__name__)

_fde_client = None


def get_client(session: SheetSession = Depends(get_session)) -> SheetsClient:
    return SheetsClient(session)


def get_fde_client() -> FdeClient:
    """Process-wide FDE client so the waybill cache is shared between requests."""
    global _fde_client
    if _fde_client is None:
        _fde_client = FdeClient()
    return _fde_client


def respond(response: ApiResponse) -> ApiResponse:
    """Raise HTTPException for failed responses that carry an HTTP status."""
    if not response.success and response.status_code:
        raise HTTPException(status_code=response.status_code, detail=response.error)
    return response
