"""
Operator session handling for Google Sheets access.

The operator signs in on the frontend with Google; the resulting OAuth access
token travels to the backend as a bearer header. Writes require that token.
Reads fall back to the public API key when no token is present.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import gspread
from fastapi import Header
from google.oauth2.credentials import Credentials

from herbcey.core.errors import AuthError
from herbcey.utils.config import SPREADSHEET_ID, GOOGLE_API_KEY
from herbcey.utils.constants import SCOPES

# Configure logger
logger = logging.getLogger(__name__)


@dataclass
class SheetSession:
    """Everything a service needs to reach the spreadsheet on behalf of an operator."""
    spreadsheet_id: str
    access_token: Optional[str] = None
    api_key: Optional[str] = None

    @property
    def can_write(self) -> bool:
        return bool(self.access_token)

    def require_token(self) -> str:
        """Return the bearer token or raise AuthError."""
        if not self.can_write:
            raise AuthError()
        return self.access_token

    def gspread_client(self) -> gspread.Client:
        """
        Build a gspread client for this session.

        Uses the operator's OAuth token when present, otherwise a key-only
        client that can read public sheets.
        """
        if self.can_write:
            credentials = Credentials(token=self.access_token, scopes=SCOPES)
            return gspread.authorize(credentials)
        if self.api_key:
            logger.debug("No access token, using API key for read-only access")
            return gspread.api_key(self.api_key)
        raise AuthError()

    def open_spreadsheet(self) -> gspread.Spreadsheet:
        if not self.spreadsheet_id:
            raise AuthError("GOOGLE_SHEET_ID is not configured")
        return self.gspread_client().open_by_key(self.spreadsheet_id)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_session(authorization: Optional[str] = Header(None)) -> SheetSession:
    """FastAPI dependency that builds the SheetSession for the current request."""
    return SheetSession(
        spreadsheet_id=SPREADSHEET_ID,
        access_token=parse_bearer(authorization),
        api_key=GOOGLE_API_KEY or None,
    )
