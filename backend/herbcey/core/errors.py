"""
Error taxonomy shared by the Sheets client, the CSV importer and the services.
"""
from typing import Optional


class HerbceyError(Exception):
    """Base class for all application errors."""


class AuthError(HerbceyError):
    """No operator access token is available for a write path."""

    def __init__(self, message: str = "No access token found. Please sign in first."):
        super().__init__(message)


class NetworkError(HerbceyError):
    """An upstream HTTP call failed. status_code is None for transport failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FormatError(HerbceyError):
    """Malformed CSV input, missing required header, or a row wider than its schema."""


class NotFoundError(HerbceyError):
    """A tracking id / product id / expense id / stock id is absent from its sheet."""


class StockError(HerbceyError):
    """A stock movement would drive a count below zero."""


def http_status_for(error: Exception) -> int:
    """HTTP status the API layer reports for an application error."""
    if isinstance(error, AuthError):
        return 401
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (FormatError, StockError)):
        return 400
    if isinstance(error, NetworkError):
        return 502
    return 500
