"""
Sheet-backed services. Every public service function takes a SheetsClient and
returns an ApiResponse; application errors are caught here and reported in
the response instead of propagating.
"""
import functools
import logging

from herbcey.core.errors import HerbceyError, http_status_for
from herbcey.schemas import ApiResponse

logger = logging.getLogger(__name__)


def service_call(action: str):
    """Wrap a service function so HerbceyError becomes ApiResponse(success=False)."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ApiResponse:
            try:
                return func(*args, **kwargs)
            except HerbceyError as e:
                logger.error(f"Error {action}: {e}")
                return ApiResponse(success=False, error=str(e), status_code=http_status_for(e))
        return wrapper
    return decorator
