"""
Recipient city lookup for every tracking id in the Orders sheet, via the FDE
waybill API. Found cities can optionally be written back to column Q.
"""
import time
import logging
from typing import Callable

from herbcey.core.fde_client import FdeClient
from herbcey.core.sheets_client import SheetsClient
from herbcey.schemas import ApiResponse
from herbcey.services import service_call
from herbcey.services.orders import orders_table, read_tracking_ids, set_main_city
from herbcey.utils.config import CITY_LOOKUP_DELAY

logger = logging.getLogger(__name__)


@service_call("fetching cities for tracking ids")
def get_cities_for_all_tracking_ids(
    client: SheetsClient,
    fde: FdeClient,
    write_back: bool = False,
    delay: float = CITY_LOOKUP_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> ApiResponse:
    """
    Look up the recipient city of every order.

    Returns:
        ApiResponse whose data holds "results" (tracking_id, city, status,
        error) and a "summary" with total / cities_found / cities_failed /
        written counts.
    """
    tracking_ids = read_tracking_ids(client)
    rows = orders_table(client).list() if write_back else None
    if write_back:
        client.session.require_token()

    logger.info(f"Processing {len(tracking_ids)} tracking id(s)")
    results = []
    found = failed = written = 0
    for i, tracking_id in enumerate(tracking_ids):
        city = fde.get_recipient_city(tracking_id)
        if city:
            results.append({"tracking_id": tracking_id, "city": city, "status": "success"})
            found += 1
            if write_back and set_main_city(client, rows, tracking_id, city):
                written += 1
        else:
            results.append({
                "tracking_id": tracking_id,
                "city": None,
                "status": "failed",
                "error": "City not found in FDE API",
            })
            failed += 1

        if i < len(tracking_ids) - 1:
            sleep(delay)

    summary = {
        "total": len(tracking_ids),
        "with_tracking": len(tracking_ids),
        "cities_found": found,
        "cities_failed": failed,
        "written": written,
    }
    logger.info(f"City lookup summary: {summary}")
    return ApiResponse(success=True, data={"results": results, "summary": summary})
