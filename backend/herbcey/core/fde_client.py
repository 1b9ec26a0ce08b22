"""
FDE Domestic courier client for existing-waybill lookups.

Responses are cached per waybill for FDE_CACHE_MINUTES in a small JSON file so
repeated city lookups do not hit the courier API again.
"""
import os
import re
import json
import time
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import certifi
import requests

from herbcey.core.errors import NetworkError
from herbcey.utils import config

# Configure logger
logger = logging.getLogger(__name__)

WAYBILL_FIELDS = [
    "recipient_city",
    "recipient_name",
    "recipient_address",
    "recipient_contact_1",
    "recipient_contact_2",
    "current_status",
    "delivery_date",
    "amount",
    "parcel_description",
    "parcel_weight",
]

_CCP_PREFIX = re.compile(r"^CCP", re.IGNORECASE)


def clean_waybill_id(waybill_id: str) -> str:
    """Strip a leading CCP prefix (any case) and surrounding whitespace."""
    return _CCP_PREFIX.sub("", (waybill_id or "").strip()).strip()


class WaybillCache:
    """Handles saving and loading waybill lookups from a JSON file."""

    def __init__(self, path: str = None, ttl_minutes: int = None):
        self.path = path or config.FDE_CACHE_FILE
        self.ttl_seconds = (ttl_minutes if ttl_minutes is not None else config.FDE_CACHE_MINUTES) * 60
        self.entries: Dict[str, Dict[str, Any]] = {}
        self.load()

    def load(self):
        """Load entries from disk and drop the expired ones."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r') as f:
                self.entries = json.load(f)
        except Exception as e:
            logger.warning(f"Failed to load waybill cache: {e}")
            self.entries = {}
        self.clean_expired()

    def save(self):
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(self.entries, f)
        except Exception as e:
            logger.warning(f"Failed to save waybill cache: {e}")

    def clean_expired(self):
        now = time.time()
        expired = [key for key, entry in self.entries.items() if entry.get("expires", 0) <= now]
        for key in expired:
            del self.entries[key]
        if expired:
            self.save()

    def get(self, waybill_id: str) -> Optional[Dict[str, Any]]:
        entry = self.entries.get(waybill_id)
        if entry and entry.get("expires", 0) > time.time():
            return entry["data"]
        return None

    def put(self, waybill_id: str, data: Dict[str, Any]):
        now = time.time()
        self.entries[waybill_id] = {
            "data": data,
            "last_fetched": now,
            "expires": now + self.ttl_seconds,
        }
        self.save()

    def clear(self):
        """Remove all entries and the cache file."""
        self.entries = {}
        if os.path.exists(self.path):
            try:
                os.remove(self.path)
                logger.info("Waybill cache cleared")
            except Exception as e:
                logger.warning(f"Failed to clear waybill cache: {e}")

    def stats(self) -> Dict[str, Any]:
        now = time.time()
        valid = sum(1 for entry in self.entries.values() if entry.get("expires", 0) > now)
        fetched = [entry.get("last_fetched", 0) for entry in self.entries.values()]
        return {
            "total_entries": len(self.entries),
            "valid_entries": valid,
            "expired_entries": len(self.entries) - valid,
            "oldest_entry": datetime.fromtimestamp(min(fetched)).isoformat() if fetched else None,
            "newest_entry": datetime.fromtimestamp(max(fetched)).isoformat() if fetched else None,
        }


class FdeClient:
    """Client for the FDE Domestic existing-waybill API."""

    def __init__(
        self,
        url: str = None,
        client_id: str = None,
        api_key: str = None,
        cache: Optional[WaybillCache] = None,
        request_delay: float = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = url or config.FDE_API_URL
        self.client_id = client_id if client_id is not None else config.FDE_CLIENT_ID
        self.api_key = api_key if api_key is not None else config.FDE_API_KEY
        self.cache = cache if cache is not None else WaybillCache()
        self.request_delay = config.FDE_REQUEST_DELAY if request_delay is None else request_delay
        self.sleep = sleep

    def _post(self, waybill_id: str) -> Dict[str, Any]:
        data = {
            "client_id": self.client_id,
            "api_key": self.api_key,
            "waybill_id": waybill_id,
        }
        try:
            response = requests.post(
                self.url,
                data=data,
                headers={"Accept": "application/json"},
                timeout=config.REQUEST_TIMEOUT,
                verify=certifi.where(),
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"FDE request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"FDE request failed: {response.status_code} {response.text}")
            raise NetworkError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)
        return response.json()

    def get_waybill_info(self, waybill_id: str) -> Dict[str, Any]:
        """
        Look up one waybill.

        Returns:
            {"success": bool, "data": dict, "error": str, "from_cache": bool}
        """
        clean_id = clean_waybill_id(waybill_id)
        if not clean_id:
            return {"success": False, "error": "Waybill ID is required"}

        cached = self.cache.get(clean_id)
        if cached is not None:
            logger.debug(f"Using cached data for {clean_id}")
            return {"success": True, "data": cached, "from_cache": True}

        try:
            result = self._post(clean_id)
        except (NetworkError, ValueError) as e:
            logger.error(f"Error fetching waybill info for {waybill_id}: {e}")
            return {"success": False, "error": str(e), "from_cache": False}

        if result.get("status") == 200 and result.get("waybill_no"):
            waybill = {"waybill_id": clean_id}
            waybill.update({key: result.get(key) for key in WAYBILL_FIELDS})
            self.cache.put(clean_id, waybill)
            return {"success": True, "data": waybill, "from_cache": False}

        error = result.get("message") or f"API returned status: {result.get('status')}"
        logger.info(f"FDE lookup failed for {clean_id}: {error}")
        return {"success": False, "error": error, "from_cache": False}

    def get_recipient_city(self, waybill_id: str) -> Optional[str]:
        result = self.get_waybill_info(waybill_id)
        if result["success"] and result["data"].get("recipient_city"):
            return result["data"]["recipient_city"]
        return None

    def get_bulk_waybill_info(self, waybill_ids: List[str]) -> Dict[str, Any]:
        """Look up several waybills, pausing between uncached requests."""
        results = {}
        successful = 0
        for i, waybill_id in enumerate(waybill_ids):
            result = self.get_waybill_info(waybill_id)
            if result["success"]:
                results[waybill_id] = {"success": True, "data": result["data"]}
                successful += 1
            else:
                results[waybill_id] = {"success": False, "error": result.get("error")}

            if not result.get("from_cache") and i < len(waybill_ids) - 1:
                self.sleep(self.request_delay)

        logger.info(f"Bulk waybill lookup complete: {successful}/{len(waybill_ids)} successful")
        return {
            "success": True,
            "results": results,
            "summary": {
                "total": len(waybill_ids),
                "successful": successful,
                "failed": len(waybill_ids) - successful,
            },
        }

    def get_bulk_cities(self, waybill_ids: List[str]) -> Dict[str, Optional[str]]:
        bulk = self.get_bulk_waybill_info(waybill_ids)
        return {
            waybill_id: (result.get("data") or {}).get("recipient_city") if result["success"] else None
            for waybill_id, result in bulk["results"].items()
        }

    def clear_cache(self):
        self.cache.clear()

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()
