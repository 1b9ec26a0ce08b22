"""
Configuration settings for the Google Sheets backend and the FDE courier API.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Google Sheets Configuration
SPREADSHEET_ID = os.getenv("GOOGLE_SHEET_ID", "")

# Public API key used for read-only requests when no operator token is present
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# Sheet (tab) names
ORDERS_SHEET = os.getenv("ORDERS_SHEET_NAME", "Orders")
PRODUCTS_SHEET = os.getenv("PRODUCTS_SHEET_NAME", "Products")
EXPENSES_SHEET = os.getenv("EXPENSES_SHEET_NAME", "Expenses")
STOCK_SHEET = os.getenv("STOCK_SHEET_NAME", "Stock")
FAIL_TRACKINGS_SHEET = os.getenv("FAIL_TRACKINGS_SHEET_NAME", "FailTrackings")
BRANCHES_SHEET = os.getenv("BRANCHES_SHEET_NAME", "BranchNumbers")

# Rate Limiting
API_DELAY_SECONDS = float(os.getenv("API_DELAY_SECONDS", "0.1"))
CITY_LOOKUP_DELAY = float(os.getenv("CITY_LOOKUP_DELAY", "0.5"))

# FDE Domestic courier API
FDE_API_URL = os.getenv(
    "FDE_API_URL",
    "https://www.fdedomestic.com/api/parcel/existing_waybill_api_v1.php",
)
FDE_CLIENT_ID = os.getenv("FDE_CLIENT_ID", "")
FDE_API_KEY = os.getenv("FDE_API_KEY", "")
FDE_CACHE_FILE = os.getenv("FDE_CACHE_FILE", "data/fde_waybill_cache.json")
FDE_CACHE_MINUTES = int(os.getenv("FDE_CACHE_MINUTES", "10"))
FDE_REQUEST_DELAY = float(os.getenv("FDE_REQUEST_DELAY", "0.3"))

# Outbound HTTP timeout (seconds)
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Timezone Configuration
TIMEZONE = os.getenv("TIMEZONE", "Asia/Colombo")

# Raise on rows wider than their column schema (development only)
STRICT_ROWS = os.getenv("HERBCEY_STRICT_ROWS", "").lower() in ("1", "true", "yes")

# Order pricing
SHIPPING_COST = float(os.getenv("SHIPPING_COST", "350"))
