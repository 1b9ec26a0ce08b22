"""
Constants used throughout the application.
"""

# Orders sheet, columns A-R
ORDER_FIELDNAMES = [
    "Tracking ID",       # A
    "Customer Info",     # B
    "Oil Qty",           # C
    "Shampoo Qty",       # D
    "Conditioner Qty",   # E
    "Total Amount",      # F
    "Order Status",      # G
    "Payment Method",    # H
    "Payment Received",  # I
    "Free Shipping",     # J
    "Order Date",        # K
    "Last Updated",      # L
    "Spray Qty",         # M
    "Serum Qty",         # N
    "Premium Qty",       # O
    "Castor Qty",        # P
    "Main City",         # Q
    "FDE Status",        # R
]

# Column indexes used outside the codec
ORDER_TRACKING_COL = 0
ORDER_PAYMENT_RECEIVED_COL = 8
ORDER_MAIN_CITY_COL = 16
ORDER_FDE_COL = 17

# The generic order update path writes A-Q; column R belongs to set_fde_waybill
ORDER_EDITABLE_WIDTH = 17

# Product name -> Orders sheet quantity column
PRODUCT_QTY_COLUMNS = {
    "Oil": 2,
    "Shampoo": 3,
    "Conditioner": 4,
    "Spray": 12,
    "Serum": 13,
    "Premium": 14,
    "Castor": 15,
}

PRODUCT_PRICES = {
    "Oil": 950,
    "Shampoo": 1350,
    "Conditioner": 1350,
    "Spray": 980,
    "Serum": 1600,
    "Premium": 2600,
    "Castor": 2400,
}

ORDER_STATUSES = [
    "Preparing",
    "Shipped",
    "Packed",
    "Dispatched",
    "Delivered",
    "Reschedule",
    "Return",
    "Transfer",
    "Damaged",
]

PAYMENT_METHODS = ["COD", "Bank Transfer"]

PRODUCT_FIELDNAMES = ["ID", "Name", "Cost", "Price", "Last Updated"]

EXPENSE_TYPES = ["Shampoo", "Conditioner", "Oil", "Other"]

EXPENSE_FIELDNAMES = ["ID", "Type", "Amount", "Note", "Date", "Timestamp"]

STOCK_FIELDNAMES = [
    "ID",
    "Product Name",
    "Empty Stock",
    "Filled Stock",
    "Created At",
    "Last Updated",
    "Last Restocked",
    "Restock Quantity",
]

FAILED_TRACKING_STATUSES = ["Failed", "Retry", "Resolved"]

FAILED_TRACKING_FIELDNAMES = [
    "ID",
    "Tracking ID",
    "Reason",
    "Attempt Count",
    "First Failed",
    "Last Attempt",
    "Status",
    "Error Details",
]

BRANCH_FIELDNAMES = [
    "ID",
    "Branch",
    "Contact No 1",
    "Contact No 2",
    "Contact No 3",
    "Additional Info",
]

# Courier payment export (CSV upload)
PAYMENT_CSV_REQUIRED = ["Waybill ID", "Order ID"]

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]
