"""
Order list filters used by the Orders page and the orders API.
"""
from typing import List, Optional

from herbcey.core.models import SheetOrder
from herbcey.utils.dates import is_in_range

ALL = "All"
PAYMENT_FILTERS = [ALL, "COD Paid", "COD Unpaid", "Bank Transfer"]


def matches_status(order: SheetOrder, status: Optional[str]) -> bool:
    return not status or status == ALL or order.order_status == status


def matches_payment(order: SheetOrder, payment_filter: Optional[str]) -> bool:
    if not payment_filter or payment_filter == ALL:
        return True
    if payment_filter == "COD Paid":
        return order.payment_method == "COD" and order.payment_received
    if payment_filter == "COD Unpaid":
        return order.payment_method == "COD" and not order.payment_received
    if payment_filter == "Bank Transfer":
        return order.payment_method == "Bank Transfer"
    return True


def matches_search(order: SheetOrder, search: Optional[str]) -> bool:
    """Case-insensitive search over tracking id, customer info and main city."""
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    haystack = " ".join([order.tracking_id, order.customer_info, order.main_city, order.fde_status])
    return needle in haystack.lower()


def filter_orders(
    orders: List[SheetOrder],
    status: Optional[str] = None,
    payment: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    search: Optional[str] = None,
) -> List[SheetOrder]:
    return [
        order for order in orders
        if matches_status(order, status)
        and matches_payment(order, payment)
        and is_in_range(order.order_date, start_date, end_date)
        and matches_search(order, search)
    ]
