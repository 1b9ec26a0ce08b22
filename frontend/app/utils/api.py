import requests
import os
import logging
import numpy as np
import streamlit as st

logger = logging.getLogger(__name__)

# Configuration
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
REQUEST_TIMEOUT = int(os.getenv("BACKEND_TIMEOUT", "120"))


class ApiError(Exception):
    """Backend call failed; message is the backend's detail when it sent one."""


def get_headers():
    """Bearer header carrying the signed-in operator's Google access token."""
    token = st.session_state.get("access_token")
    return {"Authorization": f"Bearer {token}"} if token else {}


def sanitize_df(df):
    if df.empty:
        return df
    return df.fillna('').astype(str)


def clean_dict(d):
    """Replace NaN/inf and None so a row survives JSON encoding"""
    if not isinstance(d, dict):
        return d
    new_d = {}
    for k, v in d.items():
        if v is None or (isinstance(v, float) and (np.isnan(v) or np.isinf(v))):
            new_d[k] = ""
        else:
            new_d[k] = v
    return new_d


def _request(method, path, **kwargs):
    try:
        resp = requests.request(
            method, f"{BACKEND_URL}{path}", headers=get_headers(), timeout=REQUEST_TIMEOUT, **kwargs
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"{method} {path} failed: {e}")
        raise ApiError(f"Backend unreachable: {e}") from e
    if resp.status_code >= 400:
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        logger.error(f"{method} {path} failed: {resp.status_code} {detail}")
        if resp.status_code == 401:
            detail = f"{detail} (sign in with Google to make changes)"
        raise ApiError(detail)
    return resp.json()


# Orders

def fetch_orders_api(status=None, payment=None, start_date=None, end_date=None, search=None):
    params = {
        "status": status,
        "payment": payment,
        "start_date": start_date,
        "end_date": end_date,
        "search": search or None,
    }
    return _request("GET", "/orders", params={k: v for k, v in params.items() if v})


def add_order_api(order):
    return _request("POST", "/orders", json=order)


def update_order_api(tracking_id, order):
    return _request("PUT", f"/orders/{tracking_id}", json=order)


def delete_order_api(tracking_id):
    return _request("DELETE", f"/orders/{tracking_id}")


def set_fde_waybill_api(tracking_id, waybill):
    return _request("PUT", f"/orders/{tracking_id}/fde-waybill", json={"waybill": waybill})


def fetch_order_cities_api(write_back=False):
    return _request("POST", "/orders/cities", json={"write_back": write_back})


def waybill_info_api(waybill_id):
    return _request("GET", f"/fde/waybill/{waybill_id}")


# Payments

def upload_payment_csv_api(filename, content):
    return _request("POST", "/payments/csv", json={"filename": filename, "content": content})


def fetch_failed_trackings_api():
    return _request("GET", "/failed-trackings")


def retry_failed_tracking_api(record_id):
    return _request("POST", f"/failed-trackings/{record_id}/retry")


def delete_failed_tracking_api(record_id):
    return _request("DELETE", f"/failed-trackings/{record_id}")


def initialize_failed_trackings_api():
    return _request("POST", "/failed-trackings/initialize")


# Products, stock and expenses

def fetch_products_api():
    return _request("GET", "/products")


def sync_products_api(products):
    return _request("PUT", "/products/sync", json=[clean_dict(p) for p in products])


def fetch_stock_api():
    return _request("GET", "/stock")


def add_stock_api(item):
    return _request("POST", "/stock", json=item)


def fill_bottles_api(product_name, quantity):
    return _request("POST", f"/stock/{product_name}/fill", json={"quantity": quantity})


def restock_api(product_name, quantity):
    return _request("POST", f"/stock/{product_name}/restock", json={"quantity": quantity})


def fetch_expenses_api():
    return _request("GET", "/expenses")


def add_expense_api(expense):
    return _request("POST", "/expenses", json=expense)


def delete_expense_api(expense_id):
    return _request("DELETE", f"/expenses/{expense_id}")


def fetch_branches_api(query=None):
    return _request("GET", "/branches", params={"q": query} if query else None)


# Analytics

def fetch_analytics_api(start_date=None, end_date=None, product="all", period="monthly"):
    params = {"start_date": start_date, "end_date": end_date, "product": product, "period": period}
    return _request("GET", "/analytics/sales", params={k: v for k, v in params.items() if v})
