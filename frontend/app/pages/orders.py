import streamlit as st
import pandas as pd
from datetime import date, timedelta

from utils.api import (
    ApiError,
    fetch_orders_api,
    add_order_api,
    update_order_api,
    delete_order_api,
    set_fde_waybill_api,
    fetch_order_cities_api,
    waybill_info_api,
)

PRODUCTS = ["Oil", "Shampoo", "Conditioner", "Spray", "Serum", "Premium", "Castor"]
ORDER_STATUSES = [
    "Preparing", "Shipped", "Packed", "Dispatched", "Delivered",
    "Reschedule", "Return", "Transfer", "Damaged",
]
PAYMENT_FILTERS = ["All", "COD Paid", "COD Unpaid", "Bank Transfer"]
PAYMENT_METHODS = ["COD", "Bank Transfer"]


def _quantities(order):
    return {p: int(order.get(f"{p.lower()}_qty", 0) or 0) for p in PRODUCTS}


def _orders_df(orders):
    rows = []
    for o in orders:
        rows.append({
            "Tracking": o.get("tracking_id", ""),
            "Date": o.get("order_date", ""),
            "Name": o.get("name", ""),
            "Address": o.get("address", ""),
            "Contact": o.get("contact", ""),
            "Products": ", ".join(f"{p} x{q}" for p, q in _quantities(o).items() if q),
            "Total": o.get("total_amount", 0),
            "Status": o.get("order_status", ""),
            "Payment": o.get("payment_method", ""),
            "Paid": o.get("payment_received", False),
            "City": o.get("main_city", ""),
            "FDE": o.get("fde_status", ""),
        })
    return pd.DataFrame(rows)


def _order_form(key, order=None):
    """Render the add/edit form and return the payload when submitted."""
    order = order or {}
    existing = _quantities(order)
    with st.form(key):
        c1, c2 = st.columns(2)
        name = c1.text_input("Customer name", value=order.get("name", ""))
        contact = c2.text_input("Contact", value=order.get("contact", ""), help="Separate numbers with / or ,")
        address_line1 = st.text_input("Address line 1", value=order.get("address", ""))
        c1, c2 = st.columns(2)
        address_line2 = c1.text_input("Address line 2")
        address_line3 = c2.text_input("Address line 3")

        st.markdown("**Products**")
        qty_cols = st.columns(len(PRODUCTS))
        quantities = {
            p: qty_cols[i].number_input(p, min_value=0, step=1, value=int(existing.get(p, 0)), key=f"{key}_{p}")
            for i, p in enumerate(PRODUCTS)
        }

        c1, c2, c3 = st.columns(3)
        status = c1.selectbox(
            "Status", ORDER_STATUSES,
            index=ORDER_STATUSES.index(order["order_status"]) if order.get("order_status") in ORDER_STATUSES else 0,
        )
        payment_method = c2.selectbox(
            "Payment method", PAYMENT_METHODS,
            index=PAYMENT_METHODS.index(order["payment_method"]) if order.get("payment_method") in PAYMENT_METHODS else 0,
        )
        order_date = c3.date_input(
            "Order date",
            value=pd.to_datetime(order["order_date"]).date() if order.get("order_date") else date.today(),
        )
        c1, c2, c3 = st.columns(3)
        payment_received = c1.checkbox("Payment received", value=order.get("payment_received", False))
        free_shipping = c2.checkbox("Free shipping", value=order.get("free_shipping", False))
        main_city = c3.text_input("Main city", value=order.get("main_city", ""))
        tracking = st.text_input(
            "Tracking ID", value=order.get("tracking_id", ""),
            disabled=bool(order), help="Leave empty to generate one",
        )

        if not st.form_submit_button("💾 Save Order"):
            return None

    products = [{"name": p, "quantity": q} for p, q in quantities.items() if q > 0]
    if not name or not address_line1 or not contact or not products:
        st.error("Name, address line 1, contact and at least one product are required.")
        return None
    return {
        "name": name,
        "address_line1": address_line1,
        "address_line2": address_line2,
        "address_line3": address_line3,
        "contact": contact,
        "products": products,
        "status": status,
        "order_date": order_date.isoformat(),
        "payment_method": payment_method,
        "payment_received": payment_received,
        "tracking": tracking or None,
        "free_shipping": free_shipping,
        "main_city": main_city,
    }


def _show_result(result, success_msg):
    st.success(success_msg)
    for warning in (result.get("data") or {}).get("stock_warnings", []):
        st.warning(warning)


def orders_page():
    st.title("📦 Orders")

    tab1, tab2, tab3 = st.tabs(["📋 Orders", "➕ New Order", "🚚 FDE & Cities"])

    with tab1:
        c1, c2, c3, c4 = st.columns(4)
        status = c1.selectbox("Status", ["All"] + ORDER_STATUSES)
        payment = c2.selectbox("Payment", PAYMENT_FILTERS)
        start_date = c3.date_input("From", value=date.today() - timedelta(days=30))
        end_date = c4.date_input("To", value=date.today())
        search = st.text_input("Search", placeholder="Tracking, name, phone, city...")

        if st.button("🔄 Load Orders"):
            try:
                with st.spinner("Reading Orders sheet..."):
                    result = fetch_orders_api(
                        status, payment, start_date.isoformat(), end_date.isoformat(), search
                    )
                st.session_state.orders = result["data"]
                st.session_state.orders_total = result["total"]
            except ApiError as e:
                st.error(f"Error fetching orders: {e}")

        orders = st.session_state.get("orders")
        if orders is not None:
            st.caption(f"Showing {len(orders)} of {st.session_state.get('orders_total', 0)} orders")
            df = _orders_df(orders)
            st.dataframe(df, use_container_width=True, hide_index=True)

            by_tracking = {o["tracking_id"]: o for o in orders if o.get("tracking_id")}
            if by_tracking:
                st.markdown("---")
                selected = st.selectbox("Select order to edit", list(by_tracking))
                order = by_tracking[selected]
                with st.expander(f"✏️ Edit {selected}"):
                    payload = _order_form(f"edit_{selected}", order)
                    if payload:
                        try:
                            result = update_order_api(selected, payload)
                            _show_result(result, f"Order {selected} updated.")
                        except ApiError as e:
                            st.error(f"Update failed: {e}")

                confirm = st.checkbox(f"Confirm delete of {selected}")
                if st.button("🗑️ Delete Order", disabled=not confirm):
                    try:
                        result = delete_order_api(selected)
                        _show_result(result, f"Order {selected} deleted, stock restored.")
                        st.session_state.orders = [o for o in orders if o.get("tracking_id") != selected]
                    except ApiError as e:
                        st.error(f"Delete failed: {e}")

    with tab2:
        payload = _order_form("new_order")
        if payload:
            try:
                result = add_order_api(payload)
                _show_result(result, f"Order {result['data']['tracking_id']} created.")
            except ApiError as e:
                st.error(f"Could not create order: {e}")

    with tab3:
        st.subheader("Waybill lookup")
        waybill = st.text_input("Waybill ID", placeholder="CCP123456")
        if st.button("🔍 Look up") and waybill:
            try:
                result = waybill_info_api(waybill)
                if result.get("from_cache"):
                    st.caption("Served from cache")
                st.json(result["data"])
            except ApiError as e:
                st.error(f"Lookup failed: {e}")

        st.subheader("Record FDE waybill")
        with st.form("fde_waybill"):
            c1, c2 = st.columns(2)
            tracking_id = c1.text_input("Tracking ID")
            fde_waybill = c2.text_input("FDE waybill")
            if st.form_submit_button("Save") and tracking_id:
                try:
                    set_fde_waybill_api(tracking_id, fde_waybill)
                    st.success(f"FDE waybill saved for {tracking_id}")
                except ApiError as e:
                    st.error(f"Save failed: {e}")

        st.subheader("Recipient cities")
        write_back = st.checkbox("Write cities to the Orders sheet")
        if st.button("🏙️ Fetch cities for all orders"):
            try:
                with st.spinner("Querying courier API, this can take a while..."):
                    result = fetch_order_cities_api(write_back)
                summary = result["data"]["summary"]
                c1, c2, c3, c4 = st.columns(4)
                c1.metric("Orders", summary["total"])
                c2.metric("With tracking", summary["with_tracking"])
                c3.metric("Cities found", summary["cities_found"])
                c4.metric("Written", summary["written"])
                st.dataframe(pd.DataFrame(result["data"]["results"]), use_container_width=True, hide_index=True)
            except ApiError as e:
                st.error(f"City lookup failed: {e}")
