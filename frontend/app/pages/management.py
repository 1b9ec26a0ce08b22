import streamlit as st
import pandas as pd
from datetime import date

from utils.api import (
    ApiError,
    fetch_products_api,
    sync_products_api,
    fetch_stock_api,
    add_stock_api,
    fill_bottles_api,
    restock_api,
    fetch_expenses_api,
    add_expense_api,
    delete_expense_api,
    fetch_branches_api,
)

EXPENSE_TYPES = ["Shampoo", "Conditioner", "Oil", "Other"]


def _load(fetch, label):
    try:
        return fetch()["data"] or []
    except ApiError as e:
        st.error(f"Error fetching {label}: {e}")
        return None


def _products_tab():
    products = _load(fetch_products_api, "products")
    if products is None:
        return
    df = pd.DataFrame(products, columns=["id", "name", "cost", "price", "last_updated"])
    st.info("✏️ Edit costs and prices, add rows at the bottom, then save.")
    edited = st.data_editor(
        df,
        use_container_width=True,
        hide_index=True,
        num_rows="dynamic",
        disabled=["id", "last_updated"],
        key="products_editor",
    )
    if st.button("💾 Save Products"):
        rows = edited[edited["name"].astype(str).str.strip() != ""].to_dict(orient="records")
        try:
            sync_products_api(rows)
            st.success(f"Saved {len(rows)} product(s)")
        except ApiError as e:
            st.error(f"Save failed: {e}")


def _stock_tab():
    stock = _load(fetch_stock_api, "stock")
    if stock is None:
        return
    if stock:
        df = pd.DataFrame(stock)
        c = st.columns(min(len(stock), 4))
        for i, item in enumerate(stock):
            c[i % len(c)].metric(
                item["product_name"], f"{item['filled_stock']} filled", f"{item['empty_stock']} empty",
                delta_color="off",
            )
        st.dataframe(df, use_container_width=True, hide_index=True)

        names = [item["product_name"] for item in stock]
        c1, c2 = st.columns(2)
        with c1.form("fill_bottles"):
            st.markdown("**Fill bottles** (empty ➜ filled)")
            product = st.selectbox("Product", names, key="fill_product")
            quantity = st.number_input("Quantity", min_value=1, step=1, key="fill_qty")
            if st.form_submit_button("Fill"):
                try:
                    fill_bottles_api(product, int(quantity))
                    st.success(f"Filled {quantity} {product}")
                except ApiError as e:
                    st.error(str(e))
        with c2.form("restock"):
            st.markdown("**Restock empty bottles**")
            product = st.selectbox("Product", names, key="restock_product")
            quantity = st.number_input("Quantity", min_value=1, step=1, key="restock_qty")
            if st.form_submit_button("Restock"):
                try:
                    restock_api(product, int(quantity))
                    st.success(f"Added {quantity} empty {product}")
                except ApiError as e:
                    st.error(str(e))
    else:
        st.info("No stock records yet.")

    with st.expander("➕ Add product to stock"):
        with st.form("add_stock"):
            name = st.text_input("Product name")
            c1, c2 = st.columns(2)
            empty = c1.number_input("Empty stock", min_value=0, step=1)
            filled = c2.number_input("Filled stock", min_value=0, step=1)
            if st.form_submit_button("Add") and name:
                try:
                    add_stock_api({"product_name": name, "empty_stock": int(empty), "filled_stock": int(filled)})
                    st.success(f"Added {name}")
                except ApiError as e:
                    st.error(str(e))


def _expenses_tab():
    with st.form("add_expense", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        expense_type = c1.selectbox("Type", EXPENSE_TYPES)
        amount = c2.number_input("Amount (Rs.)", min_value=0.0, step=100.0)
        expense_date = c3.date_input("Date", value=date.today())
        note = st.text_input("Note")
        if st.form_submit_button("➕ Add Expense"):
            if amount <= 0:
                st.error("Amount must be greater than zero")
            else:
                try:
                    add_expense_api({
                        "type": expense_type,
                        "amount": amount,
                        "note": note,
                        "date": expense_date.isoformat(),
                    })
                    st.success("Expense added")
                except ApiError as e:
                    st.error(str(e))

    expenses = _load(fetch_expenses_api, "expenses")
    if not expenses:
        return
    df = pd.DataFrame(expenses)
    st.metric("Total expenses", f"Rs. {df['amount'].sum():,.2f}")
    st.dataframe(df, use_container_width=True, hide_index=True)

    expense_id = st.selectbox(
        "Expense", [e["id"] for e in expenses],
        format_func=lambda eid: next(f"{e['date']} {e['type']} Rs.{e['amount']}" for e in expenses if e["id"] == eid),
    )
    if st.button("🗑️ Delete Expense"):
        try:
            delete_expense_api(expense_id)
            st.success("Expense deleted")
        except ApiError as e:
            st.error(str(e))


def _branches_tab():
    query = st.text_input("Search branch", placeholder="Branch name or phone number")
    branches = _load(lambda: fetch_branches_api(query), "branches")
    if branches:
        st.dataframe(pd.DataFrame(branches), use_container_width=True, hide_index=True)
    elif branches is not None:
        st.info("No branches match.")


def management_page():
    st.title("🗄️ Management")
    tab1, tab2, tab3, tab4 = st.tabs(["🏷️ Products", "📦 Stock", "🧾 Expenses", "📞 Branches"])
    with tab1:
        _products_tab()
    with tab2:
        _stock_tab()
    with tab3:
        _expenses_tab()
    with tab4:
        _branches_tab()
