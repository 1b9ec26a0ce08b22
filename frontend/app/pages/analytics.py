import streamlit as st
import pandas as pd
from datetime import date, timedelta

from utils.api import ApiError, fetch_analytics_api

PRODUCTS = ["all", "Oil", "Shampoo", "Conditioner", "Spray", "Serum", "Premium", "Castor"]
PERIODS = ["daily", "monthly", "yearly"]


def _rs(value):
    return f"Rs. {value:,.0f}"


def analytics_page():
    st.title("📈 Sales Analytics")

    c1, c2, c3, c4 = st.columns(4)
    start_date = c1.date_input("From", value=date.today() - timedelta(days=180))
    end_date = c2.date_input("To", value=date.today())
    product = c3.selectbox("Product", PRODUCTS, format_func=lambda p: "All products" if p == "all" else p)
    period = c4.selectbox("Group by", PERIODS, index=1)

    if st.button("📊 Run Analytics"):
        try:
            with st.spinner("Crunching orders..."):
                st.session_state.analytics = fetch_analytics_api(
                    start_date.isoformat(), end_date.isoformat(), product, period
                )
        except ApiError as e:
            st.error(f"Error computing analytics: {e}")

    report = st.session_state.get("analytics")
    if not report:
        return
    sales, expenses, profit = report["sales"], report["expenses"], report["profit"]

    st.markdown("### Sales")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Revenue", _rs(sales["total_revenue"]))
    c2.metric("Received", _rs(sales["total_received_funds"]), f"{sales['collection_rate']}% collected")
    c3.metric("Orders", sales["total_orders"])
    c4.metric("Units sold", sales["total_units_sold"])

    c1, c2, c3 = st.columns(3)
    c1.metric("COD received", _rs(sales["cod_received"]))
    c2.metric("Bank transfers", _rs(sales["bank_transfer_received"]))
    c3.metric("Pending", _rs(sales["pending_funds"]))

    if sales["time_series"]:
        ts = pd.DataFrame(sales["time_series"]).set_index("date")
        st.line_chart(ts["revenue"])

    c1, c2 = st.columns(2)
    with c1:
        st.markdown("**Product sales**")
        if sales["product_sales"]:
            ps = pd.DataFrame.from_dict(sales["product_sales"], orient="index")
            st.bar_chart(ps["quantity"])
            st.dataframe(ps, use_container_width=True)
    with c2:
        st.markdown("**Order status**")
        if sales["status_breakdown"]:
            st.bar_chart(pd.Series(sales["status_breakdown"], name="orders"))
        if sales["payment_methods"]:
            st.dataframe(pd.DataFrame.from_dict(sales["payment_methods"], orient="index"), use_container_width=True)

    st.markdown("### Profit")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Cost of goods", _rs(profit["cost_of_goods"]))
    c2.metric("Gross profit", _rs(profit["gross_profit"]))
    c3.metric("Expenses", _rs(profit["total_expenses"]))
    c4.metric("Net profit", _rs(profit["net_profit"]))
    if profit["products_without_cost"]:
        st.caption(f"No cost recorded for: {', '.join(profit['products_without_cost'])}")

    if expenses["monthly_expenses"]:
        c1, c2 = st.columns(2)
        c1.markdown("**Expenses by month**")
        c1.bar_chart(pd.Series(expenses["monthly_expenses"], name="amount"))
        c2.markdown("**Expenses by type**")
        c2.bar_chart(pd.Series(expenses["expenses_by_type"], name="amount"))
