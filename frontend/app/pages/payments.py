import streamlit as st
import pandas as pd

from utils.api import (
    ApiError,
    upload_payment_csv_api,
    fetch_failed_trackings_api,
    retry_failed_tracking_api,
    delete_failed_tracking_api,
    initialize_failed_trackings_api,
    sanitize_df,
)


def _upload_section():
    st.subheader("Courier payment CSV")
    st.caption("Marks COD orders as paid for every waybill in the courier's payment export.")
    uploaded = st.file_uploader("Choose CSV file", type=["csv"])
    if uploaded is None:
        return

    content = uploaded.getvalue().decode("utf-8-sig")
    preview = content.splitlines()
    st.caption(f"{uploaded.name}: {max(len(preview) - 1, 0)} data row(s)")

    if st.button("🚀 Update Payments"):
        try:
            with st.spinner("Updating payment status one row at a time..."):
                result = upload_payment_csv_api(uploaded.name, content)
        except ApiError as e:
            st.error(f"Upload failed: {e}")
            return

        c1, c2, c3 = st.columns(3)
        c1.metric("Processed", result["processed"])
        c2.metric("Updated", result["updated"])
        c3.metric("Errors", len(result["errors"]))
        if result["success"]:
            st.success("Payment status updated.")
        for error in result["errors"]:
            st.error(error)
        if result["details"]:
            st.dataframe(pd.DataFrame(result["details"]), use_container_width=True, hide_index=True)


@st.fragment(run_every=30)
def _ledger_section():
    st.subheader("Failed trackings")
    try:
        records = fetch_failed_trackings_api()["data"] or []
    except ApiError as e:
        st.error(f"Could not load failed trackings: {e}")
        if st.button("🛠️ Create Failed Trackings sheet"):
            try:
                st.info(initialize_failed_trackings_api()["data"])
            except ApiError as init_error:
                st.error(str(init_error))
        return

    if not records:
        st.info("No failed trackings. 🎉")
        return

    df = sanitize_df(pd.DataFrame(records))
    show_resolved = st.toggle("Show resolved", value=False)
    if not show_resolved:
        df = df[df["status"] != "Resolved"]
    st.dataframe(df, use_container_width=True, hide_index=True)

    open_ids = [r["id"] for r in records if r["status"] != "Resolved"]
    if not open_ids:
        return
    c1, c2, c3 = st.columns([2, 1, 1])
    record_id = c1.selectbox(
        "Record", open_ids,
        format_func=lambda rid: next(r["tracking_id"] for r in records if r["id"] == rid),
    )
    if c2.button("🔁 Retry"):
        try:
            result = retry_failed_tracking_api(record_id)
            if result["success"]:
                st.success(result.get("data") or "Resolved")
            else:
                st.warning(result.get("error"))
        except ApiError as e:
            st.error(f"Retry failed: {e}")
    if c3.button("🗑️ Delete"):
        try:
            delete_failed_tracking_api(record_id)
            st.success("Record deleted")
        except ApiError as e:
            st.error(f"Delete failed: {e}")


def payments_page():
    st.title("💰 Payments")
    _upload_section()
    st.markdown("---")
    _ledger_section()
