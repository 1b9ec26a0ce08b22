import streamlit as st
import logging
from dotenv import load_dotenv

load_dotenv()

from components.auth import (
    handle_oauth_callback,
    restore_session,
    show_login_page,
    show_user_info_sidebar,
)
from pages.orders import orders_page
from pages.payments import payments_page
from pages.management import management_page
from pages.analytics import analytics_page

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

st.set_page_config(page_title="HerbCey Admin", page_icon="🌿", layout="wide")

# Custom CSS
st.markdown("""
    <style>
    .main { padding: 2rem; }
    .stButton>button {
        width: 100%;
        background-color: #2E7D32;
        color: white;
        font-weight: 600;
        padding: 0.75rem 1rem;
        border-radius: 8px;
        border: none;
        transition: all 0.3s ease;
    }
    .stButton>button:hover {
        background-color: #1B5E20;
        box-shadow: 0 4px 12px rgba(46, 125, 50, 0.3);
    }
    h1 { color: #2E7D32; font-weight: 700; }
    </style>
""", unsafe_allow_html=True)


def main():
    if not st.session_state.get("authenticated"):
        if handle_oauth_callback() or restore_session():
            st.rerun()
        show_login_page()
        return

    show_user_info_sidebar()

    pages = [
        st.Page(orders_page, title="Orders", icon="📦", default=True),
        st.Page(payments_page, title="Payments", icon="💰", url_path="payments"),
        st.Page(management_page, title="Management", icon="🗄️", url_path="management"),
        st.Page(analytics_page, title="Analytics", icon="📈", url_path="analytics"),
    ]
    pg = st.navigation(pages)
    pg.run()


if __name__ == "__main__":
    main()
