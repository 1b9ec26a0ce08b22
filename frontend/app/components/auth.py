"""
Authentication components for Streamlit UI.
Google sign-in yields the access token the backend uses for sheet writes;
the local admin login only gives read access through the backend API key.
"""
import streamlit as st
import os
import json
import time
import logging

from utils.google_oauth import (
    get_authorization_url,
    exchange_code_for_token,
    initialize_oauth_session,
    is_oauth_configured,
    ALLOWED_EMAILS,
    REDIRECT_URI,
)

logger = logging.getLogger(__name__)

# Read-only fallback for local development
SUPERUSER_USERNAME = os.getenv("SUPERUSER_USERNAME", "admin")
SUPERUSER_PASSWORD = os.getenv("SUPERUSER_PASSWORD", "admin")

SESSION_CACHE_FILE = ".auth_session.json"
SESSION_DURATION = 55 * 60  # Google access tokens live for an hour


def save_auth_session(user_info):
    """Save authentication session to a local file."""
    data = {
        "user_info": user_info,
        "expiry": time.time() + SESSION_DURATION
    }
    try:
        with open(SESSION_CACHE_FILE, "w") as f:
            json.dump(data, f)
    except OSError as e:
        logger.error(f"Failed to save auth session: {e}")


def load_auth_session():
    """Load authentication session from a local file if valid."""
    if not os.path.exists(SESSION_CACHE_FILE):
        return None

    try:
        with open(SESSION_CACHE_FILE, "r") as f:
            data = json.load(f)

        if time.time() < data.get("expiry", 0):
            return data.get("user_info")
        os.remove(SESSION_CACHE_FILE)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load auth session: {e}")
        if os.path.exists(SESSION_CACHE_FILE):
            os.remove(SESSION_CACHE_FILE)

    return None


def clear_auth_session():
    """Remove the auth session file."""
    if os.path.exists(SESSION_CACHE_FILE):
        os.remove(SESSION_CACHE_FILE)


def restore_session():
    """Put a cached login back into session state. Returns True when restored."""
    user_info = load_auth_session()
    if not user_info:
        return False
    st.session_state.user_info = user_info
    st.session_state.authenticated = True
    st.session_state.access_token = user_info.get("access_token")
    return True


def _sign_in(user_info):
    st.session_state.user_info = user_info
    st.session_state.authenticated = True
    st.session_state.access_token = user_info.get("access_token")
    save_auth_session(user_info)


def show_google_login_button():
    """
    Display Google SSO login button.
    """
    st.markdown("""
        <style>
        .google-btn {
            display: inline-flex;
            align-items: center;
            justify-content: center;
            background-color: white;
            color: #3c4043;
            border: 1px solid #dadce0;
            border-radius: 4px;
            padding: 12px 24px;
            font-size: 14px;
            font-weight: 500;
            text-decoration: none;
            width: 100%;
            box-shadow: 0 1px 2px 0 rgba(60,64,67,.30);
        }
        .google-btn:hover {
            background-color: #f8f9fa;
        }
        </style>
    """, unsafe_allow_html=True)

    # Reuse the URL across reruns so the stored state keeps matching
    if 'oauth_url' not in st.session_state or st.session_state.get('oauth_state') is None:
        auth_url, state = get_authorization_url()
        if auth_url and state:
            st.session_state.oauth_state = state
            st.session_state.oauth_url = auth_url
        else:
            st.error("Failed to generate Google login URL. Check your configuration.")
            return

    st.markdown(
        f'<a href="{st.session_state.oauth_url}" target="_self" class="google-btn">Sign in with Google</a>',
        unsafe_allow_html=True,
    )


def show_traditional_login_form():
    """
    Local admin login. Sessions opened this way carry no access token, so the
    backend rejects their writes.
    """
    with st.form("login_form"):
        username = st.text_input("Username", placeholder="Enter your username")
        password = st.text_input("Password", type="password", placeholder="Enter your password")
        submit = st.form_submit_button("Login (read only)", use_container_width=True)

        if submit:
            if username == SUPERUSER_USERNAME and password == SUPERUSER_PASSWORD:
                _sign_in({
                    'email': 'admin@local',
                    'name': 'Administrator',
                    'picture': '',
                    'access_token': None,
                    'authenticated': True
                })
                st.success("Login successful! Redirecting...")
                st.rerun()
            else:
                st.error("Invalid username or password")


def show_login_page():
    """
    Display the main login page with Google SSO or traditional login.
    """
    initialize_oauth_session()

    st.markdown("<br><br>", unsafe_allow_html=True)
    col1, col2, col3 = st.columns([1, 1, 1])

    with col2:
        st.markdown("### 🌿 HerbCey Admin")
        st.markdown("Please log in to manage orders")

        if is_oauth_configured():
            show_google_login_button()
            if ALLOWED_EMAILS:
                st.caption("Only registered operator accounts can sign in.")
            st.markdown("<hr style='margin: 20px 0;'>", unsafe_allow_html=True)
            with st.expander("Or use read-only login"):
                show_traditional_login_form()
        else:
            st.info("Google SSO is not configured. Sheets can be viewed but not edited.")
            show_traditional_login_form()


def handle_oauth_callback():
    """
    Handle the redirect back from Google.

    Returns:
        bool: True if a sign-in was completed, False otherwise
    """
    query_params = st.query_params
    if 'code' not in query_params:
        return False

    code = query_params['code']
    state = query_params.get('state')
    session_state = st.session_state.get('oauth_state')

    is_local = "localhost" in REDIRECT_URI or "127.0.0.1" in REDIRECT_URI
    # Session state is lost when the redirect lands in a fresh Streamlit session
    if session_state is not None and state != session_state and not is_local:
        logger.error(f"OAuth state mismatch: Received '{state}', Expected '{session_state}'")
        st.error("Invalid authentication state. Please try again.")
        st.query_params.clear()
        st.session_state.oauth_state = None
        st.session_state.oauth_url = None
        return False

    user_info = exchange_code_for_token(code)
    st.query_params.clear()
    if not user_info:
        st.error("Authentication failed. This Google account is not allowed to manage HerbCey.")
        return False

    _sign_in(user_info)
    st.success(f"Welcome, {user_info['name']}!")
    st.rerun()
    return True


def show_user_info_sidebar():
    """
    Display user information in the sidebar.
    """
    user_info = st.session_state.get('user_info')
    if not user_info:
        return

    with st.sidebar:
        st.markdown("---")
        if user_info.get('picture'):
            st.image(user_info['picture'], width=50)
        st.markdown(f"**{user_info.get('name', 'User')}**")
        st.markdown(f"<small>{user_info.get('email', '')}</small>", unsafe_allow_html=True)
        if not st.session_state.get('access_token'):
            st.caption("Read-only session")
        st.markdown("---")

        if st.button("🚪 Logout", use_container_width=True):
            for key in list(st.session_state.keys()):
                del st.session_state[key]
            clear_auth_session()
            st.rerun()
