"""
Google OAuth 2.0 authentication for Streamlit.
The operator's access token is kept in session state and forwarded to the
backend, which uses it for every Google Sheets write.
"""
import os
import streamlit as st
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
import logging

logger = logging.getLogger(__name__)

# OAuth 2.0 configuration
SCOPES = [
    'openid',
    'https://www.googleapis.com/auth/userinfo.email',
    'https://www.googleapis.com/auth/userinfo.profile',
    'https://www.googleapis.com/auth/spreadsheets',
]

# Comma separated list of operator emails allowed to sign in (empty = anyone)
ALLOWED_EMAILS = [
    e.strip().lower() for e in os.getenv("ALLOWED_EMAILS", "").split(",") if e.strip()
]

# OAuth credentials
CLIENT_ID = os.getenv("GOOGLE_OAUTH_CLIENT_ID")
CLIENT_SECRET = os.getenv("GOOGLE_OAUTH_CLIENT_SECRET")
REDIRECT_URI = os.getenv("GOOGLE_OAUTH_REDIRECT_URI", "http://localhost:8501")


def get_oauth_flow():
    """
    Create and return a Google OAuth Flow object.
    """
    if not CLIENT_ID or not CLIENT_SECRET:
        raise ValueError(
            "Missing OAuth credentials. Please set GOOGLE_OAUTH_CLIENT_ID and "
            "GOOGLE_OAUTH_CLIENT_SECRET environment variables."
        )

    client_config = {
        "web": {
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [REDIRECT_URI]
        }
    }

    return Flow.from_client_config(client_config, scopes=SCOPES, redirect_uri=REDIRECT_URI)


def get_authorization_url():
    """
    Generate the Google OAuth authorization URL.

    Returns:
        tuple: (authorization_url, state)
    """
    try:
        flow = get_oauth_flow()
        authorization_url, state = flow.authorization_url(
            access_type='online',
            include_granted_scopes='true',
            prompt='select_account'
        )
        return authorization_url, state
    except Exception as e:
        logger.error(f"Error generating authorization URL: {e}")
        return None, None


def is_email_allowed(email):
    return not ALLOWED_EMAILS or email.lower() in ALLOWED_EMAILS


def exchange_code_for_token(code):
    """
    Exchange the authorization code for an access token.

    Returns:
        dict with email, name, picture, access_token and authenticated, or None
    """
    try:
        flow = get_oauth_flow()
        flow.fetch_token(code=code)
    except Exception as e:
        logger.error(f"Flow fetch_token failed: {e}")
        return None

    credentials = flow.credentials
    user_info = get_user_info(credentials)
    if not user_info:
        return None

    email = user_info.get('email', '').lower()
    if not is_email_allowed(email):
        logger.warning(f"Login attempt from unauthorized account: {email}")
        return None

    return {
        'email': email,
        'name': user_info.get('name', ''),
        'picture': user_info.get('picture', ''),
        'access_token': credentials.token,
        'authenticated': True
    }


def get_user_info(credentials):
    try:
        service = build('oauth2', 'v2', credentials=credentials)
        return service.userinfo().get().execute()
    except Exception as e:
        logger.error(f"Error getting user info: {e}")
        return None


def initialize_oauth_session():
    """
    Initialize OAuth-related session state variables.
    """
    if 'user_info' not in st.session_state:
        st.session_state.user_info = None
    if 'authenticated' not in st.session_state:
        st.session_state.authenticated = False
    if 'access_token' not in st.session_state:
        st.session_state.access_token = None


def is_oauth_configured():
    return bool(CLIENT_ID and CLIENT_SECRET)
