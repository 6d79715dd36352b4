import os
from google_auth_oauthlib.flow import Flow
from .config import settings
from .models import OAuthCredentials

# Google may grant the scopes under different names than requested
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")


def create_flow(credentials: OAuthCredentials) -> Flow:
    client_config = {
        "web": {
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "auth_uri": settings.AUTH_URI,
            "token_uri": settings.TOKEN_URI,
        }
    }

    flow = Flow.from_client_config(
        client_config,
        scopes=settings.SCOPES
    )
    flow.redirect_uri = settings.REDIRECT_URI
    return flow


def build_authorization_url(flow: Flow) -> str:
    """Offline access with forced consent, so Google always issues a new refresh token."""
    authorization_url, _state = flow.authorization_url(
        access_type='offline',
        prompt='consent'
    )
    return authorization_url


def exchange_code(flow: Flow, code: str) -> str:
    """Trades an authorization code for tokens and returns the refresh token."""
    flow.fetch_token(code=code)
    refresh_token = flow.credentials.refresh_token
    if not refresh_token:
        raise ValueError("No refresh token returned, revoke the app's access and try again")
    return refresh_token
