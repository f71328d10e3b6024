import os

import structlog
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

logger = structlog.get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def load_credentials(credentials_path: str, token_path: str, oauth_port: int) -> Credentials:
    """
    Get Google Calendar credentials for the installation's account.

    A cached token is reused and refreshed when expired. Without a usable
    token the OAuth consent flow runs once in the browser, with a local
    redirect server on `oauth_port`. The resulting token is cached at
    `token_path` so later runs never prompt again.

    Args:
        credentials_path: OAuth client secrets JSON from Google Cloud
        token_path: File where the authorized user token is cached
        oauth_port: Local port receiving the OAuth redirect

    Returns:
        Credentials: Valid credentials for the Calendar API

    Raises:
        FileNotFoundError: If credentials_path does not exist and no token is cached
    """
    creds = None

    if os.path.exists(token_path):
        creds = Credentials.from_authorized_user_file(token_path, SCOPES)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            logger.info("google_token_refreshed")
        except Exception as e:
            logger.warning("google_token_refresh_failed", error=str(e))
            creds = None
    else:
        creds = None

    if creds is None:
        if not os.path.exists(credentials_path):
            raise FileNotFoundError(f"Google credentials file not found: {credentials_path}")
        logger.info("google_consent_flow_started", port=oauth_port)
        flow = InstalledAppFlow.from_client_secrets_file(credentials_path, SCOPES)
        creds = flow.run_local_server(port=oauth_port)

    os.makedirs(os.path.dirname(token_path) or ".", exist_ok=True)
    with open(token_path, "w") as token:
        token.write(creds.to_json())

    return creds
