"""
OAuth2 credential handling for the Calendar API and Gmail SMTP.
"""

import logging

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .errors import AuthError

logger = logging.getLogger(__name__)

TOKEN_URI = 'https://oauth2.googleapis.com/token'

# Calendar is read-only; SMTP XOAUTH2 requires the full mail scope.
SCOPES = [
    'https://www.googleapis.com/auth/calendar.readonly',
    'https://mail.google.com/',
]


class CredentialContext:
    def __init__(self, client_id: str, client_secret: str, redirect_uri: str,
                 refresh_token: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=TOKEN_URI,
            client_id=client_id,
            client_secret=client_secret,
            scopes=SCOPES,
        )

    @classmethod
    def from_settings(cls, settings) -> 'CredentialContext':
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            refresh_token=settings.refresh_token,
        )

    def get_access_token(self) -> str:
        """Return a valid access token, refreshing it if needed."""
        if not self.credentials.valid:
            try:
                self.credentials.refresh(Request())
            except RefreshError as error:
                raise AuthError(f"Refresh token rejected: {error}") from error
            except TransportError as error:
                raise AuthError(f"Identity provider unreachable: {error}") from error
            logger.debug("Access token refreshed")
        return self.credentials.token

    def xoauth2_string(self, user: str) -> str:
        """SASL XOAUTH2 initial response for an SMTP login as ``user``."""
        token = self.get_access_token()
        return f"user={user}\x01auth=Bearer {token}\x01\x01"


def obtain_refresh_token(client_id: str, client_secret: str, redirect_uri: str = 'http://localhost',
                         port: int = 8081) -> str:
    """Run the installed-app consent flow and return a long-lived refresh token."""
    client_config = {
        'installed': {
            'client_id': client_id,
            'client_secret': client_secret,
            'auth_uri': 'https://accounts.google.com/o/oauth2/auth',
            'token_uri': TOKEN_URI,
            'redirect_uris': [redirect_uri],
        }
    }
    flow = InstalledAppFlow.from_client_config(client_config, SCOPES)
    creds = flow.run_local_server(
        port=port,
        timeout_seconds=300,
        access_type='offline',
        prompt='consent',
    )
    if not creds or not creds.refresh_token:
        raise AuthError("Consent flow finished without a refresh token")
    return creds.refresh_token
