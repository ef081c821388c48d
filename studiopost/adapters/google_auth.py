"""
Google OAuth2 token handling (refresh-token grant and one-off consent flow).
"""

from typing import Any, Dict

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from ..domain.exceptions import AuthenticationError


class GoogleAuthenticator:
    """
    Obtains access tokens for Google APIs from a stored refresh token.

    The refresh token itself is acquired once, interactively:
    1. Build the consent URL and open it in a browser
    2. Google redirects to the redirect URI with a ``code`` parameter
    3. Exchange the code for tokens and keep the refresh token
    """

    AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

    # Calendar read access plus Business Profile management
    SCOPES = [
        "https://www.googleapis.com/auth/calendar.readonly",
        "https://www.googleapis.com/auth/business.manage",
    ]

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str = "",
        session: requests.Session | None = None
    ):
        """
        Initialize the authenticator.

        Args:
            client_id: OAuth client ID (Desktop app type)
            client_secret: OAuth client secret
            refresh_token: Long-lived refresh token, if already acquired
            session: Optional requests session used for token requests
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.session = session or requests.Session()
        self._credentials: Credentials | None = None
        self._flow: Flow | None = None

    def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Get a valid access token, reusing the one fetched earlier in this run.

        Raises:
            AuthenticationError: If no refresh token is set or the grant fails
        """
        if self._credentials and self._credentials.valid and not force_refresh:
            return self._credentials.token

        if not self.refresh_token:
            raise AuthenticationError(
                "No refresh token configured. Run `studiopost auth` to obtain one."
            )

        credentials = Credentials(
            token=None,
            refresh_token=self.refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=self.TOKEN_ENDPOINT,
        )

        try:
            credentials.refresh(Request(self.session))
        except (RefreshError, TransportError) as e:
            raise AuthenticationError(f"Authentication failed: {e}") from e

        self._credentials = credentials
        return credentials.token

    def build_authorization_url(self, redirect_uri: str) -> str:
        """
        Consent URL for the one-off authorization.

        ``access_type=offline`` makes Google issue a refresh token and
        ``prompt=consent`` makes it do so on every authorization, not only
        the first one.
        """
        self._flow = self._build_flow(redirect_uri)
        url, _state = self._flow.authorization_url(access_type="offline", prompt="consent")
        return url

    def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Uses the flow that built the consent URL, so its PKCE verifier
        matches the code.

        Returns:
            Token response including ``refresh_token``

        Raises:
            AuthenticationError: If the exchange fails or yields no refresh token
        """
        flow = self._flow
        if flow is None or flow.redirect_uri != redirect_uri:
            flow = self._build_flow(redirect_uri)

        try:
            result = dict(flow.fetch_token(code=code))
        except (OAuth2Error, requests.exceptions.RequestException) as e:
            raise AuthenticationError(f"Authentication failed: {e}") from e

        if not result.get("refresh_token"):
            raise AuthenticationError(
                "Token response did not contain a refresh token. "
                "Revoke the app's access and authorize again."
            )

        self.refresh_token = result["refresh_token"]
        self._credentials = flow.credentials
        return result

    def _build_flow(self, redirect_uri: str) -> Flow:
        client_config = {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.AUTH_ENDPOINT,
                "token_uri": self.TOKEN_ENDPOINT,
                "redirect_uris": [redirect_uri],
            }
        }
        return Flow.from_client_config(client_config, scopes=self.SCOPES, redirect_uri=redirect_uri)
