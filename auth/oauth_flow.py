"""
Google authorization server exchanges
Consent URL, one-time code exchange and refresh token exchange
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from config import GoogleOAuthConfig
from errors import NotAuthorized, NotConfigured, RefreshFailed

logger = logging.getLogger(__name__)


@dataclass
class TokenGrant:
    """Result of a code or refresh exchange"""

    access_token: str
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None


def _aware(expiry: Optional[datetime]) -> Optional[datetime]:
    # google-auth reports expiry as naive UTC
    if expiry is not None and expiry.tzinfo is None:
        return expiry.replace(tzinfo=timezone.utc)
    return expiry


class GoogleAuthorizationProvider:
    """
    Talks to Google's OAuth2 endpoints for a web client

    The consent URL always asks for offline access and forces the consent
    screen so Google issues a refresh token on every grant.
    """

    def __init__(self, oauth_config: GoogleOAuthConfig):
        self.oauth_config = oauth_config

    def _require_config(self) -> None:
        if not self.oauth_config.is_configured:
            raise NotConfigured()

    def _flow(self) -> Flow:
        self._require_config()
        return Flow.from_client_config(
            self.oauth_config.client_config(),
            scopes=self.oauth_config.scopes,
            redirect_uri=self.oauth_config.redirect_uri,
            # The exchange happens in a different request than the redirect
            autogenerate_code_verifier=False,
        )

    def build_authorization_url(self, state: Optional[str] = None) -> Tuple[str, str]:
        """
        Build the Google consent URL

        Args:
            state: Optional CSRF state; generated when omitted

        Returns:
            (authorization_url, state)
        """
        flow = self._flow()
        url, state = flow.authorization_url(
            access_type='offline',
            prompt='consent',
            state=state,
        )
        logger.info("Generated OAuth consent URL")
        return url, state

    def exchange_code(self, code: str) -> TokenGrant:
        """
        Exchange a one-time authorization code for tokens

        Raises:
            NotAuthorized: if the server rejects the code or returns no access token
        """
        flow = self._flow()
        try:
            flow.fetch_token(code=code)
        except OAuth2Error as e:
            logger.error(f"❌ Authorization code exchange failed: {e}")
            raise NotAuthorized(f"Authorization code exchange failed: {e.description or e}")

        creds = flow.credentials
        if not creds.token:
            raise NotAuthorized("No access token received")

        return TokenGrant(
            access_token=creds.token,
            refresh_token=creds.refresh_token,
            expiry=_aware(creds.expiry),
        )

    def refresh(self, refresh_token: str) -> TokenGrant:
        """
        Mint a new access token from a refresh token

        Raises:
            RefreshFailed: on rejection or network failure
        """
        self._require_config()
        creds = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=self.oauth_config.token_uri,
            client_id=self.oauth_config.client_id,
            client_secret=self.oauth_config.client_secret,
            scopes=self.oauth_config.scopes,
        )

        try:
            creds.refresh(Request())
        except google.auth.exceptions.RefreshError as e:
            raise RefreshFailed(f"Refresh token rejected: {e}")
        except google.auth.exceptions.TransportError as e:
            raise RefreshFailed(f"Could not reach authorization server: {e}")

        # Google usually omits refresh_token on refresh; pass on only what came back
        returned_refresh = creds.refresh_token if creds.refresh_token != refresh_token else None
        return TokenGrant(
            access_token=creds.token,
            refresh_token=returned_refresh,
            expiry=_aware(creds.expiry),
        )
