"""
Credential Manager for the Drive to YouTube relay
Owns the single stored OAuth credential and hands out usable access tokens
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Callable

from google.oauth2.credentials import Credentials

from config import GoogleOAuthConfig
from errors import (
    RelayError,
    NotAuthorized,
    RefreshUnavailable,
    RefreshFailed,
    describe_error,
)
from .oauth_flow import TokenGrant
from .token_storage import CredentialRecord

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialManager:
    """
    Guarantees callers a non-expired access token

    Features:
    - Refresh before expiry using a safety margin
    - Refresh token survives refreshes and re-authorizations that omit it
    - Single-flight refresh: concurrent callers share one exchange
    """

    def __init__(
        self,
        storage,
        provider,
        oauth_config: Optional[GoogleOAuthConfig] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize Credential Manager

        Args:
            storage: Record store with get(user_id) / put(record)
            provider: Authorization provider with exchange_code() / refresh()
            oauth_config: OAuth settings (user key, margin, default lifetime)
            clock: Returns the current timezone-aware UTC time
        """
        self.storage = storage
        self.provider = provider
        self.oauth_config = oauth_config or GoogleOAuthConfig()
        self.clock = clock

        self.user_id = self.oauth_config.user_id
        self.margin = timedelta(seconds=self.oauth_config.refresh_margin_seconds)
        self.default_lifetime = timedelta(
            seconds=self.oauth_config.default_token_lifetime_seconds
        )

        self._refresh_lock = asyncio.Lock()

    def _load(self) -> CredentialRecord:
        record = self.storage.get(self.user_id)
        if record is None:
            raise NotAuthorized()
        return record

    def _needs_refresh(self, record: CredentialRecord) -> bool:
        return self.clock() >= record.expiry - self.margin

    async def acquire_token(self) -> str:
        """
        Return a usable access token, refreshing it first when necessary

        Raises:
            NotAuthorized: no credential stored
            RefreshUnavailable: expired and no refresh token
            RefreshFailed: the refresh exchange failed; record left unchanged
        """
        record = self._load()
        if not self._needs_refresh(record):
            return record.access_token

        if not record.refresh_token:
            raise RefreshUnavailable()

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            record = self._load()
            if not self._needs_refresh(record):
                return record.access_token
            if not record.refresh_token:
                raise RefreshUnavailable()

            return await self._refresh(record)

    async def _refresh(self, record: CredentialRecord) -> str:
        logger.info("Access token expired or expiring soon, refreshing...")
        try:
            grant: TokenGrant = await asyncio.to_thread(
                self.provider.refresh, record.refresh_token
            )
        except RelayError:
            logger.error("❌ Token refresh failed")
            raise
        except Exception as e:
            logger.error(f"❌ Token refresh failed: {describe_error(e)}")
            raise RefreshFailed(describe_error(e)) from e

        if not grant.access_token:
            raise RefreshFailed("Refresh returned no access token")

        updated = CredentialRecord(
            user_id=self.user_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token or record.refresh_token,
            expiry=grant.expiry or self.clock() + self.default_lifetime,
        )
        self.storage.put(updated)
        logger.info("✅ Token refreshed")
        return updated.access_token

    def store_credential(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        expiry: Optional[datetime] = None
    ) -> CredentialRecord:
        """
        Upsert the singleton credential after a successful authorization

        A missing refresh_token keeps the one already stored. A missing expiry
        defaults to one hour from now.
        """
        if not access_token:
            raise NotAuthorized("No access token received")

        previous = self.storage.get(self.user_id)
        if not refresh_token and previous is not None:
            refresh_token = previous.refresh_token

        if expiry is not None and expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)

        record = CredentialRecord(
            user_id=self.user_id,
            access_token=access_token,
            refresh_token=refresh_token or None,
            expiry=expiry or self.clock() + self.default_lifetime,
        )
        self.storage.put(record)
        logger.info("✅ Credentials stored")
        return record

    async def complete_authorization(self, code: str) -> CredentialRecord:
        """Exchange a consent callback code and store the resulting tokens"""
        grant: TokenGrant = await asyncio.to_thread(self.provider.exchange_code, code)
        return self.store_credential(
            grant.access_token,
            refresh_token=grant.refresh_token,
            expiry=grant.expiry,
        )

    async def get_credentials(self) -> Credentials:
        """
        Authenticated handle for googleapiclient services

        The handle carries only the access token; refreshing stays here.
        """
        return Credentials(token=await self.acquire_token())

    def get_token_info(self) -> Dict[str, Any]:
        """
        Get current token information

        Returns:
            Dictionary with token status and metadata (never token values)
        """
        record = self.storage.get(self.user_id)
        if record is None:
            return {
                'authenticated': False,
                'message': 'No credentials available'
            }

        now = self.clock()
        return {
            'authenticated': True,
            'expired': now >= record.expiry - self.margin,
            'has_refresh_token': bool(record.refresh_token),
            'expiry': record.expiry.isoformat(),
            'time_until_expiry_seconds': (record.expiry - now).total_seconds(),
        }
