"""
Gmail Delivery Service.

Sends raw email messages through the Gmail REST API using an OAuth2
refresh token.
"""

import logging
import time
from typing import Any, Dict, Optional

import aiohttp

from config import config

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
GMAIL_API_URL = "https://gmail.googleapis.com/gmail/v1"


class GmailError(Exception):
    """Raised when the Gmail or OAuth2 API rejects a request."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class GmailService:
    """
    Service for sending email via the Gmail API.

    Features:
    - Exchanges the refresh token for an access token on demand
    - Caches the access token until shortly before it expires
    - Raises GmailError with the API's message on rejection
    """

    # Refresh the access token this many seconds before it expires
    TOKEN_EXPIRY_MARGIN = 60

    def __init__(
        self,
        refresh_token: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        user_id: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize the Gmail service.

        Args:
            refresh_token: Long-lived OAuth2 refresh token
            client_id: OAuth2 client ID the token was issued to
            client_secret: OAuth2 client secret
            user_id: Gmail user to send as ("me" is the token owner)
            timeout: Request timeout in seconds
        """
        self.refresh_token = refresh_token or config.gmail.refresh_token
        self.client_id = client_id or config.gmail.client_id
        self.client_secret = client_secret or config.gmail.client_secret
        self.user_id = user_id or config.gmail.user_id
        self.timeout = timeout or config.gmail.timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    async def start(self) -> None:
        """Start the Gmail service."""
        logger.info("Starting Gmail service...")
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )

        if not self.refresh_token:
            logger.warning("Gmail refresh token is not configured")

        logger.info("Gmail service started")

    async def stop(self) -> None:
        """Stop the Gmail service."""
        logger.info("Stopping Gmail service...")

        if self._session:
            await self._session.close()
            self._session = None

        self._access_token = None
        self._token_expires_at = 0.0

    async def _get_access_token(self) -> str:
        """Return a valid access token, refreshing it if needed."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        if not self.refresh_token:
            raise GmailError("Gmail refresh token is not configured")

        async with self._session.post(
            TOKEN_URL,
            data={
                "grant_type": "refresh_token",
                "refresh_token": self.refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret
            }
        ) as response:
            data = await response.json(content_type=None) or {}

            if response.status != 200:
                message = (
                    data.get('error_description')
                    or data.get('error')
                    or f"HTTP {response.status}"
                )
                raise GmailError(f"Token refresh failed: {message}", response.status)

        self._access_token = data['access_token']
        expires_in = int(data.get('expires_in', 3600))
        self._token_expires_at = (
            time.monotonic() + expires_in - self.TOKEN_EXPIRY_MARGIN
        )

        logger.debug("Gmail access token refreshed")
        return self._access_token

    async def send_raw(self, raw: str) -> Dict[str, Any]:
        """
        Send an encoded message.

        Args:
            raw: URL-safe base64 encoded RFC 822 message

        Returns:
            The sent Message resource (id, threadId, labelIds)

        Raises:
            GmailError: If the API rejects the token refresh or the send
            aiohttp.ClientError: On network failure
        """
        if not self._session:
            raise GmailError("Gmail session not initialized")

        access_token = await self._get_access_token()

        async with self._session.post(
            f"{GMAIL_API_URL}/users/{self.user_id}/messages/send",
            json={"raw": raw},
            headers={"Authorization": f"Bearer {access_token}"}
        ) as response:
            data = await response.json(content_type=None) or {}

            if response.status == 401:
                # Token was revoked or expired early; refresh on next send
                self._access_token = None

            if response.status >= 300:
                error = data.get('error') if isinstance(data, dict) else None
                message = (
                    error.get('message') if isinstance(error, dict) else None
                ) or f"HTTP {response.status}"
                raise GmailError(message, response.status)

        logger.debug(f"Gmail message sent: {data.get('id')}")
        return data
