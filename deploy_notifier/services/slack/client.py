"""
Slack Web API client for validating credentials and posting/updating messages.

Docs:
 - https://api.slack.com/methods/auth.test
 - https://api.slack.com/methods/chat.postMessage
 - https://api.slack.com/methods/chat.update
"""

import logging
from typing import Any, Dict, Optional

import httpx

from common.config.config import SLACK_API_URL, SLACK_TIMEOUT
from common.exception.exceptions import AuthError, SlackAPIError, TransportError

logger = logging.getLogger(__name__)


class SlackAPIClient:
    """Client for the Slack Web API with a reusable HTTP connection."""

    def __init__(
        self,
        token: str,
        base_url: str = SLACK_API_URL,
        timeout: float = SLACK_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Slack API client.

        Args:
            token: Slack bot token
            base_url: Slack API base URL (defaults to config)
            timeout: Request timeout in seconds
            http_client: Pre-configured httpx client (created if not provided)
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0)
        )

    async def __aenter__(self) -> "SlackAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json; charset=utf-8",
        }

    async def call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Call a Slack Web API method.

        Args:
            method: API method name (e.g. ``chat.update``)
            payload: JSON body

        Returns:
            Parsed response body (``ok`` may still be false)

        Raises:
            TransportError: If the request fails or Slack answers with a non-2xx status
        """
        url = f"{self.base_url}/{method}"

        try:
            response = await self._client.post(url, json=payload, headers=self._get_headers())
        except httpx.RequestError as e:
            error_msg = f"Slack API request error: {e}"
            logger.error(error_msg)
            raise TransportError(error_msg) from e

        if response.status_code >= 400:
            error_msg = f"Slack API request failed (status {response.status_code}): {response.text}"
            logger.error(error_msg)
            raise TransportError(error_msg)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Slack API returned invalid JSON for {method}") from e

        logger.debug(f"Slack API {method} request completed (ok={data.get('ok')})")
        return data

    async def validate_credentials(self, channel: str) -> None:
        """Ensure the token can connect and has access.

        Raises:
            AuthError: If Slack rejects the credentials
        """
        data = await self.call("auth.test", {"channel": channel})
        if not data.get("ok"):
            raise AuthError(data.get("error") or "Slack credentials invalid")

    async def post_message(self, channel: str, message: Dict[str, Any]) -> str:
        """Send a message.

        Args:
            channel: Channel ID or name
            message: Message body (blocks, attachments, ...)

        Returns:
            Message timestamp (``ts``) identifying the message for updates

        Raises:
            SlackAPIError: If Slack answers with ``ok: false``
        """
        data = await self.call("chat.postMessage", {"channel": channel, **message})
        if not data.get("ok"):
            raise SlackAPIError(data.get("error"))
        return data["ts"]

    async def update_message(self, channel: str, ts: str, message: Dict[str, Any]) -> None:
        """Update the message identified by ``ts``.

        Raises:
            SlackAPIError: If Slack answers with ``ok: false``
        """
        data = await self.call("chat.update", {"ts": ts, "channel": channel, **message})
        if not data.get("ok"):
            raise SlackAPIError(data.get("error"))
