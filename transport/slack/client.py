"""
Slack Web API Client

Only the bootstrap call the RTM session needs: rtm.connect, authenticated
with the bot token. Returns the websocket URL for one session.
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from .schemas import RtmConnectResponse

logger = logging.getLogger(__name__)

SLACK_API_BASE_URL = "https://slack.com/api"


class SlackApiError(Exception):
    """rtm.connect failed or returned ok=false."""
    pass


class SlackWebClient:
    """Thin httpx wrapper around the Slack Web API."""

    def __init__(
        self,
        bot_token: str,
        timeout: float = 10.0,
        base_url: str = SLACK_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {bot_token}"},
        )

    async def rtm_connect(self) -> str:
        """
        Ask Slack for a fresh RTM websocket URL.

        Returns:
            wss:// URL valid for a short time

        Raises:
            SlackApiError: Transport failure, non-2xx, or ok=false
        """
        try:
            response = await self._client.post("/rtm.connect")
        except httpx.RequestError as e:
            raise SlackApiError(f"rtm.connect request failed: {e}")

        if not response.is_success:
            raise SlackApiError(f"rtm.connect returned {response.status_code}")

        try:
            result = RtmConnectResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SlackApiError(f"rtm.connect returned an invalid body: {e}")

        if not result.ok or not result.url:
            raise SlackApiError(f"rtm.connect failed: {result.error or 'no url'}")

        logger.info(
            "Obtained Slack RTM URL",
            extra={"bot": (result.self_ or {}).get("name")},
        )
        return result.url

    async def aclose(self) -> None:
        await self._client.aclose()
