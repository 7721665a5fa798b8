"""
LINE Reply Sender

Sends handler replies back to LINE through the reply-token API.
No formatting intelligence. No retries. No logic.
"""

import logging
from typing import Optional

import httpx

from .schemas import LineReplyRequest, LineTextMessage

logger = logging.getLogger(__name__)

LINE_API_BASE_URL = "https://api.line.me"
REPLY_PATH = "/v2/bot/message/reply"


class LineSenderError(Exception):
    """Failed to reach the LINE reply API."""
    pass


class LineReplySender:
    """
    Reply-token egress for LINE.

    One instance owns one httpx.AsyncClient for the lifetime of the app.
    Reply tokens are single-use: nothing here retries.
    """

    def __init__(
        self,
        channel_token: str,
        timeout: float = 10.0,
        base_url: str = LINE_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {channel_token}",
                "Content-Type": "application/json",
            },
        )

    async def reply(self, reply_token: str, text: str) -> bool:
        """
        Send one text reply.

        If LINE answers non-2xx → log and return False (reply discarded).

        Args:
            reply_token: Token from the originating webhook event
            text: Reply text

        Returns:
            True if LINE accepted the reply

        Raises:
            LineSenderError: Network error or timeout
        """

        body = LineReplyRequest(
            reply_token=reply_token,
            messages=[LineTextMessage(text=text)],
        ).model_dump(by_alias=True)

        try:
            response = await self._client.post(REPLY_PATH, json=body)
        except httpx.RequestError as e:
            logger.error(
                f"LINE reply request failed: {e}",
                extra={"error": str(e)},
            )
            raise LineSenderError(f"HTTP request failed: {e}")

        if not response.is_success:
            logger.error(
                f"LINE API error: {response.status_code} - {response.text}",
                extra={
                    "status_code": response.status_code,
                    "error_body": response.text,
                },
            )
            return False

        logger.debug("Reply accepted by LINE", extra={"reply_length": len(text)})
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
