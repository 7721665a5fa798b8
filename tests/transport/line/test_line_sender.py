"""
LINE Reply Sender Tests

Uses httpx.MockTransport; no network.
"""

import json

import httpx
import pytest

from transport.line.sender import LineReplySender, LineSenderError


def make_sender(handler) -> LineReplySender:
    return LineReplySender(
        channel_token="test_channel_token",
        transport=httpx.MockTransport(handler),
    )


class TestLineReplySender:

    @pytest.mark.asyncio
    async def test_reply_request_shape(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        sender = make_sender(handler)
        assert await sender.reply("token-1", "안녕") is True
        await sender.aclose()

        request = seen[0]
        assert request.method == "POST"
        assert request.url == "https://api.line.me/v2/bot/message/reply"
        assert request.headers["Authorization"] == "Bearer test_channel_token"
        assert json.loads(request.content) == {
            "replyToken": "token-1",
            "messages": [{"type": "text", "text": "안녕"}],
        }

    @pytest.mark.asyncio
    async def test_rejected_reply_returns_false(self):
        sender = make_sender(
            lambda request: httpx.Response(400, json={"message": "Invalid reply token"})
        )
        assert await sender.reply("used-token", "hi") is False
        await sender.aclose()

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        sender = make_sender(handler)
        with pytest.raises(LineSenderError):
            await sender.reply("token", "hi")
        await sender.aclose()

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        sender = make_sender(handler)
        with pytest.raises(LineSenderError):
            await sender.reply("token", "hi")
        await sender.aclose()
