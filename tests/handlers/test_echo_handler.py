"""
Built-in Handler Tests

Echo and ping handlers, run through the executor chain so matching uses
the same fullmatch rule as production.
"""

import pytest

from gateway.context import Platform, RequestContext
from gateway.executor import HandlerChainExecutor
from gateway.registry import HandlerRegistry
from handlers import EchoMessageHandler, PingMessageHandler
from infra.bootstrap import default_registry


async def replies_for(text: str, registry=None) -> list[str]:
    executor = HandlerChainExecutor(registry or default_registry())
    ctx = RequestContext(platform=Platform.LINE, reply_target="token", text=text)
    return [reply async for reply in executor.dispatch(ctx, text)]


class TestEchoHandler:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("echo Hello", "Hello"),
            ("/echo Hello", "Hello"),
            ("/echo   Hello", "Hello"),
            ("/echo 안녕하세요", "안녕하세요"),
            ("/echo こんにちは", "こんにちは"),
            ("/echo Hello Hello", "Hello Hello"),
            ("/echo Hello\nHello", "Hello\nHello"),
        ],
    )
    async def test_echoes_argument(self, text, expected):
        assert await replies_for(text) == [expected]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["eko Hello", "/eko Hello", "echo", "/echo ", "say echo hi"])
    async def test_non_matching_text(self, text):
        assert await replies_for(text) == []

    def test_pattern_is_compiled(self):
        handler = EchoMessageHandler()
        assert handler.pattern.fullmatch("echo hi").group(1) == "hi"
        assert "EchoMessageHandler" in repr(handler)


class TestPingHandler:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["ping", "/ping", "PING"])
    async def test_replies_pong(self, text):
        assert await replies_for(text) == ["PONG"]

    @pytest.mark.asyncio
    async def test_ping_with_trailing_text_does_not_match(self):
        assert await replies_for("ping me") == []

    @pytest.mark.asyncio
    async def test_handlers_compose_in_order(self):
        registry = HandlerRegistry([EchoMessageHandler(), PingMessageHandler()])
        assert await replies_for("echo ping", registry) == ["ping"]
