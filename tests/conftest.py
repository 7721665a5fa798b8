"""Pytest configuration and fixtures."""

import asyncio
import json
import sys
import time
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from gateway.context import Platform, RequestContext  # noqa: E402
from infra.config import GatewayConfig  # noqa: E402
from transport.slack.client import SlackApiError  # noqa: E402

CHANNEL_SECRET = "test_channel_secret"


def make_config(**overrides) -> GatewayConfig:
    values = dict(
        line_channel_secret=CHANNEL_SECRET,
        line_channel_token="test_channel_token",
        slack_bot_token="xoxb-test",
        slack_rtm_enabled=False,
        executor_workers=2,
        webhook_await_dispatch_start=False,
    )
    values.update(overrides)
    return GatewayConfig(**values)


@pytest.fixture
def config() -> GatewayConfig:
    return make_config()


@pytest.fixture
def line_ctx() -> RequestContext:
    return RequestContext(platform=Platform.LINE, reply_target="aReplyToken", text="ping")


@pytest.fixture
def slack_ctx() -> RequestContext:
    return RequestContext(platform=Platform.SLACK, reply_target="C123", text="ping")


async def _eventually(predicate, timeout: float = 2.0, interval: float = 0.005):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


def _eventually_sync(predicate, timeout: float = 2.0, interval: float = 0.01):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(interval)


@pytest.fixture
def eventually():
    """Await until predicate() is true or fail."""
    return _eventually


@pytest.fixture
def eventually_sync():
    """Block until predicate() is true or fail (for TestClient tests)."""
    return _eventually_sync


@pytest.fixture
def config_factory():
    """Build a GatewayConfig with test defaults and keyword overrides."""
    return make_config


# ============================================================================
# SLACK RTM FAKES
# ============================================================================

_CLOSED = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, url: str):
        self.url = url
        self.incoming: asyncio.Queue = asyncio.Queue()
        self.sent: list[dict] = []
        self.close_calls: list[tuple] = []
        self.close_code = None
        self.close_reason = None
        self.fail_writes = False
        self.send_delay = 0.0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def __aiter__(self):
        while True:
            frame = await self.incoming.get()
            if frame is _CLOSED:
                return
            yield frame

    def feed(self, frame) -> None:
        self.incoming.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def drop(self, code: int, reason: str = "") -> None:
        """Close initiated by the server."""
        self.close_code = code
        self.close_reason = reason
        self.incoming.put_nowait(_CLOSED)

    async def send(self, data: str) -> None:
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_writes:
            raise OSError("broken pipe")
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))
        if self.close_code is None:
            self.drop(code, reason)


class FakeConnector:
    def __init__(self):
        self.sockets: list[FakeWebSocket] = []

    def __call__(self, url: str) -> FakeWebSocket:
        ws = FakeWebSocket(url)
        self.sockets.append(ws)
        return ws

    @property
    def current(self) -> FakeWebSocket:
        return self.sockets[-1]


class FakeSlackClient:
    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures

    async def rtm_connect(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise SlackApiError("rtm.connect failed: ratelimited")
        return f"wss://example.test/rtm/{self.calls}"

    async def aclose(self) -> None:
        pass


