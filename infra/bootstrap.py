"""
Gateway initialization and bootstrap.

Builds every component from configuration, in dependency order:
  registry → LINE sender → reply dispatcher → executor → (Slack RTM session)

One instance per application; owned by the FastAPI app state.
"""

import logging
from typing import Optional

from gateway.dedup import RecentEventIds
from gateway.dispatcher import ReplyDispatcher
from gateway.executor import HandlerChainExecutor
from gateway.registry import HandlerRegistry
from handlers import EchoMessageHandler, PingMessageHandler
from transport.line.sender import LineReplySender
from transport.slack.client import SlackWebClient
from transport.slack.rtm import SlackRtmSession

from .config import GatewayConfig, get_config

logger = logging.getLogger(__name__)


def default_registry() -> HandlerRegistry:
    """Static handler composition. Order is reply order."""
    return HandlerRegistry([
        PingMessageHandler(),
        EchoMessageHandler(),
    ])


class GatewayBootstrap:
    """
    Owns the gateway components and their lifecycle.

    Shutdown order: drain executor → close RTM socket (1000) → stop
    keep-alive → close HTTP clients.
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        registry: Optional[HandlerRegistry] = None,
        slack_client=None,
        rtm_connect=None,
        line_transport=None,
    ):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.registry = registry or default_registry()
        self.recent_events = RecentEventIds()

        self.line_sender = LineReplySender(
            channel_token=self.config.line_channel_token,
            timeout=self.config.reply_timeout_seconds,
            transport=line_transport,
        )
        self.dispatcher = ReplyDispatcher(line_sender=self.line_sender)
        self.executor = HandlerChainExecutor(
            registry=self.registry,
            dispatcher=self.dispatcher,
            workers=self.config.executor_workers,
        )

        self.slack_client = None
        self.rtm_session: Optional[SlackRtmSession] = None
        if self.config.slack_rtm_enabled:
            self.slack_client = slack_client or SlackWebClient(
                bot_token=self.config.slack_bot_token,
                timeout=self.config.reply_timeout_seconds,
            )
            self.rtm_session = SlackRtmSession(
                client=self.slack_client,
                submit=self.executor.submit,
                ping_interval=self.config.rtm_ping_interval_seconds,
                ping_initial_delay=self.config.rtm_ping_initial_delay_seconds,
                write_timeout=self.config.reply_timeout_seconds,
                backoff_base=self.config.rtm_backoff_base_seconds,
                backoff_max=self.config.rtm_backoff_max_seconds,
                connect=rtm_connect,
            )
            self.dispatcher.bind_rtm(self.rtm_session)

    async def start(self) -> None:
        await self.executor.start()
        if self.rtm_session is not None:
            await self.rtm_session.start()
        logger.info(f"Gateway started: {self!r}")

    async def stop(self) -> None:
        await self.executor.shutdown(drain_timeout=self.config.reply_timeout_seconds * 3)
        if self.rtm_session is not None:
            await self.rtm_session.close()
        await self.line_sender.aclose()
        if self.slack_client is not None:
            await self.slack_client.aclose()
        logger.info("Gateway stopped")

    def __repr__(self) -> str:
        """String representation showing configured components."""
        return (
            f"GatewayBootstrap(handlers={len(self.registry)}, "
            f"workers={self.config.executor_workers}, "
            f"rtm={'enabled' if self.rtm_session is not None else 'disabled'})"
        )
