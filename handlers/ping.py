"""Ping handler: liveness check from chat."""

import re
from typing import AsyncIterator

from gateway.context import RequestContext

from .base import MessageHandler

PING_PATTERN = re.compile(r"^/?ping$", re.IGNORECASE)


class PingMessageHandler(MessageHandler):

    @property
    def pattern(self) -> re.Pattern:
        return PING_PATTERN

    async def handle(
        self,
        ctx: RequestContext,
        text: str,
        match: re.Match,
    ) -> AsyncIterator[str]:
        yield "PONG"
