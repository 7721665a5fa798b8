"""Echo handler: replies with whatever follows the echo command."""

import re
from typing import AsyncIterator

from gateway.context import RequestContext

from .base import MessageHandler

ECHO_PATTERN = re.compile(r"^/?echo\s+(.+)$", re.DOTALL)


class EchoMessageHandler(MessageHandler):
    """Matches `echo <text>` or `/echo <text>` and replies `<text>`."""

    @property
    def pattern(self) -> re.Pattern:
        return ECHO_PATTERN

    async def handle(
        self,
        ctx: RequestContext,
        text: str,
        match: re.Match,
    ) -> AsyncIterator[str]:
        yield match.group(1)
