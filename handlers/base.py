"""
Message Handler Contract

A handler is a compiled pattern plus an async generator of replies.
Handlers hold no conversation state; the only side effect they may cause
is the replies they yield.
"""

import re
from abc import ABC, abstractmethod
from typing import AsyncIterator

from gateway.context import RequestContext


class MessageHandler(ABC):
    """Base class for all message handlers."""

    @property
    @abstractmethod
    def pattern(self) -> re.Pattern:
        """Compiled regex, tested with fullmatch against the whole text."""
        pass

    @abstractmethod
    def handle(
        self,
        ctx: RequestContext,
        text: str,
        match: re.Match,
    ) -> AsyncIterator[str]:
        """
        Produce replies for a matched text.

        Args:
            ctx: Context of the inbound event
            text: Full inbound text
            match: Result of pattern.fullmatch(text)

        Returns:
            Finite, possibly empty, async iterator of reply strings
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(pattern={self.pattern.pattern!r})"
