"""
Handler Registry

Ordered, read-only list of (pattern, handle) pairs.
Constructed once at startup; registry order is the reply order within
one inbound event. Safe for concurrent readers without locking.
"""

import logging
import re
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Iterable

from .context import RequestContext

logger = logging.getLogger(__name__)

HandleFn = Callable[[RequestContext, str, re.Match], AsyncIterator[str]]


class RegistryError(Exception):
    """Registry could not be constructed."""
    pass


@dataclass(frozen=True)
class HandlerSpec:
    """A compiled anchored pattern and the function invoked on a full match."""

    pattern: re.Pattern
    handle: HandleFn
    name: str = ""


class HandlerRegistry:
    """
    Holds the ordered handler chain.

    Accepts anything exposing `pattern` and `handle` (see
    handlers.base.MessageHandler) or ready-made HandlerSpec instances.

    Raises:
        RegistryError: A handler has no compiled pattern or no handle function
    """

    def __init__(self, handlers: Iterable):
        specs = []
        for handler in handlers:
            spec = handler if isinstance(handler, HandlerSpec) else self._to_spec(handler)
            if not isinstance(spec.pattern, re.Pattern):
                raise RegistryError(
                    f"Handler {spec.name or spec!r} must expose a compiled regex pattern"
                )
            if not callable(spec.handle):
                raise RegistryError(f"Handler {spec.name} has no callable handle")
            specs.append(spec)

        self._specs = tuple(specs)
        logger.info(
            f"Handler registry built with {len(self._specs)} handler(s)",
            extra={"handlers": [s.name for s in self._specs]},
        )

    @staticmethod
    def _to_spec(handler) -> HandlerSpec:
        try:
            return HandlerSpec(
                pattern=handler.pattern,
                handle=handler.handle,
                name=type(handler).__name__,
            )
        except AttributeError as e:
            raise RegistryError(f"Invalid handler {handler!r}: {e}")

    def handlers(self) -> tuple[HandlerSpec, ...]:
        """Handler chain in registry order."""
        return self._specs

    def __len__(self) -> int:
        return len(self._specs)
