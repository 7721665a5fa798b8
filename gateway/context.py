"""
Request Context

PURE DATA - NO I/O

Defines the platform tag, the normalized inbound event and the per-request
context that travels with every asynchronous hop of the pipeline.
The executor never interprets reply_target; only the reply dispatcher of the
matching platform does.
"""

import logging
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, MutableMapping, Optional


class Platform(str, Enum):
    """Ingress source of an inbound message."""

    LINE = "line"  # webhook, reply_target is a single-use reply token
    SLACK = "slack"  # RTM socket, reply_target is a channel id


def new_correlation_id() -> str:
    """Random 64-bit correlation id rendered as hex."""
    return format(secrets.randbits(64), "x")


@dataclass(frozen=True)
class RequestContext:
    """
    Immutable carrier for one inbound event.

    Lifetime is a single inbound event. It is passed explicitly through
    every hop (executor, handlers, reply dispatcher) and never stored.
    """

    platform: Platform
    reply_target: str
    text: str
    correlation_id: str = field(default_factory=new_correlation_id)


@dataclass(frozen=True)
class InboundEvent:
    """Provider event after decoding, before a context is attached."""

    platform: Platform
    reply_target: str
    text: str
    event_id: Optional[str] = None  # provider delivery id, used for dedup
    redelivery: bool = False

    def to_context(self) -> RequestContext:
        return RequestContext(
            platform=self.platform,
            reply_target=self.reply_target,
            text=self.text,
        )


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Prefixes records with the correlation id of the bound context."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"[{self.extra['correlation_id']}] {msg}", kwargs


def bind_logger(logger: logging.Logger, ctx: RequestContext) -> ContextLoggerAdapter:
    """Bind a logger to ctx for the duration of one dispatch."""
    return ContextLoggerAdapter(
        logger,
        {"correlation_id": ctx.correlation_id, "platform": ctx.platform.value},
    )
