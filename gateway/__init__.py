"""Message-handling pipeline - Module Exports"""

from .context import (
    InboundEvent,
    Platform,
    RequestContext,
    bind_logger,
    new_correlation_id,
)
from .dedup import RecentEventIds
from .dispatcher import ReplyDispatchError, ReplyDispatcher
from .executor import HandlerChainExecutor
from .registry import HandlerRegistry, HandlerSpec, RegistryError

__all__ = [
    # Context
    "Platform",
    "RequestContext",
    "InboundEvent",
    "bind_logger",
    "new_correlation_id",
    # Registry
    "HandlerRegistry",
    "HandlerSpec",
    "RegistryError",
    # Executor
    "HandlerChainExecutor",
    # Dispatcher
    "ReplyDispatcher",
    "ReplyDispatchError",
    # Dedup
    "RecentEventIds",
]
