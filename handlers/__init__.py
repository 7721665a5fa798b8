"""Message handlers - Module Exports"""

from .base import MessageHandler
from .echo import EchoMessageHandler
from .ping import PingMessageHandler

__all__ = [
    "MessageHandler",
    "EchoMessageHandler",
    "PingMessageHandler",
]
