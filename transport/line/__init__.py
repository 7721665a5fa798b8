"""LINE Transport Layer - Module Exports"""

from .normalize import PayloadDecodeError, decode_events
from .schemas import (
    LineCallbackRequest,
    LineReplyRequest,
    LineTextMessage,
    LineTextMessageEvent,
    TextMessageContent,
)
from .security import SIGNATURE_HEADER, compute_signature, verify_signature
from .sender import LineReplySender, LineSenderError
from .webhook import router

__all__ = [
    # Schemas
    "LineCallbackRequest",
    "LineTextMessageEvent",
    "TextMessageContent",
    "LineReplyRequest",
    "LineTextMessage",
    # Decoding
    "decode_events",
    "PayloadDecodeError",
    # Security
    "verify_signature",
    "compute_signature",
    "SIGNATURE_HEADER",
    # Sender
    "LineReplySender",
    "LineSenderError",
    # Router
    "router",
]
