"""Slack RTM Transport Layer - Module Exports"""

from .client import SlackApiError, SlackWebClient
from .rtm import MessageIdSequence, RtmState, RtmWriteError, SlackRtmSession
from .schemas import (
    RtmConnectResponse,
    RtmMessageEvent,
    RtmMessageFrame,
    RtmPingFrame,
)

__all__ = [
    # Schemas
    "RtmMessageEvent",
    "RtmMessageFrame",
    "RtmPingFrame",
    "RtmConnectResponse",
    # Web API
    "SlackWebClient",
    "SlackApiError",
    # Session
    "SlackRtmSession",
    "RtmState",
    "RtmWriteError",
    "MessageIdSequence",
]
